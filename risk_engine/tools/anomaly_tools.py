"""Rule-based anomaly detection on relationship edges"""

from typing import Iterable, List, Optional, Tuple
from risk_engine.constants import AnomalyLabel
from risk_engine.models.rules import AnomalyRules, DEFAULT_ANOMALY_RULES
from risk_engine.models.summary import EntitySummary, RelationshipEdge
from risk_engine.utils.logging import get_logger

logger = get_logger(__name__)


def classify_edge(
    entity_avg_risk: float,
    edge: RelationshipEdge,
    rules: AnomalyRules = DEFAULT_ANOMALY_RULES
) -> Optional[AnomalyLabel]:
    """
    Evaluate the anomaly rules for one edge, first match wins:

    1. Dual High Risk: entity and edge averages both >= dual_high_risk_min
    2. Risk Spike vs Entity: edge average >= entity average + risk_spike_delta
    3. Repeated High-Risk Exposure: edge count >= repeated_min_count and
       edge average >= repeated_min_risk

    Returns:
        The matching label, or None
    """
    if entity_avg_risk >= rules.dual_high_risk_min and edge.avg_risk >= rules.dual_high_risk_min:
        return AnomalyLabel.DUAL_HIGH_RISK
    if edge.avg_risk >= entity_avg_risk + rules.risk_spike_delta:
        return AnomalyLabel.RISK_SPIKE
    if edge.count >= rules.repeated_min_count and edge.avg_risk >= rules.repeated_min_risk:
        return AnomalyLabel.REPEATED_HIGH_RISK
    return None


def detect_anomalies(summary: EntitySummary, rules: AnomalyRules = DEFAULT_ANOMALY_RULES) -> None:
    """
    Label every edge of a finished entity summary in place.

    Works the same for employees (scanning customers) and customers
    (scanning employees). Labels are overwritten, never accumulated.
    """
    flagged = 0
    for edge in summary.counterparties.values():
        edge.anomaly = classify_edge(summary.avg_risk, edge, rules)
        if edge.anomaly is not None:
            flagged += 1

    if flagged:
        logger.debug(
            "Anomalies detected",
            entity_kind=summary.kind.value,
            entity_id=summary.id,
            flagged=flagged
        )


def collect_anomalies(summaries: Iterable[EntitySummary]) -> List[Tuple[EntitySummary, RelationshipEdge]]:
    """(entity, edge) pairs that carry an anomaly label, in entity then first-seen order"""
    return [
        (summary, edge)
        for summary in summaries
        for edge in summary.counterparties.values()
        if edge.anomaly is not None
    ]
