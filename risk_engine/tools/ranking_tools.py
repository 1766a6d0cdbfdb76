"""Ranking and filter views over aggregated summaries and transactions"""

from pydantic import BaseModel, Field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from risk_engine.constants import EntityKind, RiskBand, RiskLevel
from risk_engine.models.rules import RiskThresholds, DEFAULT_RISK_THRESHOLDS
from risk_engine.models.summary import EntitySummary, RelationshipEdge
from risk_engine.models.transaction import Transaction
from risk_engine.tools.aggregation_tools import is_qualifying
from risk_engine.tools.risk_classifier import classify_risk, matches_risk_band

Summaries = Union[Mapping[int, EntitySummary], Iterable[EntitySummary]]


class ViewOptions(BaseModel):
    """Filter and limit options for an entity view"""

    name_query: str = Field(default="", description="Case-insensitive name substring")
    risk_band: RiskBand = Field(default=RiskBand.ALL, description="Risk band filter")
    limit: Optional[int] = Field(None, description="Keep only the first N after ranking")


def _values(summaries: Summaries) -> List[EntitySummary]:
    if isinstance(summaries, Mapping):
        return list(summaries.values())
    return list(summaries)


def _name_matches(name: str, substring: str) -> bool:
    return substring.lower() in name.lower()


def rank_entities(summaries: Summaries) -> List[EntitySummary]:
    """Sort by avg risk descending, ties by ascending id"""
    return sorted(_values(summaries), key=lambda s: (-s.avg_risk, s.id))


def top_n(summaries: Summaries, n: int) -> List[EntitySummary]:
    """First min(n, count) entries of the ranking"""
    return rank_entities(summaries)[:max(n, 0)]


def filter_by_name(summaries: Summaries, substring: str) -> List[EntitySummary]:
    """Case-insensitive substring match on display name; empty matches all"""
    return [s for s in _values(summaries) if _name_matches(s.name, substring or "")]


def filter_by_risk_band(
    summaries: Summaries,
    band: RiskBand,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> List[EntitySummary]:
    """Keep entities whose avg risk falls in band"""
    return [s for s in _values(summaries) if matches_risk_band(s.avg_risk, band, thresholds)]


def filter_counterparties(
    source: Union[EntitySummary, Iterable[RelationshipEdge]],
    substring: str
) -> List[RelationshipEdge]:
    """Substring filter on counterparty names within one entity, first-seen order kept"""
    edges = source.edges if isinstance(source, EntitySummary) else list(source)
    return [e for e in edges if _name_matches(e.name, substring or "")]


def view(
    summaries: Summaries,
    options: Optional[ViewOptions] = None,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> List[EntitySummary]:
    """Name filter, band filter, ranking and optional limit, in that order"""
    options = options or ViewOptions()
    selected = filter_by_name(summaries, options.name_query)
    selected = filter_by_risk_band(selected, options.risk_band, thresholds)
    ranked = rank_entities(selected)
    if options.limit is not None:
        ranked = ranked[:max(options.limit, 0)]
    return ranked


def risk_band_counts(
    summaries: Summaries,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> Dict[str, int]:
    """Summary card counts: total and per risk level"""
    counts = {'total': 0, 'high': 0, 'medium': 0, 'low': 0}
    for summary in _values(summaries):
        counts['total'] += 1
        counts[classify_risk(summary.avg_risk, thresholds).value.lower()] += 1
    return counts


# Transaction-level views

def filter_transactions(
    transactions: Iterable[Transaction],
    min_risk: Optional[float] = None,
    max_risk: Optional[float] = None,
    txn_type: Optional[str] = None,
    employee_id: Optional[int] = None,
    customer_id: Optional[int] = None
) -> List[Transaction]:
    """
    Filter the transaction list.

    txn_type "purchases" keeps non-fraud transactions, "fraud" keeps fraud,
    anything else is compared to the base type case-insensitively.
    Unscored transactions are dropped whenever a risk bound is given.
    """
    result = []
    for txn in transactions:
        if min_risk is not None or max_risk is not None:
            if txn.risk_score is None:
                continue
            if min_risk is not None and txn.risk_score < min_risk:
                continue
            if max_risk is not None and txn.risk_score > max_risk:
                continue

        if txn_type:
            wanted = txn_type.strip().lower()
            if wanted == "purchases":
                if txn.is_fraud:
                    continue
            elif wanted == "fraud":
                if not txn.is_fraud:
                    continue
            elif txn.type.value.lower() != wanted:
                continue

        if employee_id is not None and (txn.employee is None or txn.employee.id != employee_id):
            continue
        if customer_id is not None and (txn.customer is None or txn.customer.id != customer_id):
            continue

        result.append(txn)
    return result


def risk_distribution(
    transactions: Iterable[Transaction],
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> Dict[str, int]:
    """Transaction counts per risk level; unscored ones are counted apart"""
    counts = {level.value.lower(): 0 for level in RiskLevel}
    counts['unscored'] = 0
    for txn in transactions:
        if txn.risk_score is None:
            counts['unscored'] += 1
        else:
            counts[classify_risk(txn.risk_score, thresholds).value.lower()] += 1
    return counts


def fraud_breakdown(transactions: Iterable[Transaction]) -> Dict[str, int]:
    """Purchases vs fraud split"""
    fraud = 0
    total = 0
    for txn in transactions:
        total += 1
        if txn.is_fraud:
            fraud += 1
    return {'purchases': total - fraud, 'fraud': fraud}


def dashboard_metrics(transactions: Iterable[Transaction]) -> Dict[str, Any]:
    """
    Headline KPIs for the dashboard.

    fraud_rate is a percentage of all transactions. avg_risk_score averages
    scored transactions only and is None when nothing carries a score.
    """
    total = 0
    fraud = 0
    scored = 0
    score_sum = 0.0
    for txn in transactions:
        total += 1
        if txn.is_fraud:
            fraud += 1
        if txn.risk_score is not None:
            scored += 1
            score_sum += txn.risk_score

    return {
        'total_transactions': total,
        'fraud_transactions': fraud,
        'fraud_rate': fraud / total * 100 if total else 0.0,
        'scored_transactions': scored,
        'avg_risk_score': score_sum / scored if scored else None,
    }


def entity_type_mix(
    transactions: Iterable[Transaction],
    kind: EntityKind,
    entity_ids: Optional[Iterable[int]] = None
) -> Dict[int, List[str]]:
    """
    Sorted 'fraud' / 'purchase' labels seen per employee or customer.

    Only qualifying transactions are counted, the same ones behind avg_risk.
    Result keys follow entity_ids when given, otherwise first-seen order.
    """
    kind = EntityKind(kind)
    seen: Dict[int, set] = {}
    for txn in transactions:
        if not is_qualifying(txn):
            continue
        entity = txn.employee if kind == EntityKind.EMPLOYEE else txn.customer
        seen.setdefault(entity.id, set()).add('fraud' if txn.is_fraud else 'purchase')

    if entity_ids is None:
        entity_ids = seen.keys()
    return {entity_id: sorted(seen.get(entity_id, ())) for entity_id in entity_ids}
