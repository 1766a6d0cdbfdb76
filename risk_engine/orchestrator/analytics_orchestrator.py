"""Analytics orchestrator - runs one full recomputation over a transaction snapshot"""

import uuid
import time
from typing import Dict, Any, Iterable, Optional, Union
from risk_engine.constants import DEFAULT_TOP_N, EntityKind
from risk_engine.models.rules import AnomalyRules, RiskThresholds
from risk_engine.models.transaction import Transaction
from risk_engine.orchestrator.case_manager import CaseLifecycleManager
from risk_engine.tools.aggregation_tools import build_relationship_graph
from risk_engine.tools.anomaly_tools import collect_anomalies
from risk_engine.tools.ranking_tools import (
    ViewOptions,
    view,
    top_n,
    risk_band_counts,
    risk_distribution,
    fraud_breakdown,
    dashboard_metrics,
    entity_type_mix
)
from risk_engine.utils.config_loader import load_config, get_section
from risk_engine.utils.logging import get_logger
from risk_engine.utils.metrics import analytics_runs

logger = get_logger(__name__)


class RiskAnalyticsOrchestrator:
    """Coordinates aggregation, anomaly detection and the ranked views"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else load_config()
        self.thresholds = RiskThresholds.from_config(self.config)
        self.rules = AnomalyRules.from_config(self.config)
        self.top_n = int(get_section(self.config, 'views').get('top_n', DEFAULT_TOP_N))
        self.case_manager = CaseLifecycleManager()

    def run_analytics_cycle(
        self,
        transactions: Iterable[Union[Transaction, Dict[str, Any]]],
        employee_options: Optional[ViewOptions] = None,
        customer_options: Optional[ViewOptions] = None
    ) -> Dict[str, Any]:
        """
        Recompute every derived view from the full transaction set

        Args:
            transactions: Materialized transaction snapshot
            employee_options: Filters for the employee view
            customer_options: Filters for the customer view

        Returns:
            Summary dictionary with results
        """
        run_id = str(uuid.uuid4())
        start_time = time.time()
        run_logger = logger.bind(run_id=run_id)
        run_logger.info("Starting analytics run")

        try:
            snapshot = [
                t if isinstance(t, Transaction) else Transaction.model_validate(t)
                for t in transactions
            ]
            self.case_manager.register(snapshot)

            employees, customers = build_relationship_graph(snapshot, self.rules)
            top_employees = top_n(employees, self.top_n)
            top_customers = top_n(customers, self.top_n)
            anomalies = collect_anomalies(list(employees.values()) + list(customers.values()))

            results = {
                'run_id': run_id,
                'status': 'completed',
                'transaction_count': len(snapshot),
                'employee_count': len(employees),
                'customer_count': len(customers),
                'employees': view(employees, employee_options, self.thresholds),
                'customers': view(customers, customer_options, self.thresholds),
                'top_employees': top_employees,
                'top_customers': top_customers,
                'top_employee_types': entity_type_mix(
                    snapshot, EntityKind.EMPLOYEE, [s.id for s in top_employees]
                ),
                'top_customer_types': entity_type_mix(
                    snapshot, EntityKind.CUSTOMER, [s.id for s in top_customers]
                ),
                'employee_band_counts': risk_band_counts(employees, self.thresholds),
                'customer_band_counts': risk_band_counts(customers, self.thresholds),
                'anomalies': [
                    {
                        'entity_kind': entity.kind.value,
                        'entity_id': entity.id,
                        'entity_name': entity.name,
                        'counterparty_id': edge.counterparty_id,
                        'counterparty_name': edge.name,
                        'label': edge.anomaly.value,
                    }
                    for entity, edge in anomalies
                ],
                'risk_distribution': risk_distribution(snapshot, self.thresholds),
                'fraud_breakdown': fraud_breakdown(snapshot),
                'dashboard': dashboard_metrics(snapshot),
                'duration_seconds': time.time() - start_time,
            }

            analytics_runs.labels(status='completed').inc()
            run_logger.info(
                "Analytics run complete",
                transactions=len(snapshot),
                anomalies=len(anomalies)
            )
            return results

        except Exception as e:
            analytics_runs.labels(status='failed').inc()
            run_logger.error(f"Analytics run failed: {e}")
            raise
