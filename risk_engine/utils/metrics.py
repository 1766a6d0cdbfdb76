"""Prometheus metrics definitions"""

from prometheus_client import Counter, Histogram, Gauge


# Aggregation
transactions_aggregated = Counter(
    'risk_transactions_aggregated_total',
    'Qualifying transactions folded into relationship aggregates'
)

transactions_skipped = Counter(
    'risk_transactions_skipped_total',
    'Transactions excluded from aggregation (missing employee, customer or score)'
)

aggregation_latency = Histogram(
    'risk_aggregation_latency_seconds',
    'Time to build both relationship views',
    buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1, 5]
)

# Anomalies
anomalies_flagged = Gauge(
    'risk_anomalies_flagged',
    'Anomalous relationship edges in the latest graph build',
    labelnames=['label']
)

# Case management
case_updates = Counter(
    'risk_case_updates_total',
    'Case field updates applied to transactions',
    labelnames=['kind']  # status, note
)

analytics_runs = Counter(
    'risk_analytics_runs_total',
    'Completed analytics cycles',
    labelnames=['status']  # completed, failed
)
