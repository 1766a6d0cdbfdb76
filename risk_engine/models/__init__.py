"""Data models for the risk analytics engine"""

from .transaction import Transaction, Employee, Customer, TransactionItem
from .summary import EntitySummary, RelationshipEdge
from .rules import RiskThresholds, AnomalyRules, DEFAULT_RISK_THRESHOLDS, DEFAULT_ANOMALY_RULES

__all__ = [
    "Transaction",
    "Employee",
    "Customer",
    "TransactionItem",
    "EntitySummary",
    "RelationshipEdge",
    "RiskThresholds",
    "AnomalyRules",
    "DEFAULT_RISK_THRESHOLDS",
    "DEFAULT_ANOMALY_RULES",
]
