"""Constants and enums for the risk analytics engine"""

from enum import Enum


class RiskLevel(str, Enum):
    """Risk category derived from a numeric score"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class RiskBand(str, Enum):
    """Risk band selector used by the filter views"""
    ALL = "ALL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class CaseStatus(str, Enum):
    """Investigation status of a transaction"""
    OPEN = "OPEN"
    PENDING = "PENDING"
    CLOSED = "CLOSED"

    @property
    def label(self) -> str:
        return CASE_STATUS_LABELS[self]


CASE_STATUS_LABELS = {
    CaseStatus.OPEN: "Open",
    CaseStatus.PENDING: "Investigating",
    CaseStatus.CLOSED: "Cleared",
}


class TransactionType(str, Enum):
    """Base transaction types"""
    PURCHASE = "Purchase"
    REFUND = "Refund"
    EXCHANGE = "Exchange"
    VOID = "Void"
    NO_SALE = "No-Sale"
    UNKNOWN = "Unknown"


class AnomalyLabel(str, Enum):
    """Anomaly labels assigned to relationship edges"""
    DUAL_HIGH_RISK = "Dual High Risk"
    RISK_SPIKE = "Risk Spike vs Entity"
    REPEATED_HIGH_RISK = "Repeated High-Risk Exposure"


class EntityKind(str, Enum):
    """Which side of the employee/customer relationship a summary describes"""
    EMPLOYEE = "employee"
    CUSTOMER = "customer"


FRAUD_DISPLAY_TYPE = "Fraud"

# Risk level thresholds
DEFAULT_HIGH_RISK_THRESHOLD = 75
DEFAULT_MEDIUM_RISK_THRESHOLD = 40

# Anomaly rules
DEFAULT_DUAL_HIGH_RISK_THRESHOLD = 75
DEFAULT_RISK_SPIKE_DELTA = 20
DEFAULT_REPEATED_EXPOSURE_MIN_COUNT = 5
DEFAULT_REPEATED_EXPOSURE_MIN_RISK = 60

# Views
DEFAULT_TOP_N = 3
