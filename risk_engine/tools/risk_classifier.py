"""Risk classification of scores and transactions"""

from typing import List, Optional
from risk_engine.constants import RiskLevel, RiskBand, FRAUD_DISPLAY_TYPE
from risk_engine.models.rules import RiskThresholds, DEFAULT_RISK_THRESHOLDS
from risk_engine.models.transaction import Transaction


def classify_risk(score: float, thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS) -> RiskLevel:
    """Map a risk score to Low / Medium / High"""
    return thresholds.classify(score)


def matches_risk_band(
    score: float,
    band: RiskBand,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> bool:
    """True if score falls inside band (ALL matches everything)"""
    band = RiskBand(band)
    if band == RiskBand.ALL:
        return True
    return classify_risk(score, thresholds).value.upper() == band.value


def display_type(transaction: Transaction) -> str:
    """Type label for display; the fraud flag overrides the base type"""
    if transaction.is_fraud:
        return FRAUD_DISPLAY_TYPE
    return transaction.type.value


def flag_reasons(
    transaction: Transaction,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> List[str]:
    """Human-readable reasons a transaction is flagged in the transaction list"""
    reasons = []
    if transaction.risk_score is not None and transaction.risk_score >= thresholds.high:
        reasons.append(f"High risk score (≥ {thresholds.high:g})")
    if transaction.is_fraud:
        reasons.append("Marked as fraud")
    return reasons


def transaction_risk_level(
    transaction: Transaction,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> Optional[RiskLevel]:
    """Risk level of a single transaction, None when it carries no score"""
    if transaction.risk_score is None:
        return None
    return classify_risk(transaction.risk_score, thresholds)
