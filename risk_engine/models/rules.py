"""Threshold rule sets for classification and anomaly detection"""

from pydantic import BaseModel, Field
from typing import Dict, Any
from risk_engine.constants import (
    RiskLevel,
    DEFAULT_HIGH_RISK_THRESHOLD,
    DEFAULT_MEDIUM_RISK_THRESHOLD,
    DEFAULT_DUAL_HIGH_RISK_THRESHOLD,
    DEFAULT_RISK_SPIKE_DELTA,
    DEFAULT_REPEATED_EXPOSURE_MIN_COUNT,
    DEFAULT_REPEATED_EXPOSURE_MIN_RISK,
)


class RiskThresholds(BaseModel):
    """Score boundaries for the Low / Medium / High levels"""

    high: float = Field(default=DEFAULT_HIGH_RISK_THRESHOLD, description="Scores at or above are High")
    medium: float = Field(default=DEFAULT_MEDIUM_RISK_THRESHOLD, description="Scores at or above are Medium")

    class Config:
        frozen = True

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "RiskThresholds":
        return cls(**(config.get('risk_levels') or {}))

    def classify(self, score: float) -> RiskLevel:
        """
        Map a risk score to Low / Medium / High.

        Out-of-range scores are not rejected; the thresholds apply as-is.
        """
        if score >= self.high:
            return RiskLevel.HIGH
        if score >= self.medium:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW


class AnomalyRules(BaseModel):
    """Ordered anomaly rule parameters, shared by the employee and customer views"""

    dual_high_risk_min: float = Field(default=DEFAULT_DUAL_HIGH_RISK_THRESHOLD)
    risk_spike_delta: float = Field(default=DEFAULT_RISK_SPIKE_DELTA)
    repeated_min_count: int = Field(default=DEFAULT_REPEATED_EXPOSURE_MIN_COUNT)
    repeated_min_risk: float = Field(default=DEFAULT_REPEATED_EXPOSURE_MIN_RISK)

    class Config:
        frozen = True

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "AnomalyRules":
        """
        Build rules from the 'anomaly_rules' section of rules.yaml

        Missing keys fall back to the defaults.
        """
        section = config.get('anomaly_rules') or {}
        values = {}

        dual = section.get('dual_high_risk') or {}
        if 'min_risk' in dual:
            values['dual_high_risk_min'] = dual['min_risk']

        spike = section.get('risk_spike') or {}
        if 'delta' in spike:
            values['risk_spike_delta'] = spike['delta']

        repeated = section.get('repeated_exposure') or {}
        if 'min_count' in repeated:
            values['repeated_min_count'] = repeated['min_count']
        if 'min_risk' in repeated:
            values['repeated_min_risk'] = repeated['min_risk']

        return cls(**values)


DEFAULT_RISK_THRESHOLDS = RiskThresholds()
DEFAULT_ANOMALY_RULES = AnomalyRules()
