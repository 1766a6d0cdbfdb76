"""Aggregated entity and relationship edge models"""

from pydantic import BaseModel, Field
from typing import Optional, Dict, List, Any
from risk_engine.constants import AnomalyLabel, EntityKind, RiskLevel
from risk_engine.models.rules import DEFAULT_RISK_THRESHOLDS


class RelationshipEdge(BaseModel):
    """Aggregated relationship between one employee and one customer, seen from one side"""

    counterparty_id: int = Field(..., description="ID of the entity on the other side")
    name: str = Field(..., description="Counterparty display name")
    count: int = Field(default=0, description="Qualifying transactions between the pair")
    avg_risk: float = Field(default=0.0, description="Running mean risk score of the pair")
    anomaly: Optional[AnomalyLabel] = Field(None, description="Anomaly label, recomputed per query")

    def add_score(self, score: float) -> None:
        """Fold one risk score into the running mean"""
        self.avg_risk = (self.avg_risk * self.count + score) / (self.count + 1)
        self.count += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.counterparty_id,
            "name": self.name,
            "count": self.count,
            "avgRisk": self.avg_risk,
            "anomaly": self.anomaly.value if self.anomaly else None,
        }


class EntitySummary(BaseModel):
    """Employee or customer summary with its counterparties in first-seen order"""

    id: int = Field(..., description="Employee or customer ID")
    name: str = Field(..., description="Display name")
    kind: EntityKind = Field(..., description="employee or customer")
    total_transactions: int = Field(default=0, description="Qualifying transactions counted")
    avg_risk: float = Field(default=0.0, description="Running mean risk score")
    counterparties: Dict[int, RelationshipEdge] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {
                "id": 30,
                "name": "Bob Johnson",
                "kind": "employee",
                "total_transactions": 3,
                "avg_risk": 66.67,
                "counterparties": {
                    "7": {"counterparty_id": 7, "name": "Dana White", "count": 2, "avg_risk": 85.0, "anomaly": None}
                }
            }
        }

    def add_score(self, score: float) -> None:
        """Fold one risk score into the entity's running mean"""
        self.avg_risk = (self.avg_risk * self.total_transactions + score) / (self.total_transactions + 1)
        self.total_transactions += 1

    def edge_for(self, counterparty_id: int, name: str) -> RelationshipEdge:
        """Return the edge to a counterparty, creating it on first sight"""
        edge = self.counterparties.get(counterparty_id)
        if edge is None:
            edge = RelationshipEdge(counterparty_id=counterparty_id, name=name)
            self.counterparties[counterparty_id] = edge
        return edge

    @property
    def edges(self) -> List[RelationshipEdge]:
        return list(self.counterparties.values())

    @property
    def risk_level(self) -> RiskLevel:
        return DEFAULT_RISK_THRESHOLDS.classify(self.avg_risk)

    def to_dict(self) -> Dict[str, Any]:
        """JSON shape consumed by the presentation layer"""
        key = "customers" if self.kind == EntityKind.EMPLOYEE else "employees"
        return {
            "id": self.id,
            "name": self.name,
            "totalTransactions": self.total_transactions,
            "avgRisk": self.avg_risk,
            "riskLevel": self.risk_level.value,
            key: [edge.to_dict() for edge in self.edges],
        }
