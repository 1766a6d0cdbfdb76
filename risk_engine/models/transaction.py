"""Transaction data model"""

import math
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Optional, List, Dict, Any
from risk_engine.constants import CaseStatus, TransactionType

# Raw values seen in the transaction feed, keyed by lower-cased text
TYPE_ALIASES = {
    "purchase": TransactionType.PURCHASE,
    "refund": TransactionType.REFUND,
    "exchange": TransactionType.EXCHANGE,
    "void": TransactionType.VOID,
    "no-sale": TransactionType.NO_SALE,
    "no sale": TransactionType.NO_SALE,
    "no_sale": TransactionType.NO_SALE,
    "nosale": TransactionType.NO_SALE,
    "unknown": TransactionType.UNKNOWN,
}

CASE_STATUS_ALIASES = {
    "open": CaseStatus.OPEN,
    "pending": CaseStatus.PENDING,
    "investigating": CaseStatus.PENDING,
    "closed": CaseStatus.CLOSED,
    "cleared": CaseStatus.CLOSED,
}


class Employee(BaseModel):
    """Employee who rang up a transaction"""

    id: int = Field(..., description="Employee ID")
    first_name: str = Field(..., alias="firstName", description="First name")
    last_name: str = Field(..., alias="lastName", description="Last name")
    role: str = Field(default="", description="Job role (Cashier, Manager, ...)")
    email: Optional[str] = Field(None, description="Contact email")

    class Config:
        frozen = True
        populate_by_name = True

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Customer(BaseModel):
    """Customer attached to a transaction"""

    id: int = Field(..., description="Customer ID")
    name: str = Field(..., description="Customer display name")
    email: Optional[str] = Field(None, description="Contact email")

    class Config:
        frozen = True
        populate_by_name = True

    @property
    def display_name(self) -> str:
        return self.name


class TransactionItem(BaseModel):
    """Line item of a transaction"""

    id: int = Field(..., description="Line item ID")
    item_id: Optional[int] = Field(None, alias="itemId", description="Catalog item ID")
    name: str = Field(default="", description="Item name")
    quantity: int = Field(default=1, ge=0, description="Quantity sold")
    unit_price: float = Field(default=0.0, alias="unitPrice", description="Unit price")
    total: float = Field(default=0.0, description="Line total")
    shrink_risk: Optional[float] = Field(None, alias="shrinkRisk", description="Item-level shrink risk")

    class Config:
        frozen = True
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def flatten_nested_item(cls, data: Any) -> Any:
        """Flatten {'item': {'id', 'name', 'price'}} rows into line item fields"""
        if not isinstance(data, dict) or not isinstance(data.get("item"), dict):
            return data

        data = dict(data)
        item = data.pop("item")
        data.setdefault("itemId", item.get("id"))
        data.setdefault("name", item.get("name", ""))
        if "unitPrice" not in data and "unit_price" not in data and "price" in item:
            data["unitPrice"] = item["price"]
        if "total" not in data:
            unit_price = data.get("unitPrice", data.get("unit_price", 0)) or 0
            data["total"] = (data.get("quantity") or 0) * unit_price
        return data


class Transaction(BaseModel):
    """
    Retail transaction.

    Only the case fields (case_status, case_notes, last_updated) may change
    after creation; everything else is frozen.
    """

    id: int = Field(..., frozen=True, description="Unique transaction ID")
    created_at: Optional[datetime] = Field(None, alias="createdAt", frozen=True, description="Creation time")
    employee: Optional[Employee] = Field(None, frozen=True, description="Employee who processed the transaction")
    customer: Optional[Customer] = Field(None, frozen=True, description="Customer, if known")
    total_amount: float = Field(default=0.0, ge=0, alias="totalAmount", frozen=True, description="Transaction total")
    type: TransactionType = Field(default=TransactionType.UNKNOWN, frozen=True, description="Base transaction type")
    is_fraud: bool = Field(default=False, alias="isFraud", frozen=True, description="Fraud flag, overrides type for display")
    risk_score: Optional[float] = Field(None, alias="riskScore", frozen=True, description="Risk score 0-100, None when unscored")
    fraud_type: Optional[str] = Field(None, alias="fraudType", frozen=True, description="Fraud pattern name")
    fraud_explanation: Optional[str] = Field(None, alias="fraudExplanation", frozen=True, description="Fraud explanation")
    items: List[TransactionItem] = Field(default_factory=list, frozen=True, description="Line items")
    case_status: CaseStatus = Field(default=CaseStatus.OPEN, alias="caseStatus", description="Investigation status")
    case_notes: List[str] = Field(default_factory=list, alias="caseNotes", description="Investigator notes, append-only")
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated", description="Last case update")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "id": 193,
                "employee": {"id": 30, "firstName": "Bob", "lastName": "Johnson", "role": "Cashier"},
                "customer": {"id": 7, "name": "Dana White"},
                "totalAmount": 1200.0,
                "type": "Refund",
                "isFraud": True,
                "riskScore": 98,
                "fraudType": "Suspicious Refund Pattern",
                "items": [{"id": 10, "name": "Laptop", "quantity": 1, "unitPrice": 1200, "total": 1200}],
                "caseStatus": "OPEN",
                "caseNotes": []
            }
        }

    @model_validator(mode="before")
    @classmethod
    def normalize_feed_values(cls, data: Any) -> Any:
        """Map legacy feed values (lower-case types, 'fraud', 'cleared', NaN scores)"""
        if not isinstance(data, dict):
            return data

        data = dict(data)

        raw_type = data.get("type")
        if isinstance(raw_type, str) and not isinstance(raw_type, TransactionType):
            key = raw_type.strip().lower()
            if key == "fraud":
                data["isFraud"] = True
                data.pop("is_fraud", None)
                data["type"] = TransactionType.UNKNOWN
            else:
                data["type"] = TYPE_ALIASES.get(key, TransactionType.UNKNOWN)
        elif raw_type is None:
            data.pop("type", None)

        for key in ("caseStatus", "case_status"):
            raw_status = data.get(key)
            if isinstance(raw_status, str) and not isinstance(raw_status, CaseStatus):
                data[key] = CASE_STATUS_ALIASES.get(raw_status.strip().lower(), raw_status)
            elif raw_status is None:
                data.pop(key, None)

        for key in ("riskScore", "risk_score"):
            score = data.get(key)
            if isinstance(score, float) and math.isnan(score):
                data[key] = None

        for key in ("caseNotes", "case_notes", "items"):
            if key in data and data[key] is None:
                data.pop(key)

        return data

    def to_dict(self) -> Dict[str, Any]:
        """JSON-shaped dict using the camelCase field names"""
        return self.model_dump(mode="json", by_alias=True)
