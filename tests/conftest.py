"""Shared fixtures for risk engine tests"""

import itertools
import pytest
from risk_engine.models.transaction import Transaction

EMPLOYEES = {
    1: {"id": 1, "firstName": "Erin", "lastName": "Cole", "role": "Cashier"},
    2: {"id": 2, "firstName": "Marco", "lastName": "Diaz", "role": "Manager"},
    3: {"id": 3, "firstName": "Priya", "lastName": "Shah", "role": "Cashier"},
}

CUSTOMERS = {
    1: {"id": 1, "name": "Carla Reyes"},
    2: {"id": 2, "name": "Tom Becker"},
    3: {"id": 3, "name": "Nina Olsen"},
}


@pytest.fixture
def make_txn():
    """Factory building Transaction models; employee/customer given by id, None to omit"""
    ids = itertools.count(1000)

    def _make(employee_id=1, customer_id=1, risk_score=50.0, **extra):
        data = {
            "id": extra.pop("id", next(ids)),
            "employee": EMPLOYEES[employee_id] if employee_id is not None else None,
            "customer": CUSTOMERS[customer_id] if customer_id is not None else None,
            "totalAmount": extra.pop("totalAmount", 100.0),
            "riskScore": risk_score,
            "type": extra.pop("type", "Purchase"),
        }
        data.update(extra)
        return Transaction.model_validate(data)

    return _make


@pytest.fixture
def sample_config():
    """In-memory copy of config/rules.yaml"""
    return {
        "version": "1.0",
        "risk_levels": {"high": 75, "medium": 40},
        "anomaly_rules": {
            "dual_high_risk": {"min_risk": 75},
            "risk_spike": {"delta": 20},
            "repeated_exposure": {"min_count": 5, "min_risk": 60},
        },
        "views": {"top_n": 3},
    }
