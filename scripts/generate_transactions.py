#!/usr/bin/env python3
"""
Generate a synthetic retail transaction feed for the risk analytics engine.

The feed mixes ordinary traffic with a few planted patterns:
- A colluding employee/customer pair with consistently high scores
- A customer who keeps returning to the same cashier at moderate-high risk
- Unscored and customer-less transactions (excluded from aggregation)

A metadata.json file next to the feed lists the planted pairs.
"""

import sys
import json
import argparse
from pathlib import Path
from datetime import datetime, timedelta
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

# Add parent directory to path for imports
sys.path.append(str(Path(__file__).parent.parent))

from risk_engine.constants import TransactionType

# Configuration
RANDOM_SEED = 42
OUTPUT_DIR = Path(__file__).parent.parent / "data" / "generated"

EMPLOYEES = [
    {"id": 30, "firstName": "Bob", "lastName": "Johnson", "role": "Cashier"},
    {"id": 31, "firstName": "Alice", "lastName": "Smith", "role": "Manager"},
    {"id": 32, "firstName": "John", "lastName": "Doe", "role": "Cashier"},
    {"id": 33, "firstName": "Jane", "lastName": "Roe", "role": "Manager"},
    {"id": 34, "firstName": "Luis", "lastName": "Ortega", "role": "Cashier"},
]

CUSTOMER_NAMES = [
    "Dana White", "Evan Park", "Farah Ali", "Grace Lin", "Hugo Brandt",
    "Ines Moreau", "Jonah Reed", "Keiko Sato", "Liam Walsh", "Maya Cohen",
]

CATALOG = [
    ("Laptop", 1200), ("Headphones", 300), ("Monitor", 220), ("Gift Card", 500),
    ("USB Cable", 10), ("Phone Case", 15), ("Tablet", 650), ("Keyboard", 100),
]

BASE_TYPES = [t.value for t in TransactionType if t != TransactionType.UNKNOWN]
TYPE_WEIGHTS = [0.70, 0.12, 0.08, 0.05, 0.05]


def _line_items(rng: np.random.Generator, start_id: int) -> List[Dict]:
    items = []
    for offset in range(int(rng.integers(1, 4))):
        name, price = CATALOG[int(rng.integers(len(CATALOG)))]
        quantity = int(rng.integers(1, 3))
        items.append({
            "id": start_id + offset,
            "name": name,
            "quantity": quantity,
            "unitPrice": price,
            "total": quantity * price,
        })
    return items


def _transaction(
    rng: np.random.Generator,
    txn_id: int,
    created_at: datetime,
    employee: Dict,
    customer: Dict,
    risk_score
) -> Dict:
    items = _line_items(rng, txn_id * 10)
    txn_type = str(rng.choice(BASE_TYPES, p=TYPE_WEIGHTS))
    return {
        "id": txn_id,
        "createdAt": created_at.isoformat(timespec="seconds"),
        "employee": employee,
        "customer": customer,
        "items": items,
        "totalAmount": float(sum(i["total"] for i in items)),
        "riskScore": risk_score,
        "type": txn_type,
        "isFraud": bool(risk_score is not None and risk_score >= 95 and txn_type == "Refund"),
        "caseStatus": "OPEN",
        "caseNotes": [],
    }


def generate_feed(count: int, seed: int = RANDOM_SEED) -> Tuple[List[Dict], Dict]:
    """
    Build the synthetic feed.

    Returns:
        (records, metadata)
    """
    rng = np.random.default_rng(seed)
    customers = [{"id": 500 + i, "name": name} for i, name in enumerate(CUSTOMER_NAMES)]
    start = datetime(2025, 2, 1, 9, 0, 0)

    records = []
    txn_id = 1
    for _ in range(count):
        employee = EMPLOYEES[int(rng.integers(len(EMPLOYEES)))]
        customer = customers[int(rng.integers(len(customers)))]
        if rng.random() < 0.05:
            customer = None
        score = None if rng.random() < 0.05 else round(float(np.clip(rng.normal(35, 15), 0, 100)), 1)
        created_at = start + timedelta(minutes=int(rng.integers(0, 60 * 24 * 28)))
        records.append(_transaction(rng, txn_id, created_at, employee, customer, score))
        txn_id += 1

    # Colluding pair: high scores on both sides
    colluder, accomplice = EMPLOYEES[0], customers[0]
    for _ in range(6):
        score = round(float(rng.uniform(88, 99)), 1)
        created_at = start + timedelta(minutes=int(rng.integers(0, 60 * 24 * 28)))
        records.append(_transaction(rng, txn_id, created_at, colluder, accomplice, score))
        txn_id += 1

    # Repeat visitor: many moderate-high transactions with one cashier
    cashier, regular = EMPLOYEES[2], customers[3]
    for _ in range(7):
        score = round(float(rng.uniform(60, 70)), 1)
        created_at = start + timedelta(minutes=int(rng.integers(0, 60 * 24 * 28)))
        records.append(_transaction(rng, txn_id, created_at, cashier, regular, score))
        txn_id += 1

    records.sort(key=lambda r: r["createdAt"])

    metadata = {
        "seed": seed,
        "generated_at": datetime.now().isoformat(),
        "transaction_count": len(records),
        "planted_pairs": [
            {"employee_id": colluder["id"], "customer_id": accomplice["id"], "pattern": "colluding_pair"},
            {"employee_id": cashier["id"], "customer_id": regular["id"], "pattern": "repeat_visitor"},
        ],
    }
    return records, metadata


def main():
    parser = argparse.ArgumentParser(description="Generate a synthetic retail transaction feed")
    parser.add_argument("--count", type=int, default=200, help="Background transactions to generate")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Output directory")
    args = parser.parse_args()

    records, metadata = generate_feed(args.count, args.seed)

    args.output_dir.mkdir(parents=True, exist_ok=True)
    feed_path = args.output_dir / "transactions.json"
    pd.DataFrame(records).to_json(feed_path, orient="records", indent=2)

    with open(args.output_dir / "metadata.json", "w") as f:
        json.dump(metadata, f, indent=2)

    print(f"✅ Wrote {len(records)} transactions to {feed_path}")
    print(f"   Planted pairs: {[p['pattern'] for p in metadata['planted_pairs']]}")
    print(f"\nRun analytics with: TRANSACTIONS_FILE={feed_path} python -m risk_engine.main")


if __name__ == "__main__":
    main()
