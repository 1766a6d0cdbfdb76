"""Unit tests for relationship aggregation and anomaly detection"""

import random
import pytest
from risk_engine.constants import AnomalyLabel, EntityKind
from risk_engine.models.rules import AnomalyRules
from risk_engine.models.summary import EntitySummary, RelationshipEdge
from risk_engine.tools.aggregation_tools import aggregate, build_relationship_graph, is_qualifying
from risk_engine.tools.anomaly_tools import classify_edge, detect_anomalies, collect_anomalies


# Aggregation Tests

def test_end_to_end_example_without_anomaly(make_txn):
    """E1 -> C1 (80, 90), E1 -> C2 (30): averages and no anomaly on the employee side"""
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=80),
        make_txn(employee_id=1, customer_id=1, risk_score=90),
        make_txn(employee_id=1, customer_id=2, risk_score=30),
    ]

    employees, customers = build_relationship_graph(txns)

    e1 = employees[1]
    assert e1.total_transactions == 3
    assert e1.avg_risk == pytest.approx(200 / 3)
    assert e1.counterparties[1].count == 2
    assert e1.counterparties[1].avg_risk == pytest.approx(85)
    assert e1.counterparties[2].count == 1
    assert e1.counterparties[2].avg_risk == pytest.approx(30)
    assert e1.counterparties[1].anomaly is None
    assert e1.counterparties[2].anomaly is None

    # Same rules from the customer side: C1 avg 85 and edge 85 are both high
    assert customers[1].counterparties[1].anomaly == AnomalyLabel.DUAL_HIGH_RISK
    assert customers[2].counterparties[1].anomaly is None


def test_end_to_end_example_with_risk_spike(make_txn):
    """Raising C1's scores to 95/95 makes the E1 <-> C1 edge a risk spike"""
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=95),
        make_txn(employee_id=1, customer_id=1, risk_score=95),
        make_txn(employee_id=1, customer_id=2, risk_score=30),
    ]

    employees, _ = build_relationship_graph(txns)

    e1 = employees[1]
    assert e1.avg_risk == pytest.approx(220 / 3)
    assert e1.counterparties[1].anomaly == AnomalyLabel.RISK_SPIKE
    assert e1.counterparties[2].anomaly is None


def test_mean_matches_arithmetic_mean_in_any_order(make_txn):
    """Entity and edge averages equal the plain mean regardless of input order"""
    rng = random.Random(7)
    txns = [
        make_txn(employee_id=rng.choice([1, 2]), customer_id=rng.choice([1, 2, 3]), risk_score=rng.uniform(0, 100))
        for _ in range(40)
    ]
    shuffled = list(txns)
    rng.shuffle(shuffled)

    for batch in (txns, shuffled):
        employees, customers = aggregate(batch)
        for emp_id, summary in employees.items():
            scores = [t.risk_score for t in txns if t.employee.id == emp_id]
            assert summary.total_transactions == len(scores)
            assert summary.avg_risk == pytest.approx(sum(scores) / len(scores))
            for cust_id, edge in summary.counterparties.items():
                pair = [t.risk_score for t in txns if t.employee.id == emp_id and t.customer.id == cust_id]
                assert edge.count == len(pair)
                assert edge.avg_risk == pytest.approx(sum(pair) / len(pair))
        for cust_id, summary in customers.items():
            scores = [t.risk_score for t in txns if t.customer.id == cust_id]
            assert summary.avg_risk == pytest.approx(sum(scores) / len(scores))


def test_mirrored_edges_are_identical(make_txn):
    """Employee-side and customer-side copies of an edge agree exactly"""
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=33.3),
        make_txn(employee_id=1, customer_id=1, risk_score=71.9),
        make_txn(employee_id=2, customer_id=1, risk_score=12.5),
        make_txn(employee_id=1, customer_id=1, risk_score=58.1),
    ]

    employees, customers = aggregate(txns)

    emp_edge = employees[1].counterparties[1]
    cust_edge = customers[1].counterparties[1]
    assert emp_edge.count == cust_edge.count == 3
    assert emp_edge.avg_risk == cust_edge.avg_risk


def test_non_qualifying_transactions_are_excluded(make_txn):
    """Missing score, employee or customer contributes to no aggregate"""
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=None),
        make_txn(employee_id=2, customer_id=None, risk_score=90),
        make_txn(employee_id=None, customer_id=3, risk_score=90),
        make_txn(employee_id=3, customer_id=2, risk_score=40),
    ]

    employees, customers = aggregate(txns)

    assert list(employees) == [3]
    assert list(customers) == [2]
    assert employees[3].avg_risk == 40
    assert [is_qualifying(t) for t in txns] == [False, False, False, True]


def test_zero_score_is_counted(make_txn):
    """A score of 0 is a signal, unlike a missing score"""
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=0),
        make_txn(employee_id=1, customer_id=1, risk_score=None),
        make_txn(employee_id=1, customer_id=1, risk_score=60),
    ]

    employees, _ = aggregate(txns)

    assert employees[1].total_transactions == 2
    assert employees[1].avg_risk == pytest.approx(30)


def test_counterparties_in_first_seen_order(make_txn):
    """Counterparty order follows first appearance in the feed"""
    txns = [
        make_txn(employee_id=1, customer_id=3, risk_score=10),
        make_txn(employee_id=1, customer_id=1, risk_score=20),
        make_txn(employee_id=1, customer_id=3, risk_score=30),
        make_txn(employee_id=1, customer_id=2, risk_score=40),
    ]

    employees, _ = aggregate(txns)

    assert [e.counterparty_id for e in employees[1].edges] == [3, 1, 2]


def test_aggregate_accepts_dict_records():
    """camelCase dicts from the transactions feed are accepted"""
    records = [
        {
            "id": 1,
            "employee": {"id": 30, "firstName": "Bob", "lastName": "Johnson", "role": "Cashier"},
            "customer": {"id": 7, "name": "Dana White"},
            "totalAmount": 120,
            "riskScore": 70,
            "type": "Refund",
        },
        {
            "id": 2,
            "employee": {"id": 30, "firstName": "Bob", "lastName": "Johnson", "role": "Cashier"},
            "customer": None,
            "totalAmount": 40,
            "riskScore": 10,
            "type": "Purchase",
        },
    ]

    employees, customers = aggregate(records)

    assert employees[30].name == "Bob Johnson"
    assert employees[30].total_transactions == 1
    assert customers[7].counterparties[30].name == "Bob Johnson"


def test_recomputation_is_idempotent(make_txn):
    """Two runs over the same input give identical summaries and labels"""
    txns = [make_txn(employee_id=1, customer_id=1, risk_score=90) for _ in range(5)]
    txns += [make_txn(employee_id=1, customer_id=2, risk_score=20)]

    first = build_relationship_graph(txns)
    second = build_relationship_graph(txns)

    for a, b in zip(first, second):
        assert [s.to_dict() for s in a.values()] == [s.to_dict() for s in b.values()]


def test_empty_input():
    employees, customers = build_relationship_graph([])
    assert employees == {}
    assert customers == {}


# Anomaly Detection Tests

def test_dual_high_risk_wins_over_spike():
    """When rule 1 and rule 2 both hold, rule 1's label is used"""
    edge = RelationshipEdge(counterparty_id=1, name="Carla Reyes", count=1, avg_risk=100)

    # entity 80 >= 75, edge 100 >= 75, and 100 >= 80 + 20
    assert classify_edge(80, edge) == AnomalyLabel.DUAL_HIGH_RISK


def test_dual_high_risk_wins_through_aggregation(make_txn):
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=100),
        make_txn(employee_id=1, customer_id=2, risk_score=60),
    ]

    employees, _ = build_relationship_graph(txns)

    assert employees[1].avg_risk == pytest.approx(80)
    assert employees[1].counterparties[1].anomaly == AnomalyLabel.DUAL_HIGH_RISK
    assert employees[1].counterparties[2].anomaly is None


def test_repeated_high_risk_exposure(make_txn):
    """Five transactions at 60 with nothing else triggers rule 3 only"""
    txns = [make_txn(employee_id=2, customer_id=3, risk_score=60) for _ in range(5)]

    employees, customers = build_relationship_graph(txns)

    assert employees[2].counterparties[3].anomaly == AnomalyLabel.REPEATED_HIGH_RISK
    assert customers[3].counterparties[2].anomaly == AnomalyLabel.REPEATED_HIGH_RISK


def test_repeated_exposure_needs_five_transactions(make_txn):
    txns = [make_txn(employee_id=2, customer_id=3, risk_score=60) for _ in range(4)]

    employees, _ = build_relationship_graph(txns)

    assert employees[2].counterparties[3].anomaly is None


def test_detect_anomalies_clears_stale_labels():
    """Recomputing replaces earlier labels instead of adding to them"""
    summary = EntitySummary(id=1, name="Erin Cole", kind=EntityKind.EMPLOYEE, total_transactions=1, avg_risk=30)
    edge = summary.edge_for(2, "Tom Becker")
    edge.count = 1
    edge.avg_risk = 30
    edge.anomaly = AnomalyLabel.DUAL_HIGH_RISK

    detect_anomalies(summary)

    assert edge.anomaly is None


def test_custom_rules_are_applied():
    """Thresholds come from the rule set, shared by both directions"""
    rules = AnomalyRules(risk_spike_delta=5)
    edge = RelationshipEdge(counterparty_id=1, name="Carla Reyes", count=1, avg_risk=56)

    assert classify_edge(50, edge) is None
    assert classify_edge(50, edge, rules) == AnomalyLabel.RISK_SPIKE


def test_collect_anomalies(make_txn):
    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=95),
        make_txn(employee_id=1, customer_id=1, risk_score=95),
        make_txn(employee_id=1, customer_id=2, risk_score=30),
    ]

    employees, _ = build_relationship_graph(txns)
    found = collect_anomalies(employees.values())

    assert len(found) == 1
    entity, edge = found[0]
    assert entity.id == 1
    assert edge.counterparty_id == 1
    assert edge.anomaly == AnomalyLabel.RISK_SPIKE


def test_anomaly_gauge_stable_across_rebuilds(make_txn):
    """Rebuilding the same graph reports the same anomaly counts"""
    from prometheus_client import REGISTRY

    txns = [
        make_txn(employee_id=1, customer_id=1, risk_score=95),
        make_txn(employee_id=1, customer_id=1, risk_score=95),
        make_txn(employee_id=1, customer_id=2, risk_score=30),
    ]

    def flagged(label):
        return REGISTRY.get_sample_value("risk_anomalies_flagged", {"label": label.value})

    for _ in range(3):
        build_relationship_graph(txns)
        assert flagged(AnomalyLabel.RISK_SPIKE) == 1
        assert flagged(AnomalyLabel.DUAL_HIGH_RISK) == 1
        assert flagged(AnomalyLabel.REPEATED_HIGH_RISK) == 0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
