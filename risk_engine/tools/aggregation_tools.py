"""Employee <-> customer relationship aggregation"""

import time
from typing import Dict, Iterable, Tuple, Any, Union
from risk_engine.constants import AnomalyLabel, EntityKind
from risk_engine.models.rules import AnomalyRules, DEFAULT_ANOMALY_RULES
from risk_engine.models.summary import EntitySummary
from risk_engine.models.transaction import Transaction
from risk_engine.tools.anomaly_tools import collect_anomalies, detect_anomalies
from risk_engine.utils.logging import get_logger
from risk_engine.utils.metrics import (
    aggregation_latency,
    anomalies_flagged,
    transactions_aggregated,
    transactions_skipped
)

logger = get_logger(__name__)

SummaryMap = Dict[int, EntitySummary]


def is_qualifying(transaction: Transaction) -> bool:
    """
    A transaction counts towards aggregation only when it has an employee,
    a customer and a risk score.
    """
    return (
        transaction.employee is not None
        and transaction.customer is not None
        and transaction.risk_score is not None
    )


def _as_transaction(record: Union[Transaction, Dict[str, Any]]) -> Transaction:
    if isinstance(record, Transaction):
        return record
    return Transaction.model_validate(record)


def aggregate(transactions: Iterable[Union[Transaction, Dict[str, Any]]]) -> Tuple[SummaryMap, SummaryMap]:
    """
    Fold transactions into employee -> customers and customer -> employees views.

    Each qualifying transaction updates four running means: the employee, the
    customer, and the pair edge as seen from either side. Both edge copies see
    the same scores in the same order, so their averages are identical.

    Args:
        transactions: Transaction models or camelCase dicts

    Returns:
        (employee_summaries, customer_summaries), each keyed by entity id
    """
    start = time.time()
    employees: SummaryMap = {}
    customers: SummaryMap = {}
    included = 0
    skipped = 0

    for record in transactions:
        txn = _as_transaction(record)
        if not is_qualifying(txn):
            skipped += 1
            continue

        employee, customer, score = txn.employee, txn.customer, txn.risk_score

        emp_summary = employees.get(employee.id)
        if emp_summary is None:
            emp_summary = EntitySummary(id=employee.id, name=employee.display_name, kind=EntityKind.EMPLOYEE)
            employees[employee.id] = emp_summary

        cust_summary = customers.get(customer.id)
        if cust_summary is None:
            cust_summary = EntitySummary(id=customer.id, name=customer.display_name, kind=EntityKind.CUSTOMER)
            customers[customer.id] = cust_summary

        emp_summary.add_score(score)
        cust_summary.add_score(score)
        emp_summary.edge_for(customer.id, customer.display_name).add_score(score)
        cust_summary.edge_for(employee.id, employee.display_name).add_score(score)
        included += 1

    transactions_aggregated.inc(included)
    transactions_skipped.inc(skipped)
    aggregation_latency.observe(time.time() - start)

    logger.info(
        "Aggregated relationships",
        included=included,
        skipped=skipped,
        employees=len(employees),
        customers=len(customers)
    )
    return employees, customers


def build_relationship_graph(
    transactions: Iterable[Union[Transaction, Dict[str, Any]]],
    rules: AnomalyRules = DEFAULT_ANOMALY_RULES
) -> Tuple[SummaryMap, SummaryMap]:
    """Aggregate both views and annotate every edge with its anomaly label"""
    employees, customers = aggregate(transactions)

    for summary in employees.values():
        detect_anomalies(summary, rules)
    for summary in customers.values():
        detect_anomalies(summary, rules)

    # Labels present in this build, not a running total
    counts = {label: 0 for label in AnomalyLabel}
    for _, edge in collect_anomalies(list(employees.values()) + list(customers.values())):
        counts[edge.anomaly] += 1
    for label, count in counts.items():
        anomalies_flagged.labels(label=label.value).set(count)

    return employees, customers
