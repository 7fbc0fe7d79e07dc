from __future__ import annotations

from decimal import Decimal
from typing import Protocol

METRICS = ("cashflow", "income", "expense")

CASHFLOW_SURPLUS = (
    "You are cashflow positive with {current} left over this month.",
    "That is {diff_average} away from your trailing average of {average}.",
    "Last month closed with a net flow of {previous}.",
    "Keep routing the surplus toward debts or savings.",
)
CASHFLOW_DEFICIT = (
    "You are running a deficit of {current} this month.",
    "Your trailing average net flow is {average}, {diff_average} away from today.",
    "Last month closed with a net flow of {previous}.",
    "Trim discretionary spending to get back above zero.",
)
INCOME_GROWTH = (
    "Income rose to {current} this month.",
    "That is {diff_previous} more than last month's {previous}.",
    "Your trailing average income is {average}.",
    "Consider putting the extra toward outstanding debts.",
)
INCOME_DECLINE = (
    "Income dropped to {current} this month.",
    "That is {diff_previous} less than last month's {previous}.",
    "Your trailing average income is {average}.",
    "Plan this month's spending around the lower figure.",
)
EXPENSE_INCREASE = (
    "Spending climbed to {current} this month.",
    "That is {diff_previous} more than last month's {previous}.",
    "Your trailing average spend is {average}.",
    "Review the largest expenses before the month closes.",
)
EXPENSE_DECREASE = (
    "Spending eased to {current} this month.",
    "That is {diff_previous} less than last month's {previous}.",
    "Your trailing average spend is {average}.",
    "Nice restraint, keep it going.",
)


class MetricTotals(Protocol):
    income: Decimal
    expense: Decimal
    cashflow: Decimal


def generate_insights(
    current: MetricTotals,
    previous: MetricTotals,
    average: MetricTotals,
    currency_symbol: str,
) -> dict[str, list[str]]:
    """Four insight sentences per metric.

    Cashflow is judged against zero; income and expense against the previous
    month. A rising expense selects the needs-attention templates.
    """
    insights: dict[str, list[str]] = {}
    for metric in METRICS:
        current_value = getattr(current, metric)
        previous_value = getattr(previous, metric)
        average_value = getattr(average, metric)
        templates = select_templates(metric, current_value, previous_value)
        values = {
            "current": format_money(current_value, currency_symbol),
            "previous": format_money(previous_value, currency_symbol),
            "average": format_money(average_value, currency_symbol),
            "diff_previous": format_money(current_value - previous_value, currency_symbol),
            "diff_average": format_money(current_value - average_value, currency_symbol),
        }
        insights[metric] = [template.format(**values) for template in templates]
    return insights


def select_templates(
    metric: str, current_value: Decimal, previous_value: Decimal
) -> tuple[str, ...]:
    if metric == "cashflow":
        return CASHFLOW_SURPLUS if current_value >= 0 else CASHFLOW_DEFICIT
    if metric == "income":
        return INCOME_GROWTH if current_value >= previous_value else INCOME_DECLINE
    if metric == "expense":
        return EXPENSE_INCREASE if current_value >= previous_value else EXPENSE_DECREASE
    raise ValueError(f"Unsupported metric: {metric}")


def format_money(value: Decimal | int | float, currency_symbol: str) -> str:
    amount = abs(_coerce_amount(value))
    if amount == amount.to_integral_value():
        return f"{currency_symbol}{amount:,.0f}"
    return f"{currency_symbol}{amount:,.2f}"


def _coerce_amount(amount: Decimal | int | float) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
