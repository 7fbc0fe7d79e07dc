import unittest
from datetime import date
from decimal import Decimal

from finance_dashboard.insights import (
    CASHFLOW_DEFICIT,
    CASHFLOW_SURPLUS,
    EXPENSE_DECREASE,
    EXPENSE_INCREASE,
    INCOME_DECLINE,
    INCOME_GROWTH,
    format_money,
    generate_insights,
    select_templates,
)
from finance_dashboard.monthly_aggregation import MonthlyAverage, aggregate_monthly
from finance_dashboard.records import TransactionRecord


class InsightGenerationTests(unittest.TestCase):
    def test_surplus_and_expense_increase_branches(self) -> None:
        snapshot = aggregate_monthly(
            [
                TransactionRecord(date=date(2026, 3, 10), category="Income", amount=Decimal("5000")),
                TransactionRecord(date=date(2026, 3, 15), category="Expense", amount=Decimal("2000")),
            ],
            date(2026, 3, 20),
            6,
        )

        insights = generate_insights(
            snapshot.current, snapshot.previous, snapshot.trailing_average, "$"
        )

        self.assertEqual(set(insights), {"cashflow", "income", "expense"})
        for lines in insights.values():
            self.assertEqual(len(lines), 4)
        self.assertEqual(
            insights["cashflow"][0],
            "You are cashflow positive with $3,000 left over this month.",
        )
        self.assertEqual(insights["income"][0], "Income rose to $5,000 this month.")
        self.assertEqual(insights["expense"][0], "Spending climbed to $2,000 this month.")
        self.assertEqual(
            insights["expense"][1],
            "That is $2,000 more than last month's $0.",
        )

    def test_deficit_decline_and_decrease_branches(self) -> None:
        current = MonthlyAverage(
            income=Decimal("1000"), expense=Decimal("1500"), cashflow=Decimal("-500")
        )
        previous = MonthlyAverage(
            income=Decimal("4000"), expense=Decimal("2500"), cashflow=Decimal("1500")
        )
        average = MonthlyAverage(
            income=Decimal("3000"), expense=Decimal("2000.5"), cashflow=Decimal("999.5")
        )

        insights = generate_insights(current, previous, average, "৳")

        self.assertEqual(insights["cashflow"][0], "You are running a deficit of ৳500 this month.")
        self.assertEqual(
            insights["cashflow"][1],
            "Your trailing average net flow is ৳999.50, ৳1,499.50 away from today.",
        )
        self.assertEqual(
            insights["income"][1], "That is ৳3,000 less than last month's ৳4,000."
        )
        self.assertEqual(insights["expense"][0], "Spending eased to ৳1,500 this month.")
        self.assertEqual(insights["expense"][2], "Your trailing average spend is ৳2,000.50.")

    def test_template_selection_boundaries(self) -> None:
        self.assertIs(select_templates("cashflow", Decimal("0"), Decimal("100")), CASHFLOW_SURPLUS)
        self.assertIs(select_templates("cashflow", Decimal("-1"), Decimal("-5")), CASHFLOW_DEFICIT)
        self.assertIs(select_templates("income", Decimal("10"), Decimal("10")), INCOME_GROWTH)
        self.assertIs(select_templates("income", Decimal("9"), Decimal("10")), INCOME_DECLINE)
        self.assertIs(select_templates("expense", Decimal("10"), Decimal("10")), EXPENSE_INCREASE)
        self.assertIs(select_templates("expense", Decimal("9"), Decimal("10")), EXPENSE_DECREASE)
        with self.assertRaises(ValueError):
            select_templates("savings", Decimal("1"), Decimal("1"))

    def test_output_is_deterministic(self) -> None:
        current = MonthlyAverage(income=Decimal("10"), expense=Decimal("20"), cashflow=Decimal("-10"))
        previous = MonthlyAverage(income=Decimal("5"), expense=Decimal("30"), cashflow=Decimal("-25"))

        first = generate_insights(current, previous, previous, "$")
        second = generate_insights(current, previous, previous, "$")

        self.assertEqual(first, second)

    def test_format_money_groups_thousands_and_drops_sign(self) -> None:
        self.assertEqual(format_money(Decimal("-1234567"), "$"), "$1,234,567")
        self.assertEqual(format_money(Decimal("1234.5"), "€"), "€1,234.50")
        self.assertEqual(format_money(Decimal("1000") / Decimal("6"), "$"), "$166.67")
        self.assertEqual(format_money(0, "$"), "$0")


if __name__ == "__main__":
    unittest.main()
