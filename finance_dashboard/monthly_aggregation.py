from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from functools import reduce
from typing import Iterable, Mapping

from finance_dashboard.records import TransactionRecord

ZERO = Decimal("0")

MONTH_LABELS = (
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

MonthKey = tuple[int, int]


@dataclass(frozen=True)
class MonthTotals:
    income: Decimal = ZERO
    expense: Decimal = ZERO


@dataclass(frozen=True)
class MonthBucket:
    year: int
    month: int
    label: str
    income: Decimal
    expense: Decimal
    cashflow: Decimal

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


@dataclass(frozen=True)
class MonthlyAverage:
    income: Decimal
    expense: Decimal
    cashflow: Decimal


@dataclass(frozen=True)
class AggregateSnapshot:
    buckets: tuple[MonthBucket, ...]
    current: MonthBucket
    previous: MonthBucket
    trailing_average: MonthlyAverage
    window_length: int


def aggregate_monthly(
    transactions: Iterable[TransactionRecord],
    reference_date: date,
    window_length: int,
) -> AggregateSnapshot:
    """Fold transactions into ``window_length + 1`` contiguous month buckets.

    The newest bucket is the reference month. Transactions dated outside the
    window are ignored. The trailing average covers the ``window_length``
    buckets older than the current one and always divides by
    ``window_length``, so empty months pull it toward zero.
    """
    _validate_window_length(window_length)

    keys = month_keys(reference_date, window_length)
    empty: Mapping[MonthKey, MonthTotals] = {key: MonthTotals() for key in keys}
    totals = reduce(_fold_transaction, transactions, empty)

    buckets = tuple(_build_bucket(key, totals[key]) for key in sorted(totals))
    current = buckets[-1]
    previous = buckets[-2]
    trailing = buckets[:-1]
    divisor = Decimal(window_length)
    average = MonthlyAverage(
        income=sum((bucket.income for bucket in trailing), ZERO) / divisor,
        expense=sum((bucket.expense for bucket in trailing), ZERO) / divisor,
        cashflow=sum((bucket.cashflow for bucket in trailing), ZERO) / divisor,
    )
    return AggregateSnapshot(
        buckets=buckets,
        current=current,
        previous=previous,
        trailing_average=average,
        window_length=window_length,
    )


def month_keys(reference_date: date, window_length: int) -> list[MonthKey]:
    """Month keys from ``window_length`` months before the reference month up to it."""
    _validate_window_length(window_length)
    return [
        shift_month_key(month_key(reference_date), -offset)
        for offset in range(window_length, -1, -1)
    ]


def window_start(reference_date: date, window_length: int) -> date:
    year, month = month_keys(reference_date, window_length)[0]
    return date(year, month, 1)


def month_key(value: date) -> MonthKey:
    return value.year, value.month


def shift_month_key(key: MonthKey, months: int) -> MonthKey:
    year, month = key
    month_index = (year * 12 + month - 1) + months
    return month_index // 12, month_index % 12 + 1


def _fold_transaction(
    totals: Mapping[MonthKey, MonthTotals], txn: TransactionRecord
) -> Mapping[MonthKey, MonthTotals]:
    key = month_key(txn.date)
    bucket = totals.get(key)
    if bucket is None:
        return totals

    category = txn.category.strip().lower()
    amount = abs(_coerce_amount(txn.amount))
    if category == "income":
        updated = replace(bucket, income=bucket.income + amount)
    elif category == "expense":
        updated = replace(bucket, expense=bucket.expense + amount)
    else:
        return totals
    return {**totals, key: updated}


def _build_bucket(key: MonthKey, totals: MonthTotals) -> MonthBucket:
    year, month = key
    return MonthBucket(
        year=year,
        month=month,
        label=MONTH_LABELS[month - 1],
        income=totals.income,
        expense=totals.expense,
        cashflow=totals.income - totals.expense,
    )


def _validate_window_length(window_length: int) -> None:
    if isinstance(window_length, bool) or not isinstance(window_length, int):
        raise ValueError("window_length must be an integer.")
    if window_length <= 0:
        raise ValueError("window_length must be greater than zero.")


def _coerce_amount(amount: Decimal) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    return Decimal(str(amount))
