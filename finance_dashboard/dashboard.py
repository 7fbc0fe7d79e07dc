from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Protocol

from finance_dashboard.config import Settings
from finance_dashboard.errors import NoMatchingRecord
from finance_dashboard.insights import generate_insights
from finance_dashboard.monthly_aggregation import (
    AggregateSnapshot,
    MonthBucket,
    aggregate_monthly,
    window_start,
)
from finance_dashboard.notion_client import DatabaseQuery
from finance_dashboard.records import (
    SourceRecord,
    extract_number,
    extract_text,
    to_transactions,
)
from finance_dashboard.schemas import (
    DashboardResponse,
    DebtResponse,
    KpiResponse,
    MonthBucketResponse,
    MonthlyAverageResponse,
    SummaryResponse,
)

logger = logging.getLogger("FinanceDashboard.Dashboard")

SUMMARY_FIELDS = {
    "net_worth": "NET WORTH",
    "balance": "Balance",
    "total_debt": "Total Debt",
    "incoming_this_month": "Incoming (This Month)",
    "outgoing_this_month": "Outgoing (This Month)",
    "cashflow_this_month": "Cashflow (This Month)",
}
DEBT_NAME_FIELD = "Name"
DEBT_AMOUNT_FIELD = "Amount"
DEBT_DAYS_LEFT_FIELD = "Days Left"
DEBT_PAID_FIELD = "Paid"
DEBT_DEADLINE_FIELD = "Deadline"
FLOW_DATE_FIELD = "Date"
FLOW_CATEGORY_FIELD = "Category"
FLOW_AMOUNT_FIELD = "Amount"
FLOW_PAGE_SIZE = 100
UNKNOWN = "Unknown"


class RecordFetcher(Protocol):
    async def query(self, query: DatabaseQuery) -> list[SourceRecord]:
        ...


@dataclass(frozen=True)
class DashboardQueries:
    summary: DatabaseQuery
    debts: DatabaseQuery
    flow: DatabaseQuery


def build_queries(settings: Settings, today: date) -> DashboardQueries:
    cutoff = window_start(today, settings.window_length)
    return DashboardQueries(
        summary=DatabaseQuery(
            database_id=settings.dashboard_db_id,
            filter={
                "property": settings.title_property,
                "title": {"contains": settings.title_contains},
            },
            page_size=1,
        ),
        debts=DatabaseQuery(
            database_id=settings.debts_db_id,
            filter={"property": DEBT_PAID_FIELD, "checkbox": {"equals": False}},
            sorts=({"property": DEBT_DEADLINE_FIELD, "direction": "ascending"},),
        ),
        flow=DatabaseQuery(
            database_id=settings.flow_db_id,
            filter={"property": FLOW_DATE_FIELD, "date": {"on_or_after": cutoff.isoformat()}},
            # newest first so the page cap only ever drops the oldest months
            sorts=({"property": FLOW_DATE_FIELD, "direction": "descending"},),
            page_size=FLOW_PAGE_SIZE,
        ),
    )


async def fetch_all(
    fetcher: RecordFetcher, queries: DashboardQueries
) -> tuple[list[SourceRecord], list[SourceRecord], list[SourceRecord]]:
    """Run the summary, debts and flow queries together.

    The first failure cancels the queries still in flight and is re-raised.
    """
    tasks = [
        asyncio.ensure_future(fetcher.query(query))
        for query in (queries.summary, queries.debts, queries.flow)
    ]
    try:
        summary, debts, flow = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
    return summary, debts, flow


async def build_dashboard(
    fetcher: RecordFetcher,
    settings: Settings,
    today: date,
    now: datetime | None = None,
) -> DashboardResponse:
    settings.require()
    queries = build_queries(settings, today)
    summary_rows, debt_rows, flow_rows = await fetch_all(fetcher, queries)

    if not summary_rows:
        raise NoMatchingRecord(
            f'No row found where {settings.title_property} contains "{settings.title_contains}"'
        )
    summary_record = summary_rows[0]

    transactions = to_transactions(
        flow_rows,
        date_field=FLOW_DATE_FIELD,
        category_field=FLOW_CATEGORY_FIELD,
        amount_field=FLOW_AMOUNT_FIELD,
    )
    logger.info(
        "Aggregating %s of %s flow records over %s months",
        len(transactions),
        len(flow_rows),
        settings.window_length,
    )
    snapshot = aggregate_monthly(transactions, today, settings.window_length)
    insights = generate_insights(
        snapshot.current,
        snapshot.previous,
        snapshot.trailing_average,
        settings.currency_symbol,
    )

    return DashboardResponse(
        currency=settings.currency_symbol,
        summary=build_summary(summary_record),
        kpis=build_kpis(snapshot),
        chart_data=[bucket_response(bucket) for bucket in snapshot.buckets],
        debts=[build_debt(record) for record in debt_rows],
        insights=insights,
        updated_at=now or datetime.now(timezone.utc),
    )


def build_summary(record: SourceRecord) -> SummaryResponse:
    return SummaryResponse(
        **{attr: _as_float(extract_number(record, name)) for attr, name in SUMMARY_FIELDS.items()}
    )


def build_debt(record: SourceRecord) -> DebtResponse:
    return DebtResponse(
        name=extract_text(record, DEBT_NAME_FIELD, default=UNKNOWN),
        amount=_as_float(extract_number(record, DEBT_AMOUNT_FIELD)),
        days_left=extract_text(record, DEBT_DAYS_LEFT_FIELD, default=UNKNOWN),
    )


def build_kpis(snapshot: AggregateSnapshot) -> KpiResponse:
    average = snapshot.trailing_average
    return KpiResponse(
        current=bucket_response(snapshot.current),
        previous=bucket_response(snapshot.previous),
        average=MonthlyAverageResponse(
            income=_as_float(average.income),
            expense=_as_float(average.expense),
            cashflow=_as_float(average.cashflow),
        ),
        window_months=snapshot.window_length,
    )


def bucket_response(bucket: MonthBucket) -> MonthBucketResponse:
    return MonthBucketResponse(
        month=bucket.key,
        label=bucket.label,
        income=_as_float(bucket.income),
        expense=_as_float(bucket.expense),
        cashflow=_as_float(bucket.cashflow),
    )


def _as_float(value: Decimal) -> float:
    return float(value)
