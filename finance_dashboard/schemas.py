from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SummaryResponse(CamelModel):
    net_worth: float
    balance: float
    total_debt: float
    incoming_this_month: float
    outgoing_this_month: float
    cashflow_this_month: float


class MonthBucketResponse(CamelModel):
    month: str
    label: str
    income: float
    expense: float
    cashflow: float


class MonthlyAverageResponse(CamelModel):
    income: float
    expense: float
    cashflow: float


class KpiResponse(CamelModel):
    current: MonthBucketResponse
    previous: MonthBucketResponse
    average: MonthlyAverageResponse
    window_months: int


class DebtResponse(CamelModel):
    name: str
    amount: float
    days_left: str


class DashboardResponse(CamelModel):
    currency: str
    summary: SummaryResponse
    kpis: KpiResponse
    chart_data: list[MonthBucketResponse]
    debts: list[DebtResponse]
    insights: dict[str, list[str]]
    updated_at: datetime


class ErrorResponse(BaseModel):
    error: str
