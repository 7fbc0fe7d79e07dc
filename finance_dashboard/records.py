from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from types import MappingProxyType
from typing import Any, Mapping

logger = logging.getLogger("FinanceDashboard.Records")

ZERO = Decimal("0")

SUPPORTED_KINDS = {
    "number",
    "formula",
    "rollup",
    "title",
    "date",
    "select",
    "checkbox",
}
ABSENT_KIND = "absent"


@dataclass(frozen=True)
class TypedValue:
    """One field of a Notion page.

    ``inner_kind`` is only set for formula and rollup values, which wrap a
    number or a string.
    """

    kind: str
    value: Decimal | str | bool | None = None
    inner_kind: str | None = None


ABSENT = TypedValue(kind=ABSENT_KIND)


@dataclass(frozen=True)
class SourceRecord:
    id: str
    fields: Mapping[str, TypedValue] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def get(self, name: str) -> TypedValue:
        return self.fields.get(name, ABSENT)


@dataclass(frozen=True)
class TransactionRecord:
    date: date
    category: str
    amount: Decimal


def parse_page(page: Mapping[str, Any]) -> SourceRecord:
    properties = page.get("properties") if isinstance(page, Mapping) else None
    if not isinstance(properties, Mapping):
        properties = {}
    page_id = page.get("id") if isinstance(page, Mapping) else None
    return SourceRecord(
        id=str(page_id or ""),
        fields={str(name): parse_property(raw) for name, raw in properties.items()},
    )


def parse_pages(pages: list[Mapping[str, Any]]) -> list[SourceRecord]:
    return [parse_page(page) for page in pages]


def parse_property(raw: Any) -> TypedValue:
    if not isinstance(raw, Mapping):
        return ABSENT
    kind = raw.get("type")
    if kind not in SUPPORTED_KINDS:
        return ABSENT
    payload = raw.get(kind)

    if kind == "number":
        return TypedValue(kind="number", value=_coerce_number(payload))
    if kind in {"formula", "rollup"}:
        if not isinstance(payload, Mapping):
            return TypedValue(kind=kind)
        inner_kind = payload.get("type")
        if inner_kind == "number":
            return TypedValue(
                kind=kind,
                value=_coerce_number(payload.get("number")),
                inner_kind="number",
            )
        if inner_kind == "string" and kind == "formula":
            inner = payload.get("string")
            return TypedValue(
                kind=kind,
                value=inner if isinstance(inner, str) else None,
                inner_kind="string",
            )
        return TypedValue(kind=kind, inner_kind=inner_kind if isinstance(inner_kind, str) else None)
    if kind == "title":
        return TypedValue(kind="title", value=_join_rich_text(payload))
    if kind == "date":
        start = payload.get("start") if isinstance(payload, Mapping) else None
        return TypedValue(kind="date", value=start if isinstance(start, str) else None)
    if kind == "select":
        name = payload.get("name") if isinstance(payload, Mapping) else None
        return TypedValue(kind="select", value=name if isinstance(name, str) else None)
    if kind == "checkbox":
        return TypedValue(kind="checkbox", value=payload if isinstance(payload, bool) else None)
    return ABSENT


def extract_number(record: SourceRecord | None, name: str) -> Decimal:
    """Numeric value of a field, or 0 for anything that is not a number.

    Number, formula(number) and rollup(number) resolve to their value; every
    other kind, a null value, a missing field or a missing record gives 0.
    """
    if record is None:
        return ZERO
    typed = record.get(name)
    if typed.kind == "number":
        return typed.value if isinstance(typed.value, Decimal) else ZERO
    if typed.kind in {"formula", "rollup"}:
        if typed.inner_kind != "number":
            return ZERO
        return typed.value if isinstance(typed.value, Decimal) else ZERO
    return ZERO


def extract_text(record: SourceRecord | None, name: str, default: str = "") -> str:
    if record is None:
        return default
    typed = record.get(name)
    if typed.kind in {"title", "select", "date"}:
        text = typed.value if isinstance(typed.value, str) else ""
    elif typed.kind == "formula" and typed.inner_kind == "string":
        text = typed.value if isinstance(typed.value, str) else ""
    elif typed.kind == "formula" and typed.inner_kind == "number":
        text = _format_plain_number(typed.value) if isinstance(typed.value, Decimal) else ""
    else:
        text = ""
    text = text.strip()
    return text or default


def extract_date(record: SourceRecord | None, name: str) -> date | None:
    if record is None:
        return None
    typed = record.get(name)
    if typed.kind != "date" or not isinstance(typed.value, str):
        return None
    return parse_day(typed.value)


def parse_day(value: str) -> date | None:
    """Calendar day of a Notion date or datetime string."""
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def to_transaction(
    record: SourceRecord,
    *,
    date_field: str = "Date",
    category_field: str = "Category",
    amount_field: str = "Amount",
) -> TransactionRecord | None:
    txn_date = extract_date(record, date_field)
    category = extract_text(record, category_field)
    amount = extract_number(record, amount_field)
    if txn_date is None or not category or amount == ZERO:
        logger.debug("Skipping flow record %s without date, category or amount", record.id)
        return None
    return TransactionRecord(date=txn_date, category=category, amount=amount)


def to_transactions(records: list[SourceRecord], **field_names: str) -> list[TransactionRecord]:
    transactions: list[TransactionRecord] = []
    for record in records:
        txn = to_transaction(record, **field_names)
        if txn is not None:
            transactions.append(txn)
    return transactions


def _coerce_number(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def _join_rich_text(items: Any) -> str | None:
    if not isinstance(items, list):
        return None
    parts = []
    for item in items:
        if isinstance(item, Mapping) and isinstance(item.get("plain_text"), str):
            parts.append(item["plain_text"])
    return "".join(parts)


def _format_plain_number(value: Decimal) -> str:
    if value == value.to_integral_value():
        return str(value.quantize(Decimal("1")))
    return str(value.normalize())
