from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from finance_dashboard.errors import ConfigurationMissing

DEFAULT_CURRENCY_SYMBOL = "৳"
DEFAULT_TITLE_PROPERTY = "Name"
DEFAULT_TITLE_CONTAINS = "Dashboard"
DEFAULT_TREND_MONTHS = 6
DEFAULT_CACHE_MAX_AGE_SECONDS = 60
DEFAULT_NOTION_BASE_URL = "https://api.notion.com"
DEFAULT_NOTION_VERSION = "2022-06-28"

REQUIRED_VARIABLES = ("NOTION_TOKEN", "DASHBOARD_DB_ID", "FLOW_DB_ID", "DEBTS_DB_ID")


@dataclass(frozen=True)
class Settings:
    notion_token: str | None
    dashboard_db_id: str | None
    flow_db_id: str | None
    debts_db_id: str | None
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    title_property: str = DEFAULT_TITLE_PROPERTY
    title_contains: str = DEFAULT_TITLE_CONTAINS
    window_length: int = DEFAULT_TREND_MONTHS
    cache_max_age: int = DEFAULT_CACHE_MAX_AGE_SECONDS
    notion_base_url: str = DEFAULT_NOTION_BASE_URL
    notion_version: str = DEFAULT_NOTION_VERSION
    frontend_origin: str = "http://localhost:3000"
    invalid: tuple[str, ...] = ()

    def require(self) -> None:
        """Raise ConfigurationMissing unless every required value is usable."""
        values = {
            "NOTION_TOKEN": self.notion_token,
            "DASHBOARD_DB_ID": self.dashboard_db_id,
            "FLOW_DB_ID": self.flow_db_id,
            "DEBTS_DB_ID": self.debts_db_id,
        }
        missing = [name for name in REQUIRED_VARIABLES if not values[name]]
        if missing:
            raise ConfigurationMissing(f"Missing env vars: {', '.join(missing)}")
        if self.invalid:
            raise ConfigurationMissing(
                f"{', '.join(self.invalid)} must be a positive integer."
            )


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    invalid: list[str] = []
    window_length = _parse_positive_int(
        env, "TREND_MONTHS", DEFAULT_TREND_MONTHS, invalid
    )
    cache_max_age = _parse_positive_int(
        env, "CACHE_MAX_AGE_SECONDS", DEFAULT_CACHE_MAX_AGE_SECONDS, invalid
    )
    return Settings(
        notion_token=_clean(env.get("NOTION_TOKEN")),
        dashboard_db_id=_clean(env.get("DASHBOARD_DB_ID")),
        flow_db_id=_clean(env.get("FLOW_DB_ID")),
        debts_db_id=_clean(env.get("DEBTS_DB_ID")),
        currency_symbol=env.get("CURRENCY_SYMBOL") or DEFAULT_CURRENCY_SYMBOL,
        title_property=_clean(env.get("TITLE_PROPERTY")) or DEFAULT_TITLE_PROPERTY,
        title_contains=_clean(env.get("TITLE_CONTAINS")) or DEFAULT_TITLE_CONTAINS,
        window_length=window_length,
        cache_max_age=cache_max_age,
        notion_base_url=_clean(env.get("NOTION_BASE_URL")) or DEFAULT_NOTION_BASE_URL,
        notion_version=_clean(env.get("NOTION_VERSION")) or DEFAULT_NOTION_VERSION,
        frontend_origin=_clean(env.get("FRONTEND_ORIGIN")) or "http://localhost:3000",
        invalid=tuple(invalid),
    )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def _parse_positive_int(
    env: Mapping[str, str], name: str, default: int, invalid: list[str]
) -> int:
    raw = _clean(env.get(name))
    if raw is None:
        return default
    try:
        parsed = int(raw)
    except ValueError:
        invalid.append(name)
        return default
    if parsed <= 0:
        invalid.append(name)
        return default
    return parsed
