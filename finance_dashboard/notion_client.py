from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from finance_dashboard.errors import UpstreamQueryFailed
from finance_dashboard.records import SourceRecord, parse_pages

logger = logging.getLogger("FinanceDashboard.Notion")

DEFAULT_TIMEOUT_SECONDS = 10.0
MAX_ERROR_BODY_CHARS = 500


@dataclass(frozen=True)
class DatabaseQuery:
    database_id: str
    filter: Mapping[str, Any] | None = None
    sorts: tuple[Mapping[str, Any], ...] = ()
    page_size: int | None = None

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if self.filter is not None:
            body["filter"] = dict(self.filter)
        if self.sorts:
            body["sorts"] = [dict(sort) for sort in self.sorts]
        if self.page_size is not None:
            body["page_size"] = self.page_size
        return body


@dataclass
class NotionClient:
    """Read-only Notion database queries over a shared async HTTP client."""

    token: str
    client: httpx.AsyncClient
    notion_version: str = "2022-06-28"

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.notion_version,
            "Content-Type": "application/json",
        }

    async def query(self, query: DatabaseQuery) -> list[SourceRecord]:
        pages = await self._fetch_pages(query)
        return parse_pages(pages)

    async def _fetch_pages(self, query: DatabaseQuery) -> list[Mapping[str, Any]]:
        path = f"/v1/databases/{query.database_id}/query"
        logger.debug("Querying Notion database %s", query.database_id)
        try:
            response = await self.client.post(path, json=query.to_body(), headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("Notion query for %s failed: %s", query.database_id, exc)
            raise UpstreamQueryFailed(f"Notion DB query failed: {exc}") from exc

        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY_CHARS]
            logger.warning(
                "Notion query for %s returned %s", query.database_id, response.status_code
            )
            raise UpstreamQueryFailed(
                f"Notion DB query failed with status {response.status_code}: {body}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamQueryFailed("Notion response was not valid JSON") from exc

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise UpstreamQueryFailed("Notion response missing results")
        return [page for page in results if isinstance(page, Mapping)]


def build_http_client(base_url: str, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=DEFAULT_TIMEOUT_SECONDS,
        transport=transport,
    )
