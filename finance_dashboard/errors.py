from __future__ import annotations


class DashboardError(RuntimeError):
    """Base error rendered as ``{"error": message}`` at the HTTP boundary."""

    status_code = 500

    @property
    def message(self) -> str:
        return str(self)


class ConfigurationMissing(DashboardError):
    """Raised when a required setting is absent or unusable."""


class UpstreamQueryFailed(DashboardError):
    """Raised when a Notion database query cannot be completed."""


class NoMatchingRecord(DashboardError):
    status_code = 404
