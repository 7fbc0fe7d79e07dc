import unittest

from finance_dashboard.config import load_settings
from finance_dashboard.errors import ConfigurationMissing

REQUIRED_ENV = {
    "NOTION_TOKEN": "secret-token",
    "DASHBOARD_DB_ID": "db-summary",
    "FLOW_DB_ID": "db-flow",
    "DEBTS_DB_ID": "db-debts",
}


class SettingsTests(unittest.TestCase):
    def test_defaults_apply_for_optional_values(self) -> None:
        settings = load_settings(REQUIRED_ENV)

        settings.require()
        self.assertEqual(settings.currency_symbol, "৳")
        self.assertEqual(settings.title_property, "Name")
        self.assertEqual(settings.title_contains, "Dashboard")
        self.assertEqual(settings.window_length, 6)
        self.assertEqual(settings.cache_max_age, 60)
        self.assertEqual(settings.notion_base_url, "https://api.notion.com")

    def test_overrides_are_read(self) -> None:
        settings = load_settings(
            {
                **REQUIRED_ENV,
                "CURRENCY_SYMBOL": "$",
                "TITLE_PROPERTY": " Title ",
                "TREND_MONTHS": "12",
            }
        )

        self.assertEqual(settings.currency_symbol, "$")
        self.assertEqual(settings.title_property, "Title")
        self.assertEqual(settings.window_length, 12)

    def test_missing_required_values_are_listed(self) -> None:
        settings = load_settings({"NOTION_TOKEN": "  ", "FLOW_DB_ID": "db-flow"})

        with self.assertRaises(ConfigurationMissing) as ctx:
            settings.require()

        self.assertEqual(
            ctx.exception.message,
            "Missing env vars: NOTION_TOKEN, DASHBOARD_DB_ID, DEBTS_DB_ID",
        )
        self.assertEqual(ctx.exception.status_code, 500)

    def test_invalid_trend_months_is_a_configuration_error(self) -> None:
        for value in ("zero", "0", "-6"):
            settings = load_settings({**REQUIRED_ENV, "TREND_MONTHS": value})
            with self.assertRaises(ConfigurationMissing) as ctx:
                settings.require()
            self.assertEqual(ctx.exception.message, "TREND_MONTHS must be a positive integer.")

    def test_numeric_settings_are_parsed_once_into_ints(self) -> None:
        settings = load_settings(
            {**REQUIRED_ENV, "TREND_MONTHS": " 12 ", "CACHE_MAX_AGE_SECONDS": "300"}
        )

        self.assertIsInstance(settings.window_length, int)
        self.assertIsInstance(settings.cache_max_age, int)
        self.assertEqual(settings.window_length, 12)
        self.assertEqual(settings.cache_max_age, 300)
        self.assertEqual(settings.invalid, ())


if __name__ == "__main__":
    unittest.main()
