"""Tests for tidyquest.config — Settings validation."""

from tidyquest.config import Settings, settings


def test_defaults_run_offline():
    s = Settings()
    assert s.DATABASE_PATH == "data/tidyquest.db"
    assert s.CATALOG_PATH == "data/quests.json"
    assert s.INSTANT_APP_ID == ""
    assert s.COMMUNITY_TIMEOUT_SECONDS == 5.0
    assert s.RECENT_CONTRIBUTIONS_LIMIT == 10


def test_numeric_values_parsed_from_strings():
    s = Settings(COMMUNITY_TIMEOUT_SECONDS="2.5", RECENT_CONTRIBUTIONS_LIMIT="25")
    assert s.COMMUNITY_TIMEOUT_SECONDS == 2.5
    assert s.RECENT_CONTRIBUTIONS_LIMIT == 25


def test_blank_numeric_values_use_defaults():
    s = Settings(COMMUNITY_TIMEOUT_SECONDS="  ", RECENT_CONTRIBUTIONS_LIMIT="")
    assert s.COMMUNITY_TIMEOUT_SECONDS == 5.0
    assert s.RECENT_CONTRIBUTIONS_LIMIT == 10


def test_api_url_trailing_slash_stripped():
    assert Settings(INSTANT_API_URL="https://instant.test/admin/").INSTANT_API_URL == "https://instant.test/admin"


def test_singleton_uses_test_environment():
    """conftest points the database at memory and leaves the ledger unconfigured."""
    assert settings.DATABASE_PATH == ":memory:"
    assert settings.INSTANT_APP_ID == ""
