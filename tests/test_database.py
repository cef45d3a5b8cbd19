"""Tests for engine configuration."""

from sqlalchemy import text

from sitecraft import database
from sitecraft.core.config import settings
from tests.conftest import _TEST_DB_DIR


class TestEngineConfiguration:

    def test_engine_uses_configured_url(self):
        assert database.DATABASE_URL == settings.database_url
        assert database.engine.url.render_as_string(hide_password=False) == settings.database_url

    def test_tests_never_touch_the_default_database(self):
        assert settings.database_url != "sqlite:///./sitecraft.db"
        assert database.engine.url.database.startswith(_TEST_DB_DIR)

    def test_sqlite_enforces_foreign_keys(self, db):
        assert db.execute(text("PRAGMA foreign_keys")).scalar() == 1
