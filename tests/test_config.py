"""
Tests for application configuration settings.
"""

from staffhub.config import Settings, get_settings


class TestConfigSettings:
    """Test configuration settings loading."""

    def test_database_url_override_from_env(self):
        """Test that DATABASE_URL wins over the db_* parts."""
        assert get_settings().database_url == "sqlite://"

    def test_database_url_built_from_parts(self):
        """Test Postgres URL construction without an override."""
        settings = Settings(
            database_url_override="",
            db_user="staff",
            db_password="secret",
            db_host="db",
            db_port=5433,
            db_name="staffhub",
        )
        assert settings.database_url == "postgresql://staff:secret@db:5433/staffhub"

    def test_token_configured_property(self):
        """Test token_configured property."""
        assert get_settings().token_configured is True
        assert Settings(token_key="").token_configured is False

    def test_import_settings_from_env(self):
        """Test that import tuning is read from the environment."""
        assert get_settings().import_max_bind_params == 30000

    def test_import_defaults(self):
        """Test default import constants."""
        settings = Settings()
        assert settings.long_term_threshold_days == 60
        assert settings.daily_expense_ratio == 0.035
        assert settings.operational_roles == ["ADMIN", "MANAGER", "SENIOR MANAGER", "MANAGING DIRECTOR"]

    def test_get_settings_is_cached(self):
        """Test that settings are loaded once."""
        assert get_settings() is get_settings()
