"""
Tests for settings loading
"""
import pytest

from services.config import Settings, load_settings
from services.exceptions import ConfigurationError

CONFIG_VARIABLES = (
    "OPENAI_API_KEY", "AMADEUS_API_KEY", "AMADEUS_API_SECRET", "AMADEUS_API_BASE",
    "OPENAI_MODEL", "EXCHANGE_RATE_URL", "HTTP_TIMEOUT_SECONDS",
    "TOKEN_EXPIRY_BUFFER_SECONDS", "EXCHANGE_RATE_TTL_SECONDS", "APP_TIMEZONE",
    "SEARCH_MAX_RESULTS", "DISPLAY_LIMIT", "LOG_LEVEL",
)


@pytest.fixture
def env(monkeypatch):
    for name in CONFIG_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("AMADEUS_API_KEY", "amadeus-id")
    monkeypatch.setenv("AMADEUS_API_SECRET", "amadeus-secret")
    return monkeypatch


class TestLoadSettings:

    def test_defaults(self, env):
        settings = load_settings(env_file=None)

        assert isinstance(settings, Settings)
        assert settings.openai_api_key == "sk-test"
        assert settings.amadeus_api_base == "https://test.api.amadeus.com"
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.http_timeout_seconds == 30.0
        assert settings.token_expiry_buffer_seconds == 300
        assert settings.exchange_rate_ttl_seconds == 3600
        assert settings.app_timezone == "UTC"
        assert settings.search_max_results == 5
        assert settings.display_limit == 3
        assert settings.log_level == "INFO"

    def test_overrides(self, env):
        env.setenv("AMADEUS_API_BASE", "https://api.amadeus.com/")
        env.setenv("APP_TIMEZONE", "America/Los_Angeles")
        env.setenv("DISPLAY_LIMIT", "5")
        env.setenv("LOG_LEVEL", "debug")

        settings = load_settings(env_file=None)

        assert settings.amadeus_api_base == "https://api.amadeus.com"
        assert settings.app_timezone == "America/Los_Angeles"
        assert settings.display_limit == 5
        assert settings.log_level == "DEBUG"

    def test_blank_optional_value_uses_default(self, env):
        env.setenv("SEARCH_MAX_RESULTS", "")

        assert load_settings(env_file=None).search_max_results == 5

    def test_reads_env_file(self, env, tmp_path):
        env.delenv("OPENAI_API_KEY")
        env_file = tmp_path / ".env"
        env_file.write_text("OPENAI_API_KEY=sk-from-file\nDISPLAY_LIMIT=2\n")

        settings = load_settings(env_file=str(env_file))

        assert settings.openai_api_key == "sk-from-file"
        assert settings.display_limit == 2

    def test_lists_every_missing_credential(self, env):
        env.delenv("AMADEUS_API_KEY")
        env.setenv("AMADEUS_API_SECRET", "  ")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        message = str(exc_info.value)
        assert "AMADEUS_API_KEY" in message
        assert "AMADEUS_API_SECRET" in message
        assert "OPENAI_API_KEY" not in message

    @pytest.mark.parametrize("name,value", [
        ("HTTP_TIMEOUT_SECONDS", "soon"),
        ("SEARCH_MAX_RESULTS", "0"),
        ("TOKEN_EXPIRY_BUFFER_SECONDS", "-5"),
    ])
    def test_rejects_bad_numbers(self, env, name, value):
        env.setenv(name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert name in str(exc_info.value)

    def test_rejects_unknown_timezone(self, env):
        env.setenv("APP_TIMEZONE", "Mars/Olympus_Mons")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=None)

        assert "APP_TIMEZONE" in str(exc_info.value)
