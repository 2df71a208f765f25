# test_config.py
#
# Tests for TOML settings loading, token providers and logging setup.
#
# Imports
import tomllib
import pytest
#
# Local Imports
from userdesk import config
from userdesk.Constants import DEFAULT_API_BASE_URL, DEFAULT_API_TIMEOUT_SECONDS
from userdesk.Logging_Config import setup_logger, configure_logging_from_settings
from userdesk.users_api.auth import ConfigTokenProvider, StaticTokenProvider, bearer_headers, TOKEN_ENV_VAR
#
#######################################################################################################################
#
# Functions:

@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "userdesk" / "config.toml"


def test_missing_config_file_is_created_with_defaults(config_file):
    settings = config.load_settings(config_path=config_file)

    assert config_file.exists()
    with open(config_file, "rb") as f:
        assert tomllib.load(f) == settings
    assert config.get_api_base_url(settings) == DEFAULT_API_BASE_URL
    assert config.get_api_timeout(settings) == DEFAULT_API_TIMEOUT_SECONDS
    assert config.get_api_key(settings) is None


def test_user_file_is_merged_over_defaults(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text('[api]\nbase_url = "http://localhost:8000/api"\n\n[auth]\ntoken = "abc"\n', encoding="utf-8")

    settings = config.load_settings(config_path=config_file)

    assert config.get_api_base_url(settings) == "http://localhost:8000/api"
    assert config.get_api_timeout(settings) == DEFAULT_API_TIMEOUT_SECONDS
    assert config.get_setting("auth", "token", settings=settings) == "abc"
    assert config.get_setting("logging", "log_level", settings=settings) == "INFO"


def test_invalid_toml_falls_back_to_defaults(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text("[api\nbase_url = ", encoding="utf-8")

    settings = config.load_settings(config_path=config_file)

    assert settings == config.DEFAULT_CONFIG_FROM_TOML


def test_config_path_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv(config.CONFIG_ENV_VAR, str(tmp_path / "custom.toml"))
    assert config.get_config_path() == tmp_path / "custom.toml"


@pytest.mark.parametrize("value", ["soon", -5, 0])
def test_bad_timeout_uses_default(value):
    assert config.get_api_timeout({"api": {"timeout": value}}) == DEFAULT_API_TIMEOUT_SECONDS


def test_blank_base_url_uses_default():
    assert config.get_api_base_url({"api": {"base_url": "  "}}) == DEFAULT_API_BASE_URL


def test_log_file_can_be_disabled():
    assert config.get_log_file_path({"logging": {"log_to_file": False}}) is None
    assert config.get_log_file_path({"logging": {"log_filename": "x.log"}}).name == "x.log"


def test_save_settings_round_trips(tmp_path):
    path = config.save_settings({"api": {"base_url": "http://example.test"}}, tmp_path / "saved.toml")
    assert config.load_settings(config_path=path)["api"]["base_url"] == "http://example.test"


def test_deep_merge_keeps_untouched_keys():
    merged = config.deep_merge_dicts({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


# --- Token providers ---

def test_config_token_provider_prefers_environment(monkeypatch):
    provider = ConfigTokenProvider({"auth": {"token": "from-file"}})
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    assert provider.get_token() == "from-file"

    monkeypatch.setenv(TOKEN_ENV_VAR, "from-env")
    assert provider.get_token() == "from-env"


def test_config_token_provider_without_token(monkeypatch):
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    assert ConfigTokenProvider({"auth": {"token": ""}}).get_token() is None


def test_bearer_headers_forward_token_unchanged():
    assert bearer_headers(StaticTokenProvider("  opaque.token.value ")) == {
        "Authorization": "Bearer   opaque.token.value "
    }
    assert bearer_headers(StaticTokenProvider(None)) == {}
    assert bearer_headers(None) == {}


def test_config_token_provider_ignores_malformed_auth_section(monkeypatch):
    monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
    assert ConfigTokenProvider({"auth": "oops"}).get_token() is None
    assert bearer_headers(ConfigTokenProvider({"auth": "oops"})) == {}


# --- Logging ---

def test_setup_logger_creates_log_directory(tmp_path):
    log_path = tmp_path / "logs" / "userdesk.log"
    configured = setup_logger(log_level="debug", app_log_path=log_path)
    try:
        assert log_path.parent.is_dir()
        configured.info("hello from the test suite")
    finally:
        configured.remove()


def test_logging_configured_from_settings(tmp_path):
    log_path = tmp_path / "from-settings.log"
    settings = {"logging": {"log_level": "WARNING", "log_filename": str(log_path), "log_to_file": True}}
    configured = configure_logging_from_settings(settings)
    try:
        configured.warning("written to the configured file")
        configured.complete()
        assert "written to the configured file" in log_path.read_text(encoding="utf-8")
    finally:
        configured.remove()

