import pytest

from notion_config import load_settings
from notion_errors import ConfigError

VARS = ("OPENAI_API_KEY", "NOTION_API_KEY", "NOTION_TOKEN", "NOTION_PAGE_ID", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # setenv first so undo leaves these unset even after load_dotenv writes them
    for name in VARS:
        monkeypatch.setenv(name, "x")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


def write_env(path, **values):
    path.write_text("".join(f"{k}={v}\n" for k, v in values.items()))
    return path


def test_loads_explicit_env_file(tmp_path):
    env = write_env(
        tmp_path / "qa.env",
        OPENAI_API_KEY="sk-test",
        NOTION_API_KEY="secret",
        NOTION_PAGE_ID="page-1",
    )

    settings = load_settings(str(env))

    assert settings.openai_api_key == "sk-test"
    assert settings.notion_api_key == "secret"
    assert settings.notion_page_id == "page-1"
    assert settings.log_level == "WARNING"


def test_finds_dotenv_in_working_directory(tmp_path):
    write_env(tmp_path / ".env", OPENAI_API_KEY="sk-test", NOTION_TOKEN="legacy", NOTION_PAGE_ID="page-1", LOG_LEVEL="info")

    settings = load_settings()

    assert settings.notion_api_key == "legacy"
    assert settings.log_level == "INFO"


def test_environment_wins_over_dotenv(tmp_path, monkeypatch):
    write_env(tmp_path / ".env", OPENAI_API_KEY="from-file", NOTION_API_KEY="secret", NOTION_PAGE_ID="page-1")
    monkeypatch.setenv("OPENAI_API_KEY", "from-env")

    assert load_settings().openai_api_key == "from-env"


def test_missing_env_file():
    with pytest.raises(ConfigError, match="not found"):
        load_settings("does-not-exist.env")


def test_missing_values_are_named(monkeypatch, tmp_path):
    write_env(tmp_path / ".env")
    monkeypatch.setenv("NOTION_API_KEY", "secret")
    monkeypatch.setenv("NOTION_PAGE_ID", "   ")

    with pytest.raises(ConfigError) as exc_info:
        load_settings()

    message = str(exc_info.value)
    assert "OPENAI_API_KEY" in message
    assert "NOTION_PAGE_ID" in message
    assert "NOTION_API_KEY" not in message


def test_invalid_log_level(monkeypatch, tmp_path):
    write_env(tmp_path / ".env")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("NOTION_API_KEY", "secret")
    monkeypatch.setenv("NOTION_PAGE_ID", "page-1")
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    with pytest.raises(ConfigError, match="LOG_LEVEL"):
        load_settings()


def test_missing_default_dotenv(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("NOTION_API_KEY", "secret")
    monkeypatch.setenv("NOTION_PAGE_ID", "page-1")

    with pytest.raises(ConfigError, match="Error loading .env file"):
        load_settings()
