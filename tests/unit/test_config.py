import pytest

from app.config import BACKEND_JWT, load_sheet_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("WAITLIST_SHEET_NAME", "WAITLIST_BACKEND", "SHEETS_HTTP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    config = load_sheet_config()

    assert config.sheet_name == "Sheet1"
    assert config.backend == BACKEND_JWT
    assert config.http_timeout == 10.0


def test_overrides(clean_env):
    clean_env.setenv("GOOGLE_SHEET_ID", "sheet-from-env")
    clean_env.setenv("WAITLIST_BACKEND", " Client ")
    clean_env.setenv("SHEETS_HTTP_TIMEOUT", "2.5")

    config = load_sheet_config()

    assert config.spreadsheet_id == "sheet-from-env"
    assert config.backend == "client"
    assert config.http_timeout == 2.5
