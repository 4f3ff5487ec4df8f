import pytest
from pydantic import ValidationError

from complaintdesk.app.core.config import Settings


def test_defaults_match_rate_limiter_retention(monkeypatch) -> None:
    settings = Settings(_env_file=None)

    assert settings.rate_limit_cleanup_interval_seconds == 300
    assert settings.rate_limit_entry_max_age_seconds == 600
    assert settings.rate_limit_remote_retry_after_seconds == 60
    assert settings.rate_limit_auto_cleanup is True


def test_reads_supabase_settings_from_env(monkeypatch) -> None:
    monkeypatch.setenv("SUPABASE_URL", "https://demo.supabase.co/")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "anon-key")

    settings = Settings(_env_file=None)

    assert settings.supabase_url == "https://demo.supabase.co"
    assert settings.supabase_anon_key == "anon-key"


@pytest.mark.parametrize(
    ("env_name", "raw"),
    [
        ("RATE_LIMIT_CLEANUP_INTERVAL_SECONDS", "0"),
        ("RATE_LIMIT_WAIT_MAX_ATTEMPTS", "-1"),
        ("RATE_LIMIT_WAIT_MAX_SECONDS", "0"),
        ("HTTPX_TIMEOUT", "0"),
    ],
)
def test_rejects_non_positive_values(monkeypatch, env_name: str, raw: str) -> None:
    monkeypatch.setenv(env_name, raw)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)
