"""Tests for configuration loading."""

import pytest
import yaml
from mediaverse.config import ENV_OVERRIDES, Settings, get_settings, reload_settings, validate_credentials


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("MEDIAVERSE_CONFIG", raising=False)
    # Keep the example config out of reach so nothing gets copied
    monkeypatch.chdir(tmp_path)


def _write(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


def test_loads_values(tmp_path):
    path = _write(
        tmp_path,
        {
            "tmdb": {"api_key": "tmdb-123", "language": "en-US", "region": "US"},
            "rawg": {"api_key": "rawg-456"},
            "storage": {"database_path": "media.db"},
            "pacing": {"import_ms": 0, "enrichment_ms": 50},
            "http": {"timeout_seconds": 5},
            "log_level": "debug",
        },
    )

    settings = Settings(path)

    assert settings.tmdb_api_key == "tmdb-123"
    assert settings.tmdb_language == "en-US"
    assert settings.tmdb_region == "US"
    assert settings.rawg_api_key == "rawg-456"
    assert settings.google_books_api_key is None
    assert str(settings.database_path) == "media.db"
    assert settings.import_pacing_ms == 0
    assert settings.enrichment_pacing_ms == 50
    assert settings.http_timeout == 5
    assert settings.log_level == "DEBUG"
    assert validate_credentials(settings) == (True, [])


def test_placeholders_count_as_missing(tmp_path):
    path = _write(
        tmp_path,
        {
            "tmdb": {"api_key": "YOUR_TMDB_API_KEY_HERE"},
            "rawg": {"api_key": ""},
            "supabase": {"url": "YOUR_SUPABASE_URL_HERE", "key": "YOUR_SUPABASE_KEY_HERE"},
        },
    )

    settings = Settings(path)

    assert settings.tmdb_api_key is None
    assert settings.supabase_configured is False
    assert validate_credentials(settings) == (False, ["TMDB_API_KEY", "RAWG_API_KEY"])


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = _write(tmp_path, {"tmdb": {"api_key": "from-file"}})
    monkeypatch.setenv("TMDB_API_KEY", "from-env")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_KEY", "anon")

    settings = Settings(path)

    assert settings.tmdb_api_key == "from-env"
    assert settings.supabase_configured is True


def test_empty_sections_and_missing_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("tmdb:\nrawg:\n", encoding="utf-8")
    assert Settings(path).tmdb_language == "es-ES"

    settings = Settings(tmp_path / "absent.yaml")
    assert settings.import_pacing_ms == 200
    assert settings.enrichment_pacing_ms == 300
    assert settings.http_timeout == 15


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = _write(tmp_path, {"rawg": {"api_key": "env-path"}})
    monkeypatch.setenv("MEDIAVERSE_CONFIG", str(path))

    assert Settings().rawg_api_key == "env-path"


def test_invalid_values_rejected(tmp_path):
    path = _write(tmp_path, {"pacing": {"import_ms": -5}})
    with pytest.raises(Exception):
        Settings(path)


def test_settings_singleton(tmp_path, monkeypatch):
    first = _write(tmp_path, {"rawg": {"api_key": "first"}})
    monkeypatch.setenv("MEDIAVERSE_CONFIG", str(first))
    assert reload_settings().rawg_api_key == "first"

    first.write_text(yaml.safe_dump({"rawg": {"api_key": "second"}}), encoding="utf-8")
    assert get_settings().rawg_api_key == "first"
    assert reload_settings().rawg_api_key == "second"
    assert get_settings() is get_settings()
