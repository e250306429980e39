"""Configuration management using Pydantic models."""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_ENRICHMENT_PACING_MS,
    DEFAULT_HTTP_TIMEOUT_SECONDS,
    DEFAULT_IMPORT_PACING_MS,
    DEFAULT_LANGUAGE,
    DEFAULT_REGION,
)

logger = logging.getLogger(__name__)


# Placeholder values that indicate unconfigured credentials
INVALID_PLACEHOLDERS = {
    "YOUR_TMDB_API_KEY_HERE",
    "YOUR_GOOGLE_BOOKS_API_KEY_HERE",
    "YOUR_RAWG_API_KEY_HERE",
    "YOUR_SUPABASE_URL_HERE",
    "YOUR_SUPABASE_KEY_HERE",
    "",
}

# Environment variables that override values from the config file
ENV_OVERRIDES = {
    "TMDB_API_KEY": ("tmdb", "api_key"),
    "GOOGLE_BOOKS_API_KEY": ("google_books", "api_key"),
    "RAWG_API_KEY": ("rawg", "api_key"),
    "SUPABASE_URL": ("supabase", "url"),
    "SUPABASE_KEY": ("supabase", "key"),
    "SUPABASE_EMAIL": ("supabase", "email"),
    "SUPABASE_PASSWORD": ("supabase", "password"),
}


class TMDBConfig(BaseModel):
    """TMDB API configuration."""
    api_key: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    region: str = DEFAULT_REGION


class GoogleBooksConfig(BaseModel):
    """Google Books API configuration."""
    api_key: Optional[str] = None
    lang_restrict: Optional[str] = "es"


class RawgConfig(BaseModel):
    """RAWG API configuration."""
    api_key: Optional[str] = None


class SupabaseConfig(BaseModel):
    """Remote backend configuration."""
    url: Optional[str] = None
    key: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class StorageConfig(BaseModel):
    """Local store settings."""
    database_path: str = "data/mediaverse.db"


class PacingConfig(BaseModel):
    """Delays between provider requests."""
    import_ms: int = Field(default=DEFAULT_IMPORT_PACING_MS, ge=0)
    enrichment_ms: int = Field(default=DEFAULT_ENRICHMENT_PACING_MS, ge=0)


class HTTPConfig(BaseModel):
    """Outbound HTTP settings."""
    timeout_seconds: float = Field(default=DEFAULT_HTTP_TIMEOUT_SECONDS, gt=0)


class Config(BaseModel):
    """Root configuration model."""
    tmdb: TMDBConfig = Field(default_factory=TMDBConfig)
    google_books: GoogleBooksConfig = Field(default_factory=GoogleBooksConfig)
    rawg: RawgConfig = Field(default_factory=RawgConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    pacing: PacingConfig = Field(default_factory=PacingConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    log_level: str = "INFO"


def _clean(value: Optional[str]) -> Optional[str]:
    """Treat placeholders and blanks as unset."""
    if value is None:
        return None
    value = str(value).strip()
    return None if value in INVALID_PLACEHOLDERS else value


class Settings:
    """Application settings loaded from config.yaml and the environment."""

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Load and validate configuration."""
        self.config_path = Path(config_path) if config_path else self._get_config_path()

        if not self.config_path.exists():
            self._create_config_template()

        self._load_config()

    def _get_config_path(self) -> Path:
        """Get config file path from MEDIAVERSE_CONFIG or the default."""
        env_path = os.environ.get("MEDIAVERSE_CONFIG")
        if env_path:
            return Path(env_path)
        return Path("data/config.yaml")

    def _create_config_template(self) -> None:
        """Create config file from the example, if one is available."""
        example_path = Path("config.example.yaml")
        if example_path.exists():
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy(example_path, self.config_path)
            logger.info(f"Created config template: {self.config_path}")
            logger.info("Edit the config file with your API keys")

    def _load_config(self) -> None:
        """Load configuration from YAML using Pydantic, then apply env overrides."""
        raw_config: dict = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    raw_config = yaml.safe_load(f) or {}
            except Exception as e:
                logger.error(f"Failed to load config: {e}")
                raise
        else:
            logger.info(f"No config file at {self.config_path}, using defaults")

        # Empty YAML sections load as None
        raw_config = {k: v for k, v in raw_config.items() if v is not None}

        for env_name, (section, key) in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value:
                raw_config.setdefault(section, {})
                raw_config[section][key] = value

        config = Config(**raw_config)
        self.config = config

        self.tmdb_api_key = _clean(config.tmdb.api_key)
        self.tmdb_language = config.tmdb.language
        self.tmdb_region = config.tmdb.region

        self.google_books_api_key = _clean(config.google_books.api_key)
        self.google_books_lang_restrict = config.google_books.lang_restrict

        self.rawg_api_key = _clean(config.rawg.api_key)

        self.supabase_url = _clean(config.supabase.url)
        self.supabase_key = _clean(config.supabase.key)
        self.supabase_email = _clean(config.supabase.email)
        self.supabase_password = config.supabase.password

        self.database_path = Path(config.storage.database_path)
        self.import_pacing_ms = config.pacing.import_ms
        self.enrichment_pacing_ms = config.pacing.enrichment_ms
        self.http_timeout = config.http.timeout_seconds
        self.log_level = config.log_level.upper()

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)


def validate_credentials(settings: Settings) -> tuple[bool, list[str]]:
    """
    Check which provider keys are missing.
    Google Books works without a key and is not reported.
    Returns (is_valid, list_of_missing_vars).
    """
    missing = []
    if not settings.tmdb_api_key:
        missing.append("TMDB_API_KEY")
    if not settings.rawg_api_key:
        missing.append("RAWG_API_KEY")
    return len(missing) == 0, missing


# Singleton cache for settings
_SETTINGS_SINGLETON = None

def get_settings() -> Settings:
    """Get (cached) application settings singleton."""
    global _SETTINGS_SINGLETON
    if _SETTINGS_SINGLETON is None:
        _SETTINGS_SINGLETON = Settings()
    return _SETTINGS_SINGLETON

def reload_settings() -> Settings:
    """Force reload of application settings singleton."""
    global _SETTINGS_SINGLETON
    _SETTINGS_SINGLETON = Settings()
    return _SETTINGS_SINGLETON
