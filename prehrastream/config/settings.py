from typing import Optional, Dict, Any
from pydantic import computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False
    )

    # ===========================
    # Addon Customization
    # ===========================
    ADDON_ID: Optional[str] = "community.prehrastream"
    ADDON_NAME: Optional[str] = "Přehraj.to"

    # ===========================
    # Server Configuration
    # ===========================
    PORT: Optional[int] = 7000

    # ===========================
    # Source Configuration
    # ===========================
    PREHRAJTO_URL: str = "https://prehraj.to"
    PREHRAJTO_EMAIL: Optional[str] = None
    PREHRAJTO_PASSWORD: Optional[str] = None

    # ===========================
    # Search Configuration
    # ===========================
    SEARCH_MAX_RESULTS: int = 10
    SEARCH_MAX_PAGES: int = 3
    SCRAPE_REQUEST_DELAY: float = 1.0

    # ===========================
    # Query Variants Configuration
    # ===========================
    QUERY_LANGUAGE_TAG: str = "CZ"
    QUERY_RESOLUTION_TAG: str = "1080p"
    QUERY_QUALITY_TAG: str = "4K"
    QUERY_AMPERSAND_WORD: str = "a"

    # ===========================
    # Subtitles Configuration
    # ===========================
    SUBTITLE_LANGUAGE: str = "cs"

    # ===========================
    # Cache Configuration
    # ===========================
    CONTENT_CACHE_TTL: int = 3600
    CACHE_BACKEND: str = "memory"

    # ===========================
    # Database Configuration
    # ===========================
    DATABASE_TYPE: Optional[str] = "sqlite"
    DATABASE_PATH: Optional[str] = "/app/data/prehrastream.db"
    DATABASE_URL: Optional[str] = ""

    # ===========================
    # HTTP Timeout Configuration
    # ===========================
    HTTP_TIMEOUT: Optional[int] = 30
    METADATA_TIMEOUT: Optional[int] = 10
    STREAM_REQUEST_TIMEOUT: int = 60

    # ===========================
    # TMDB Configuration
    # ===========================
    TMDB_API_URL: str = "https://api.themoviedb.org/3"
    TMDB_API_KEY: Optional[str] = None
    TMDB_LANGUAGE: str = "cs-CZ"
    TMDB_FALLBACK_LANGUAGE: str = "en-US"

    # ===========================
    # Proxy Configuration
    # ===========================
    PROXY_URL: Optional[str] = None

    # ===========================
    # Logging Configuration
    # ===========================
    LOG_LEVEL: Optional[str] = "DEBUG"

    # ===========================
    # Field Validators
    # ===========================
    @field_validator("PREHRAJTO_URL", "TMDB_API_URL", "PROXY_URL")
    @classmethod
    def normalize_urls(cls, v):
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("CACHE_BACKEND", "DATABASE_TYPE")
    @classmethod
    def normalize_backend(cls, v):
        if isinstance(v, str):
            return v.lower()
        return v

    # ===========================
    # Computed Properties
    # ===========================
    @computed_field
    @property
    def ADDON_MANIFEST(self) -> Dict[str, Any]:
        return {
            "id": self.ADDON_ID,
            "name": self.ADDON_NAME,
            "version": "1.1.0",
            "description": "Streamy z prehraj.to",
            "catalogs": [],
            "resources": ["stream"],
            "types": ["movie", "series"],
            "idPrefixes": ["tt"],
            "behaviorHints": {
                "adult": False,
                "configurable": False
            },
            "logo": "https://stremio.com/website/stremio-logo.png"
        }

    @property
    def has_premium_credentials(self) -> bool:
        return bool(self.PREHRAJTO_EMAIL and self.PREHRAJTO_PASSWORD)

    def get_database_url(self) -> str:
        if self.DATABASE_TYPE == "sqlite":
            return f"sqlite:///{self.DATABASE_PATH}"
        return f"postgresql://{self.DATABASE_URL}"


# ===========================
# Settings Instance
# ===========================
settings = Settings()
