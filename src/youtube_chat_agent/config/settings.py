"""Application settings and configuration."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_TOKEN_PATH = "data/youtube_token.json"
DEFAULT_PLAYLIST_TITLE = "Watch Later (Agent)"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Google Gemini API
    google_api_key: str = Field(
        default="",
        description="Google API key for Gemini",
        validation_alias="GOOGLE_API_KEY",
    )
    gemini_model: str = Field(
        default=DEFAULT_GEMINI_MODEL,
        description="Gemini model to use",
        validation_alias="GEMINI_MODEL",
    )
    model_max_output_tokens: int = Field(
        default=2048,
        ge=64,
        description="Maximum tokens per model response",
        validation_alias="MODEL_MAX_OUTPUT_TOKENS",
    )

    # YouTube Data API (public search)
    youtube_api_key: str = Field(
        default="",
        description="YouTube Data API key",
        validation_alias="YOUTUBE_API_KEY",
    )
    search_default_max_results: int = Field(
        default=6,
        ge=1,
        le=10,
        description="Videos returned by youtube_search when the model omits maxResults",
        validation_alias="SEARCH_DEFAULT_MAX_RESULTS",
    )
    search_max_results_limit: int = Field(
        default=10,
        ge=1,
        le=50,
        description="Upper clamp for youtube_search maxResults",
        validation_alias="SEARCH_MAX_RESULTS_LIMIT",
    )
    recommendation_region_code: str = Field(
        default="IN",
        description="Region code for the most-popular chart",
        validation_alias="RECOMMENDATION_REGION_CODE",
    )

    # Google OAuth (delegated account)
    google_client_id: str = Field(
        default="",
        description="OAuth client ID",
        validation_alias="GOOGLE_CLIENT_ID",
    )
    google_client_secret: str = Field(
        default="",
        description="OAuth client secret",
        validation_alias="GOOGLE_CLIENT_SECRET",
    )
    oauth_redirect_uri: str = Field(
        default="http://localhost:8000/authorize/callback",
        description="Redirect URI registered with the OAuth client",
        validation_alias="OAUTH_REDIRECT_URI",
    )
    oauth_token_path: str = Field(
        default=DEFAULT_TOKEN_PATH,
        description="Where the delegated account credential is persisted",
        validation_alias="OAUTH_TOKEN_PATH",
    )
    save_for_later_playlist_title: str = Field(
        default=DEFAULT_PLAYLIST_TITLE,
        description="Title of the playlist used by save-for-later",
        validation_alias="SAVE_FOR_LATER_PLAYLIST_TITLE",
    )

    # Caching
    watch_history_cache_ttl_seconds: float = Field(
        default=30.0,
        ge=0,
        description="How long watch history reads are served from cache",
        validation_alias="WATCH_HISTORY_CACHE_TTL_SECONDS",
    )

    # Timeouts
    api_timeout_seconds: int = Field(
        default=30,
        ge=1,
        description="Timeout in seconds for each Gemini and YouTube request",
        validation_alias="API_TIMEOUT_SECONDS",
    )

    # API Server
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
        validation_alias="API_HOST",
    )
    api_port: int = Field(
        default=8000,
        description="API server port",
        validation_alias="API_PORT",
    )
    api_debug: bool = Field(
        default=False,
        description="Enable debug mode",
        validation_alias="API_DEBUG",
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting",
        validation_alias="RATE_LIMIT_ENABLED",
    )
    rate_limit_rpm: int = Field(
        default=60,
        description="Requests per minute per client",
        validation_alias="RATE_LIMIT_RPM",
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated allowed CORS origins (* for all)",
        validation_alias="CORS_ORIGINS",
    )

    @model_validator(mode="after")
    def normalize_blank_values(self) -> "Settings":
        """Fall back to defaults when env values are empty or whitespace."""
        self.google_api_key = self.google_api_key.strip()
        self.youtube_api_key = self.youtube_api_key.strip()
        self.google_client_id = self.google_client_id.strip()
        self.google_client_secret = self.google_client_secret.strip()

        self.gemini_model = self.gemini_model.strip() or DEFAULT_GEMINI_MODEL
        self.oauth_token_path = self.oauth_token_path.strip() or DEFAULT_TOKEN_PATH
        self.save_for_later_playlist_title = (
            self.save_for_later_playlist_title.strip() or DEFAULT_PLAYLIST_TITLE
        )
        if self.search_default_max_results > self.search_max_results_limit:
            self.search_default_max_results = self.search_max_results_limit
        return self

    @property
    def oauth_configured(self) -> bool:
        """Whether the OAuth client is configured well enough to start a flow."""
        return bool(self.google_client_id and self.google_client_secret)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
