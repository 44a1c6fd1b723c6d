from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./bizdir.db"
    project_name: str = "Local Business Directory API"
    api_prefix: str = "/api"

    # Bearer tokens: HS256 JWT signed with JWT_SECRET, valid for JWT_EXPIRES_DAYS
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7

    # Google OAuth (optional). Without a client id/secret the /auth/google routes refuse to start the flow.
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_callback_url: str = "http://localhost:8000/api/auth/google/callback"

    # Browser app that receives the OAuth redirect (/auth/callback?token=...)
    frontend_url: str = "http://localhost:5173"

    # Photo uploads, stored on local disk and served under uploads_url_prefix
    upload_dir: str = "uploads"
    uploads_url_prefix: str = "/uploads"
    max_upload_bytes: int = 10 * 1024 * 1024
    max_photos: int = 10

    # Reverse geocoding (Nominatim-compatible)
    geocoder_url: str = "https://nominatim.openstreetmap.org"
    geocoder_user_agent: str = "bizdir/1.0"

    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # DEBUG=true forces debug-level logging regardless of LOG_LEVEL
    debug: bool = Field(default=False, alias="DEBUG")

    @property
    def google_enabled(self) -> bool:
        """Google login is available only when both client credentials are set."""
        return bool(self.google_client_id and self.google_client_secret)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid"
    )


settings = Settings()
