"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env file).
Both the API process and the pretty ID server read the same settings.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "DynamicStory"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Azure Cosmos DB
    AZURE_COSMOS_ENDPOINT: str | None = None
    AZURE_COSMOS_CONNECTION_STRING: str | None = None  # For local emulator only
    AZURE_COSMOS_DATABASE: str = "dynamicstory"
    AZURE_COSMOS_DISABLE_SSL: bool = False

    # Azure Communication Services (Email)
    AZURE_COMMUNICATION_CONNECTION_STRING: str | None = None
    AZURE_EMAIL_SENDER_ADDRESS: str | None = None
    FEEDBACK_EMAIL_ADDRESS: str = "contact@dynamicstory.org"
    ACTIVATION_URL: str = "https://dynamicstory.org/user/activate/"

    # Passwords
    # Cost factor is 2^rounds iterations; 10 is roughly 10 hashes/sec on a 2GHz core.
    BCRYPT_ROUNDS: int = 10

    # Sessions
    SESSION_NONCE_BYTES: int = 256
    SESSION_TTL_SECONDS: int = 60 * 60 * 24 * 2  # 2 days
    SESSION_REAPER_ENABLED: bool = True
    SESSION_REAPER_INTERVAL_MINUTES: int = 60

    # Activation IDs share the nonce retry budget
    ACTIVATION_ID_NONCE_BYTES: int = 32
    NONCE_MAX_ATTEMPTS: int = 5

    # Feed
    FEED_PAGE_SIZE: int = 40

    # Pretty ID server
    PRETTY_ID_HOST: str = "localhost"
    PRETTY_ID_PORT: int = 3001
    PRETTY_ID_PATH: str = "/nextPrettyId"
    PRETTY_ID_TIMEOUT_SECONDS: float = 10.0

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    # Field limits (lengths count characters, except the password max which counts bytes)
    USERNAME_MIN_LENGTH: int = 3
    USERNAME_MAX_LENGTH: int = 20
    EMAIL_MAX_LENGTH: int = 254
    PASSWORD_MIN_LENGTH: int = 5
    PASSWORD_MAX_LENGTH: int = 72  # bcrypt rejects anything longer than 72 bytes
    STORY_TITLE_MIN_LENGTH: int = 10
    STORY_TITLE_MAX_LENGTH: int = 140
    STORY_NARRATIVE_MIN_LENGTH: int = 20
    STORY_NARRATIVE_MAX_LENGTH: int = 100 * 1000
    QUESTION_TITLE_MIN_LENGTH: int = 5
    QUESTION_TITLE_MAX_LENGTH: int = 140
    ANSWER_MIN_LENGTH: int = 1
    ANSWER_MAX_LENGTH: int = 100
    FEEDBACK_MIN_LENGTH: int = 5

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def pretty_id_url(self) -> str:
        """Full URL of the pretty ID endpoint."""
        return f"http://{self.PRETTY_ID_HOST}:{self.PRETTY_ID_PORT}{self.PRETTY_ID_PATH}"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
