from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev_secret_change_me"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "JobBoard"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    ORIGIN: str = "http://localhost:8080"

    # Persistence
    STORE_BACKEND: str = "sql"  # 'sql' | 'json'
    DATABASE_URL: str = "sqlite:///./jobboard.db"
    DATA_DIR: str = "./data"

    # Sessions
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "session"

    # Passwords
    BCRYPT_ROUNDS: int = 12

    # Bootstrap admin (both must be set for ensure_admin to run)
    ADMIN_EMAIL: str = ""
    ADMIN_PASSWORD: str = ""

    # Email OTP
    OTP_TTL_MINUTES: int = 5
    OTP_MAX_ATTEMPTS: int = 5
    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "noreply@jobboard.local"

    # SMS verification (Twilio Verify)
    TWILIO_ACCOUNT_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_VERIFY_SERVICE_SID: str = ""
    SMS_TIMEOUT_SECONDS: float = 10.0
    DEFAULT_COUNTRY_CODE: str = "+91"
    MOBILE_MIN_DIGITS: int = 10

    # Analytics
    ANALYTICS_RECENT_DAYS: int = 30
    ANALYTICS_HISTORY_LIMIT: int = 100

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ORIGIN.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Cross-site deployments need Secure + SameSite=None cookies."""
        return self.ENVIRONMENT == "production" or self.ORIGIN.startswith("https://")


settings = Settings()
