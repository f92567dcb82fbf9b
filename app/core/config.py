from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./postora.db"
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # Seconds a SQLite writer waits for another worker's write lock.
    SQLITE_BUSY_TIMEOUT: float = 15.0

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://postora.app,https://www.postora.app"
    CORS_ORIGINS: str = "*"

    # Header the identity provider uses to forward the authenticated user id.
    USER_ID_HEADER: str = "X-User-Id"

    # Window used by the "monthly posts" analytics counter.
    ANALYTICS_WINDOW_DAYS: int = 30

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def sqlalchemy_url(self) -> str:
        url = self.DATABASE_URL.strip()
        if url.startswith("postgres://"):
            # SQLAlchemy 2.x expects a driver-qualified URL
            url = url.replace("postgres://", "postgresql+psycopg2://", 1)
        return url


settings = Settings()
