from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql+psycopg2://betonyou:betonyou@db:5432/betonyou"
    APP_ENV: str = "development"

    # Shared secret of the auth provider; user JWTs are HS256-signed with it.
    SECRET_KEY: str = "changeme-secret-key"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str | None = None

    # Bearer token the scheduler sends to /cron/* in production.
    CRON_SECRET: str = ""

    RESEND_API_KEY: str = ""
    EMAIL_FROM: str = "Bet On Yourself <notifications@betonyou.app>"
    APP_URL: str = "https://betonyou.app"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://myapp.com,https://api.myapp.com"
    CORS_ORIGINS: str = "*"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"


settings = Settings()
