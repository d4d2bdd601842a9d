from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "postgresql://compass:compass@db:5432/compass"
    APP_ENV: str = "development"

    # Comma-separated allowed origins, or "*" to allow all.
    # Example: "https://compass.app,https://api.compass.app"
    CORS_ORIGINS: str = "*"

    # Root level for application loggers (DEBUG shows per-pillar scoring).
    LOG_LEVEL: str = "INFO"

    @property
    def cors_origins_list(self) -> list[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
