"""Runtime configuration, read from the environment (or a .env file)."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 3001
    cors_allowed_origins: str = "*"
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def cors_origins(self) -> str | list[str]:
        """'*' or a comma separated list of origins."""
        if self.cors_allowed_origins.strip() == "*":
            return "*"
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
