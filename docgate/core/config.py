from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    APP_ENV: str = "local"
    APP_NAME: str = "docgate"
    API_PREFIX: str = "/rest/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    MONGO_URI: str
    MONGO_SERVER_API_VERSION: str = "1"
    MONGO_TIMEOUT_MS: int = 10000
    MONGO_MAX_TIME_MS: int = 5000

    ALLOWED_ORIGINS: str = "http://localhost:8000"
    ALLOW_NULL_ORIGIN: bool = False  # development/testing only

    @property
    def cors_origins_list(self) -> List[str]:
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        if self.ALLOW_NULL_ORIGIN and "*" not in origins:
            origins.append("*")
        return origins

settings = Settings()
