from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "LaunchCache"
    API_V1_STR: str = "/api/v1"

    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8080

    SPACEX_BASE_URL: str = "https://api.spacexdata.com/v4"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # Shared by the upstream and rendered-response namespaces
    CACHE_TTL_SECONDS: int = 60

    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
