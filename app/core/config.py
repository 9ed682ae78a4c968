from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "ABACUS Learning Platform API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api"
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24  # 1 day
    JWT_ALGORITHM: str = "HS256"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:3001",
        "http://127.0.0.1:3000",
    ]

    # Database Configuration
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: str = "5432"
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: Optional[str] = None
    DATABASE_NAME: Optional[str] = None

    DATABASE_URL: str = ""
    TEST_DATABASE_URL: Optional[str] = None

    def __init__(self, **data):
        super().__init__(**data)
        if not self.DATABASE_URL:
            if self.DATABASE_HOST:
                self.DATABASE_URL = (
                    f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                    f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
                )
            else:
                self.DATABASE_URL = "sqlite:///./abacus.db"

    # Caching (TTL in seconds, size in entries)
    CACHE_ENABLED: bool = True
    QUERY_CACHE_TTL: int = 5 * 60
    QUERY_CACHE_MAX_SIZE: int = 1000
    STATS_CACHE_TTL: int = 2 * 60
    STATS_CACHE_MAX_SIZE: int = 500
    PUBLIC_CACHE_TTL: int = 10 * 60
    PUBLIC_CACHE_MAX_SIZE: int = 200
    CACHE_SWEEP_INTERVAL: int = 60

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False

    class Config:
        env_file = ".env"

settings = Settings()
