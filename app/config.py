from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import Optional
from pathlib import Path

root_dir = Path(__file__).parent.parent
env_path = root_dir / ".env"
load_dotenv(env_path)


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Template Publisher API"
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None

    # PostgreSQL Database
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: str = "publisher"
    POSTGRES_PASSWORD: str = "publisher"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "publisher"
    AUTO_CREATE_TABLES: bool = False

    # Kubernetes
    K8S_IN_CLUSTER: bool = False
    K8S_CONFIG_FILE: Optional[str] = None

    # OpenAPI
    APIKEY_HEADER: str = "X-API-Key"
    DEFAULT_OPERATOR: str = "openapi"
    MAX_REPLICAS: int = 32

    # Database URL
    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"
        case_sensitive = True


settings = Settings()
