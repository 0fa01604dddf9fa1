import json
from pathlib import Path
from typing import Annotated, List, Literal, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'EventPass'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production

    # Security
    SECRET_KEY: SecretStr = SecretStr('test_secret_key_change_in_production')
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ALGORITHM: str = 'HS256'
    AUTH_COOKIE_NAME: str = 'eventpass_auth'

    # CORS
    # Comma separated or a JSON list, split by assemble_cors_origins
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and v.startswith('['):
            return json.loads(v)
        if isinstance(v, str):
            return [i.strip() for i in v.split(',') if i.strip()]
        if isinstance(v, list):
            return v
        return []

    # Storage: 'memory' keeps everything in-process (local runs and tests)
    STORAGE_BACKEND: Literal['postgres', 'memory'] = 'postgres'
    AUTO_CREATE_TABLES: bool = False

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = 'eventpass'
    POSTGRES_PASSWORD: SecretStr = SecretStr('eventpass')
    POSTGRES_DB: str = 'eventpass'
    POSTGRES_REPLICA_SERVER: Optional[str] = None
    POSTGRES_REPLICA_PORT: Optional[int] = None

    # Connection pool
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 3600  # seconds
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_REPLICA_SERVER}:{self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT}'
            f'/{self.POSTGRES_DB}'
        )

    # Ticket ledger
    CANCELLATION_WINDOW_HOURS: int = 24
    TICKET_ID_MAX_ATTEMPTS: int = 3  # regenerate ticket number / token on collision
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 5.0
    REFUND_RETRY_INTERVAL_SECONDS: float = 60.0
    REFUND_RETRY_BATCH_SIZE: int = 50

    # Check-in
    RECENT_SCANS_LIMIT: int = 10


settings = Settings()  # type: ignore
