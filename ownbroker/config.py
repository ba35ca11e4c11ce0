"""Application configuration from environment."""
from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings
from functools import lru_cache

# Load .env from project root (parent of ownbroker/) so env vars are available everywhere
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


class Settings(BaseSettings):
    app_name: str = "OwnBroker Simplified"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Single store file; one shared connection is opened against it.
    database_url: str = "sqlite:///./database.db"
    sql_echo: bool = False

    # Development-only: insert/refresh the fixed demo accounts on cold start.
    seed_bootstrap_accounts: bool = True
    bcrypt_rounds: int = 12

    @field_validator("database_url", "log_level", mode="before")
    @classmethod
    def strip_value(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("bcrypt_rounds")
    @classmethod
    def check_rounds(cls, v: int) -> int:
        # bcrypt accepts cost factors 4..31
        if v < 4 or v > 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31")
        return v

    class Config:
        env_file = str(_env_path)
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()
