# backend/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite:///./database_productadmin.db"

    # Admin panel routing: /{ADMIN_ROUTE_PREFIX}/product
    ADMIN_ROUTE_PREFIX: str = "admin"

    # "public" disk: files are served from STORAGE_ROOT under STORAGE_URL_PREFIX
    STORAGE_ROOT: str = "storage/app/public"
    STORAGE_URL_PREFIX: str = "storage/"

    # Display format of money columns in the product list
    CURRENCY_PREFIX: str = "IDR"
    NUMBER_DEC_POINT: str = ","
    NUMBER_THOUSANDS_SEP: str = "."

    FRONTEND_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=str(env_path), extra="ignore")

settings = Settings()
