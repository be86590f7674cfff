# backend/config.py
from pydantic_settings import BaseSettings
from typing import ClassVar, Optional
from pathlib import Path

# Resolve absolute path to the .env file for reliable loading
env_path = Path(__file__).parent.parent / ".env"

class Settings(BaseSettings):
    SECRET_KEY: str = "dev-secret-change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    DATABASE_URL: str = "sqlite:///./inventory.db"

    # Directory for uploaded goods photos, served under /uploads
    UPLOAD_DIR: str = "static/uploads"

    # Goods code format: PREFIX/YY/MM/NNNNN
    CODE_PREFIX: str = "BRG"
    CODE_MAX_RETRIES: int = 5

    LOG_LEVEL: str = "INFO"
    FRONTEND_URL: Optional[str] = None

    class Config:
        env_file: ClassVar[str] = str(env_path)
        extra: ClassVar[str] = "ignore"

settings = Settings()
