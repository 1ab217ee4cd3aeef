import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = os.path.dirname(os.path.dirname(__file__))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "ScamGuard"
    LOG_LEVEL: str = "INFO"

    # Persistent store (one JSON file per collection) and blob store root
    DATA_DIR: str = os.path.join(BASE_DIR, "data")
    BLOB_DIR: str = os.path.join(BASE_DIR, "data", "blobs")
    PUBLIC_BLOB_URL: str = "http://localhost:8000/blobs"

    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    RESET_TOKEN_EXPIRE_MINUTES: int = 10
    VERIFICATION_CODE_EXPIRE_MINUTES: int = 30

    # The single designated admin identifier, provisioned as admin on verification
    ADMIN_IDENTIFIER: Optional[str] = None

    MAX_EVIDENCE_FILES: int = 5
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    SENDER_EMAIL: str = "no-reply@scamguard.local"


settings = Settings()
