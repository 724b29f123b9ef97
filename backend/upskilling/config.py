"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
DEFAULT_DB_URL = f"sqlite:///{BASE / 'app.db'}"


class Settings:
    ENV: str
    DATABASE_URL: str
    DB_ECHO: bool
    API_PREFIX: str
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool
    SEED_ON_STARTUP: bool
    HOST: str
    PORT: int

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DB_URL)
        self.DB_ECHO = os.getenv("DB_ECHO", "false").lower() == "true"
        self.API_PREFIX = os.getenv("API_PREFIX", "/api/v1").rstrip("/")
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.SEED_ON_STARTUP = os.getenv("SEED_ON_STARTUP", "false").lower() == "true"
        self.HOST = os.getenv("HOST", "0.0.0.0")
        self.PORT = int(os.getenv("PORT", "8080"))
        self._validate()

    def _validate(self):
        if not self.DATABASE_URL.startswith(("sqlite", "postgresql")):
            raise RuntimeError("DATABASE_URL must point to a SQLite or PostgreSQL database")
        if self.API_PREFIX and not self.API_PREFIX.startswith("/"):
            raise RuntimeError("API_PREFIX must start with '/'")
        if not 0 < self.PORT < 65536:
            raise RuntimeError("PORT must be between 1 and 65535")


settings = Settings()
