"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent
STORE_BACKENDS = ("memory", "sql")


class Settings:
    ENV: str
    LOG_LEVEL: str
    QUIZ_STORE: str
    DATABASE_URL: str
    ALLOW_DEV_CORS: bool

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.QUIZ_STORE = os.getenv("QUIZ_STORE", "memory").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'quiz.db'}")
        # permissive CORS is only on by default in dev
        cors_default = "true" if self.ENV == "dev" else "false"
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", cors_default).lower() == "true"
        self._validate()

    def _validate(self):
        if self.QUIZ_STORE not in STORE_BACKENDS:
            raise RuntimeError(f"QUIZ_STORE must be one of {', '.join(STORE_BACKENDS)}, got {self.QUIZ_STORE!r}")
        if self.QUIZ_STORE == "sql" and not self.DATABASE_URL:
            raise RuntimeError("DATABASE_URL must be set when QUIZ_STORE=sql")


settings = Settings()
