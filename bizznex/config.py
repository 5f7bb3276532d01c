import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings(BaseModel):
    """Runtime configuration, passed explicitly to ``create_app``"""

    database_url: str = "sqlite:///./bizznex.db"
    db_pool_size: int = 20
    db_max_overflow: int = 30
    db_pool_timeout: int = 30
    db_pool_recycle: int = 300
    db_log_slow_queries: bool = True
    db_slow_query_threshold: float = 1.0

    # Firebase Configuration
    firebase_project_id: Optional[str] = None
    # Development only: every request is served as a local profile
    auth_bypass: bool = False

    # Dodo Payments Configuration
    dodo_payments_api_key: Optional[str] = None
    dodo_payments_webhook_secret: Optional[str] = None
    # "test_mode" or "live_mode" - default to test for safety
    dodo_payments_environment: str = "test_mode"
    starter_price_id: Optional[str] = None
    pro_price_id: Optional[str] = None

    # Base URL for checkout/portal redirects
    base_url: str = "http://localhost:3000"

    # Resend Email Configuration
    resend_api_key: Optional[str] = None
    email_from_address: str = "Bizznex <noreply@bizznex.app>"

    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    security_headers_enabled: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL") or "sqlite:///./bizznex.db",
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "20")),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "30")),
            db_pool_timeout=int(os.getenv("DB_POOL_TIMEOUT", "30")),
            db_pool_recycle=int(os.getenv("DB_POOL_RECYCLE", "300")),
            db_log_slow_queries=_env_flag("DB_LOG_SLOW_QUERIES", "true"),
            db_slow_query_threshold=float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0")),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID"),
            auth_bypass=_env_flag("AUTH_BYPASS"),
            dodo_payments_api_key=os.getenv("DODO_PAYMENTS_API_KEY"),
            dodo_payments_webhook_secret=os.getenv("DODO_PAYMENTS_WEBHOOK_SECRET"),
            dodo_payments_environment=os.getenv("DODO_PAYMENTS_ENVIRONMENT", "test_mode"),
            starter_price_id=os.getenv("STARTER_PRICE_ID"),
            pro_price_id=os.getenv("PRO_PRICE_ID"),
            base_url=os.getenv("BASE_URL", "http://localhost:3000").rstrip("/"),
            resend_api_key=os.getenv("RESEND_API_KEY"),
            email_from_address=os.getenv(
                "EMAIL_FROM_ADDRESS", "Bizznex <noreply@bizznex.app>"
            ),
            allowed_origins=os.getenv(
                "ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173"
            ).split(","),
            security_headers_enabled=_env_flag("SECURITY_HEADERS_ENABLED", "true"),
        )

    @property
    def known_price_ids(self) -> set[str]:
        return {p for p in (self.starter_price_id, self.pro_price_id) if p}
