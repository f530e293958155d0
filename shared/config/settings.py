import os
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _default_database_url() -> str:
    # In Docker, POSTGRES_HOST will be 'postgres'
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    name = os.getenv("POSTGRES_DB", "print_orders")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


@dataclass(frozen=True)
class Settings:
    database_url: str
    database_echo: bool = False
    service_name: str = "print-order-intake"

    # Mail delivery (Resend-compatible HTTP API)
    mail_api_key: Optional[str] = None
    mail_api_url: str = "https://api.resend.com/emails"
    email_from: str = "noreply@example.com"
    order_notify_email: str = "orders@example.com"

    # Uploads and pricing
    max_upload_mb: int = 50
    support_removal_fee: Decimal = Decimal("5.00")
    trust_client_estimates: bool = False

    # Observability
    metrics_enabled: bool = True
    otlp_endpoint: Optional[str] = None

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment (and .env, if present)."""
        load_dotenv()
        return cls(
            database_url=os.getenv("DATABASE_URL") or _default_database_url(),
            database_echo=_flag("DATABASE_ECHO", False),
            service_name=os.getenv("SERVICE_NAME", "print-order-intake"),
            mail_api_key=os.getenv("RESEND_API_KEY") or None,
            mail_api_url=os.getenv("MAIL_API_URL", "https://api.resend.com/emails"),
            email_from=os.getenv("EMAIL_FROM", "noreply@example.com"),
            order_notify_email=os.getenv("ORDER_NOTIFY_EMAIL", "orders@example.com"),
            max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "50")),
            support_removal_fee=Decimal(os.getenv("SUPPORT_REMOVAL_FEE", "5.00")),
            trust_client_estimates=_flag("TRUST_CLIENT_ESTIMATES", False),
            metrics_enabled=_flag("METRICS_ENABLED", True),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT") or None,
        )
