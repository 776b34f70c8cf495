import os
import base64
import hashlib
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _derive_encryption_key(secret: str) -> str:
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode()).digest()).decode()


class SMTPSettings(BaseModel):
    host: str = Field(default=os.getenv("SMTP_HOST", "localhost"))
    port: int = Field(default=int(os.getenv("SMTP_PORT", "587")))
    user: Optional[str] = Field(default=os.getenv("SMTP_USER"))
    password: Optional[str] = Field(default=os.getenv("SMTP_PASSWORD"))
    sender: str = Field(default=os.getenv("SMTP_SENDER", "no-reply@hrdesk.local"))
    use_tls: bool = Field(default=os.getenv("SMTP_USE_TLS", "true").lower() == "true")
    timeout_seconds: int = 10


class Config(BaseModel):
    app_name: str = "HRDesk"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()
    sql_echo: bool = os.getenv("SQL_ECHO", "false").lower() == "true"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hrdesk.db")

    # Auth
    secret_key: str = os.getenv("SECRET_KEY", "dev-only-insecure-key-DO-NOT-USE-IN-PROD")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24)))
    onboarding_token_expire_hours: int = 24
    reset_token_expire_minutes: int = 10
    encryption_key: str = os.getenv("ENCRYPTION_KEY", "")

    # Outbound links and mail
    client_url: str = os.getenv("CLIENT_URL", "http://localhost:3000")
    smtp: SMTPSettings = SMTPSettings()

    # Blob storage
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")
    upload_url_prefix: str = os.getenv("UPLOAD_URL_PREFIX", "/uploads")

    # Leave defaults
    public_holiday_hours: float = 8.0
    default_leave_types: List[dict] = [
        {"name": "Vacation", "default_hours": 56.0},
        {"name": "Sick", "default_hours": 40.0},
    ]
    default_leave_policy_name: str = "Standard"

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))

    @property
    def fernet_key(self) -> str:
        return self.encryption_key or _derive_encryption_key(self.secret_key)


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    _critical_missing = []
    if "dev-only" in settings.secret_key:
        _critical_missing.append("SECRET_KEY")
    if not settings.encryption_key:
        _critical_missing.append("ENCRYPTION_KEY")
    if _critical_missing:
        raise RuntimeError(
            f"FATAL: The following secrets must be set for non-development environments: "
            f"{', '.join(_critical_missing)}. Set them as environment variables."
        )
elif "dev-only" in settings.secret_key:
    _logger.warning("Using insecure default SECRET_KEY, only acceptable in development.")
