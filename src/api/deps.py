import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from src.adapters.auth.crypto import PasslibPasswordHasher
from src.adapters.dev_email import DevEmailAdapter
from src.adapters.newsletter_email import NewsletterEmailSender
from src.adapters.orm import (
    SQLAdminRepo,
    SQLEmailLogRepo,
    SQLNewsletterRepo,
    SQLSubscriberRepo,
    SQLTemplateRepo,
    SQLTokenStore,
    make_engine,
    make_session_factory,
)
from src.adapters.orm.session import default_database_url
from src.adapters.smtp_email import SMTPConfig, SMTPEmailAdapter
from src.api.auth_utils import decode_access_token
from src.app_shell.rate_limit import RateLimiter
from src.components.admin import AdminUser
from src.components.broadcast import AudienceWindows, BroadcastConfig
from src.components.newsletter import Frequency, NewsletterConfig
from src.core.ports.email import EmailPort
from src.rules.loader import load_rules
from src.rules.models import Rules

logger = logging.getLogger(__name__)


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.rules_path = Path(os.environ.get("NEWSLETTER_RULES", self.base_dir / "rules.yaml"))
        self.database_url = default_database_url()
        self.app_url = os.environ.get("APP_URL", "http://localhost:3000").rstrip("/")
        self.site_name = os.environ.get("SITE_NAME")
        self.email_backend = os.environ.get("EMAIL_BACKEND", "dev").strip().lower()
        self.admin_email = os.environ.get("ADMIN_EMAIL")
        self.admin_password = os.environ.get("ADMIN_PASSWORD")
        self.cors_origins = [
            o.strip()
            for o in os.environ.get("CORS_ORIGINS", self.app_url).split(",")
            if o.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Database ---
@lru_cache
def get_engine() -> Engine:
    return make_engine(get_settings().database_url)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return make_session_factory(get_engine())


SessionFactoryDep = Annotated[sessionmaker[Session], Depends(get_session_factory)]


# --- Repos ---
def get_subscriber_repo(sessions: SessionFactoryDep) -> SQLSubscriberRepo:
    return SQLSubscriberRepo(sessions)


def get_token_store(sessions: SessionFactoryDep) -> SQLTokenStore:
    return SQLTokenStore(sessions)


def get_newsletter_repo(sessions: SessionFactoryDep) -> SQLNewsletterRepo:
    return SQLNewsletterRepo(sessions)


def get_email_log_repo(sessions: SessionFactoryDep) -> SQLEmailLogRepo:
    return SQLEmailLogRepo(sessions)


def get_template_repo(sessions: SessionFactoryDep) -> SQLTemplateRepo:
    return SQLTemplateRepo(sessions)


def get_admin_repo(sessions: SessionFactoryDep) -> SQLAdminRepo:
    return SQLAdminRepo(sessions)


# --- Email ---
@lru_cache
def get_smtp_config() -> SMTPConfig:
    return SMTPConfig.from_env()


@lru_cache
def get_email_adapter() -> EmailPort:
    """EMAIL_BACKEND=smtp sends for real; anything else logs (dev)."""
    backend = get_settings().email_backend
    if backend == "smtp":
        return SMTPEmailAdapter(get_smtp_config())
    if backend != "dev":
        logger.warning("Unknown EMAIL_BACKEND %r, falling back to dev", backend)
    return DevEmailAdapter()


def get_newsletter_email_sender(
    email: EmailPort = Depends(get_email_adapter),
) -> NewsletterEmailSender:
    return NewsletterEmailSender(email)


# --- Component config ---
def get_newsletter_config(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> NewsletterConfig:
    return NewsletterConfig(
        site_name=settings.site_name or rules.project.site_name,
        base_url=settings.app_url,
        confirm_ttl_hours=rules.tokens.confirm_ttl_hours,
        manage_ttl_minutes=rules.tokens.manage_ttl_minutes,
        category_labels={c.id: c.label for c in rules.subscriptions.categories},
        default_frequency=Frequency(rules.subscriptions.default_frequency),
    )


def get_broadcast_config(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> BroadcastConfig:
    broadcast = rules.broadcast
    return BroadcastConfig(
        base_url=settings.app_url,
        batch_size=broadcast.batch_size,
        send_timeout_seconds=broadcast.send_timeout_seconds,
        windows=AudienceWindows(
            active_days=broadcast.audiences.active_window_days,
            new_days=broadcast.audiences.new_window_days,
            engaged_min_opens=broadcast.audiences.engaged_min_opens,
        ),
    )


# --- Rate limiting ---
_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(rules.rate_limits)
    return _rate_limiter_instance


def get_client_ip(request: Request) -> str:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


# --- Auth ---
def get_password_hasher() -> PasslibPasswordHasher:
    return PasslibPasswordHasher()


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


async def get_current_admin(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    admin_repo: SQLAdminRepo = Depends(get_admin_repo),
) -> AdminUser:
    # 1. Try Cookie first (HttpOnly)
    cookie_token = request.cookies.get("access_token")
    if cookie_token and cookie_token.startswith("Bearer "):
        token = cookie_token.split(" ")[1]

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 2. Decode
    payload = decode_access_token(token)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    admin_id = payload.get("sub")
    if admin_id is None or not isinstance(admin_id, str):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    # 3. Fetch admin
    try:
        admin = admin_repo.get_by_id(UUID(admin_id))
    except ValueError:
        admin = None
    if not admin:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return admin
