"""SQLAlchemy persistence adapters."""

from src.adapters.orm.repos import (
    SQLAdminRepo,
    SQLEmailLogRepo,
    SQLNewsletterRepo,
    SQLSubscriberRepo,
    SQLTemplateRepo,
    SQLTokenStore,
)
from src.adapters.orm.session import init_db, make_engine, make_session_factory

__all__ = [
    "SQLAdminRepo",
    "SQLEmailLogRepo",
    "SQLNewsletterRepo",
    "SQLSubscriberRepo",
    "SQLTemplateRepo",
    "SQLTokenStore",
    "init_db",
    "make_engine",
    "make_session_factory",
]
