# Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from src.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailPort,
    EmailResult,
    EmailStatus,
)

__all__ = [
    # Email
    "EmailAddress",
    "EmailError",
    "EmailPort",
    "EmailResult",
    "EmailStatus",
]
