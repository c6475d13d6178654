"""
Tokens component.

Single-use verification tokens for confirm / manage / unsubscribe links.
"""

from src.components.tokens.component import (
    TOKEN_BYTES,
    consume_token,
    consume_token_by_value,
    generate_token,
    is_token_live,
    issue_token,
    purge_expired,
)
from src.components.tokens.models import (
    ConsumeResult,
    TokenError,
    TokenFailure,
    TokenPurpose,
    VerificationToken,
)
from src.components.tokens.ports import TokenStorePort

__all__ = [
    # Functions
    "generate_token",
    "issue_token",
    "consume_token",
    "consume_token_by_value",
    "is_token_live",
    "purge_expired",
    "TOKEN_BYTES",
    # Models
    "VerificationToken",
    "TokenPurpose",
    "TokenFailure",
    "ConsumeResult",
    "TokenError",
    # Ports
    "TokenStorePort",
]
