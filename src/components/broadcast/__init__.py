"""
Broadcast component.

Audience-segmented newsletter sending in concurrent batches.
"""

from src.components.broadcast.component import (
    batched,
    broadcast_unsubscribe_url,
    build_audience_criteria,
    cleanup_orphaned_newsletters,
    dispatch_batch,
    get_newsletter,
    list_newsletters,
    parse_audience,
    personalize,
    run_send_newsletter,
)
from src.components.broadcast.models import (
    Audience,
    AudienceCriteria,
    AudienceWindows,
    BroadcastConfig,
    BroadcastError,
    DeliveryOutcome,
    EmailLog,
    EmailLogStatus,
    Newsletter,
    NewsletterStatus,
    SendNewsletterInput,
    SendNewsletterOutput,
)
from src.components.broadcast.ports import (
    EmailLogRepoPort,
    NewsletterRepoPort,
    RecipientQueryPort,
)

__all__ = [
    # Handlers
    "run_send_newsletter",
    "list_newsletters",
    "get_newsletter",
    "cleanup_orphaned_newsletters",
    # Pure functions
    "parse_audience",
    "build_audience_criteria",
    "personalize",
    "broadcast_unsubscribe_url",
    "batched",
    "dispatch_batch",
    # Models
    "Audience",
    "AudienceCriteria",
    "AudienceWindows",
    "BroadcastConfig",
    "DeliveryOutcome",
    "EmailLog",
    "EmailLogStatus",
    "Newsletter",
    "NewsletterStatus",
    "SendNewsletterInput",
    "SendNewsletterOutput",
    "BroadcastError",
    # Ports
    "RecipientQueryPort",
    "NewsletterRepoPort",
    "EmailLogRepoPort",
]
