"""
Newsletter component.

Double opt-in subscription, preference management and unsubscribe,
authorized by single-use emailed tokens.
"""

from src.components.newsletter.component import (
    EMAIL_REGEX,
    MSG_LINK_SENT,
    apply_preferences,
    build_confirmation_url,
    build_manage_url,
    build_unsubscribe_url,
    category_labels,
    confirm_subscriber,
    normalize_email,
    parse_frequency,
    run,
    run_add_subscriber,
    run_confirm,
    run_get_preferences,
    run_request_manage_link,
    run_request_unsubscribe_link,
    run_subscribe,
    run_unsubscribe,
    run_update_preferences,
    unsubscribe_subscriber,
    validate_categories,
    validate_email,
    validate_frequency,
)
from src.components.newsletter.models import (
    DEFAULT_CATEGORY_LABELS,
    DEFAULT_UNSUBSCRIBE_REASON,
    FREQUENCY_LABELS,
    VALID_TRANSITIONS,
    AddSubscriberInput,
    AddSubscriberOutput,
    ConfirmInput,
    ConfirmOutput,
    Frequency,
    GetPreferencesInput,
    LinkOutput,
    ManageLinkInput,
    NewsletterConfig,
    NewsletterError,
    PreferencesOutput,
    SubscribeInput,
    SubscribeOutput,
    Subscriber,
    SubscriberPreference,
    SubscriberStatus,
    SubscriptionError,
    UnsubscribeInput,
    UnsubscribeLinkInput,
    UnsubscribeLog,
    UnsubscribeOutput,
    UpdatePreferencesInput,
    UpdatePreferencesOutput,
    ValidateEmailOutput,
    ValidationError,
    can_transition,
)
from src.components.newsletter.ports import NewsletterEmailSenderPort, SubscriberRepoPort

__all__ = [
    # Component
    "run",
    "run_subscribe",
    "run_confirm",
    "run_request_manage_link",
    "run_request_unsubscribe_link",
    "run_get_preferences",
    "run_update_preferences",
    "run_unsubscribe",
    "run_add_subscriber",
    # Pure functions
    "normalize_email",
    "validate_email",
    "parse_frequency",
    "validate_frequency",
    "validate_categories",
    "category_labels",
    "apply_preferences",
    "confirm_subscriber",
    "unsubscribe_subscriber",
    "build_confirmation_url",
    "build_manage_url",
    "build_unsubscribe_url",
    # Constants
    "EMAIL_REGEX",
    "MSG_LINK_SENT",
    "DEFAULT_CATEGORY_LABELS",
    "DEFAULT_UNSUBSCRIBE_REASON",
    "FREQUENCY_LABELS",
    # Models
    "Subscriber",
    "SubscriberPreference",
    "SubscriberStatus",
    "UnsubscribeLog",
    "Frequency",
    "VALID_TRANSITIONS",
    "can_transition",
    "NewsletterConfig",
    # Input/Output
    "SubscribeInput",
    "SubscribeOutput",
    "ConfirmInput",
    "ConfirmOutput",
    "ManageLinkInput",
    "UnsubscribeLinkInput",
    "LinkOutput",
    "GetPreferencesInput",
    "PreferencesOutput",
    "UpdatePreferencesInput",
    "UpdatePreferencesOutput",
    "UnsubscribeInput",
    "UnsubscribeOutput",
    "AddSubscriberInput",
    "AddSubscriberOutput",
    "ValidateEmailOutput",
    "ValidationError",
    # Errors
    "NewsletterError",
    "SubscriptionError",
    # Ports
    "SubscriberRepoPort",
    "NewsletterEmailSenderPort",
]
