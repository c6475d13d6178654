import logging
import os
import sys

from src.rules.models import Rules

logger = logging.getLogger(__name__)


def missing_env(rules: Rules) -> list[str]:
    """Required environment variables that are not set."""
    ops = rules.ops
    required = list(ops.required_env)
    if ops.bootstrap_admin.enabled_if_no_admins:
        # Bootstrap vars only warn; an existing admin makes them unnecessary.
        for name in ops.bootstrap_admin.required_env_when_enabled:
            if name not in os.environ:
                logger.warning("Admin bootstrap enabled but %s is not set", name)
    return [name for name in required if name not in os.environ]


def validate_ops_rules(rules: Rules) -> None:
    """
    Validate operational requirements before startup.

    Exits the process when required environment variables are missing.
    """
    missing = missing_env(rules)
    if missing:
        print(
            f"CRITICAL: Missing required environment variables: {', '.join(missing)}",
            file=sys.stderr,
        )
        sys.exit(1)

    logger.info("Configuration validated")
