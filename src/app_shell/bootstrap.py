import logging

from src.adapters.clock import SystemClock
from src.components.admin import (
    AdminRepoPort,
    BootstrapInput,
    BootstrapOutput,
    PasswordHasherPort,
    run,
)
from src.rules.models import AdminBootstrapRules, Rules

logger = logging.getLogger(__name__)


class BootstrapRulesAdapter:
    """Maps the rules file onto the admin component's RulesPort."""

    def __init__(self, rules: Rules):
        self._rules = rules.ops.bootstrap_admin

    def get_bootstrap_config(self) -> AdminBootstrapRules:
        return self._rules


def bootstrap_admin(
    rules: Rules,
    admin_repo: AdminRepoPort,
    hasher: PasswordHasherPort,
    email: str | None,
    password: str | None,
) -> BootstrapOutput:
    """
    Create the first admin account from ADMIN_EMAIL / ADMIN_PASSWORD if none exists.
    """
    result = run(
        BootstrapInput(bootstrap_email=email, bootstrap_password=password),
        admin_repo,
        hasher,
        BootstrapRulesAdapter(rules),
        SystemClock(),
    )

    if result.skipped_reason:
        logger.info("BOOTSTRAP: skipped (%s)", result.skipped_reason)
    elif not result.success:
        for error in result.errors:
            logger.error("BOOTSTRAP: %s", error.message)
    return result
