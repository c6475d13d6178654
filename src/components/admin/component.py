"""Admin component implementation.

Creates the first administrator from the environment when no admin exists,
and checks admin credentials at login.
"""

from __future__ import annotations

import logging

from src.components.newsletter.component import normalize_email, validate_email

from .models import (
    AdminUser,
    AdminValidationError,
    BootstrapInput,
    BootstrapOutput,
    LoginInput,
    LoginOutput,
)
from .ports import AdminRepoPort, PasswordHasherPort, RulesPort, TimePort

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def _validate_input(
    bootstrap_input: BootstrapInput,
) -> tuple[AdminValidationError, ...]:
    """Validate bootstrap input parameters."""
    errors: list[AdminValidationError] = []

    if not validate_email(bootstrap_input.bootstrap_email or "").is_valid:
        errors.append(
            AdminValidationError(
                code="INVALID_EMAIL",
                message="Bootstrap email is not a valid address",
                field="bootstrap_email",
            )
        )

    if len(bootstrap_input.bootstrap_password or "") < MIN_PASSWORD_LENGTH:
        errors.append(
            AdminValidationError(
                code="WEAK_PASSWORD",
                message=f"Bootstrap password must be at least {MIN_PASSWORD_LENGTH} characters",
                field="bootstrap_password",
            )
        )

    return tuple(errors)


def run_bootstrap(
    bootstrap_input: BootstrapInput,
    admin_repo: AdminRepoPort,
    hasher: PasswordHasherPort,
    rules: RulesPort,
    time: TimePort,
) -> BootstrapOutput:
    """Execute the bootstrap process.

    Checks if bootstrap is enabled and whether an admin exists, and creates
    the admin account if all conditions are met.

    Args:
        bootstrap_input: Email and password for the admin account.
        admin_repo: Repository for admin accounts.
        hasher: Password hashing adapter.
        rules: Configuration rules provider.
        time: Time provider for deterministic timestamps.

    Returns:
        BootstrapOutput with the result of the operation.
    """
    if not rules.get_bootstrap_config().enabled_if_no_admins:
        return BootstrapOutput.skipped("Bootstrap is not enabled in rules")

    if admin_repo.count() > 0:
        return BootstrapOutput.skipped("An admin account already exists")

    if not bootstrap_input.bootstrap_email or not bootstrap_input.bootstrap_password:
        return BootstrapOutput.skipped(
            "Bootstrap email and/or password not provided. "
            "Set ADMIN_EMAIL and ADMIN_PASSWORD environment variables."
        )

    validation_errors = _validate_input(bootstrap_input)
    if validation_errors:
        return BootstrapOutput.failed(validation_errors)

    admin = AdminUser(
        email=normalize_email(bootstrap_input.bootstrap_email),
        password_hash=hasher.hash_password(bootstrap_input.bootstrap_password),
        name="Admin",
        created_at=time.now_utc(),
    )
    admin_repo.save(admin)
    logger.info("Bootstrapped admin account %s", admin.email)

    return BootstrapOutput.created_user(admin)


def run_login(
    inp: LoginInput, admin_repo: AdminRepoPort, hasher: PasswordHasherPort
) -> LoginOutput:
    user = admin_repo.get_by_email(normalize_email(inp.email))
    if not user:
        return LoginOutput(success=False, error="Invalid credentials")

    if not hasher.verify_password(inp.password, user.password_hash):
        return LoginOutput(success=False, error="Invalid credentials")

    return LoginOutput(success=True, user=user)


def run(
    bootstrap_input: BootstrapInput,
    admin_repo: AdminRepoPort,
    hasher: PasswordHasherPort,
    rules: RulesPort,
    time: TimePort,
) -> BootstrapOutput:
    """Main entry point for the bootstrap step."""
    return run_bootstrap(bootstrap_input, admin_repo, hasher, rules, time)
