"""Admin component: administrator accounts, Day 0 bootstrap and login."""

from .component import run, run_bootstrap, run_login
from .models import (
    AdminUser,
    AdminValidationError,
    BootstrapInput,
    BootstrapOutput,
    LoginInput,
    LoginOutput,
)
from .ports import AdminRepoPort, PasswordHasherPort, RulesPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_bootstrap",
    "run_login",
    # Models
    "AdminUser",
    "AdminValidationError",
    "BootstrapInput",
    "BootstrapOutput",
    "LoginInput",
    "LoginOutput",
    # Ports
    "AdminRepoPort",
    "PasswordHasherPort",
    "RulesPort",
    "TimePort",
]
