"""
Templates component.

Reusable email templates for broadcasts.
"""

from src.components.templates.component import (
    DEFAULT_TEMPLATES,
    get_template,
    list_templates,
    run_create_template,
    run_delete_template,
    run_delete_templates,
    run_update_template,
    seed_default_templates,
)
from src.components.templates.models import (
    DEFAULT_CATEGORY,
    CreateTemplateInput,
    DeleteTemplateInput,
    DeleteTemplatesInput,
    DeleteTemplatesOutput,
    EmailTemplate,
    TemplateError,
    TemplateOutput,
    UpdateTemplateInput,
)
from src.components.templates.ports import TemplateRepoPort, TemplateUsagePort

__all__ = [
    # Handlers
    "run_create_template",
    "run_update_template",
    "run_delete_template",
    "run_delete_templates",
    "list_templates",
    "get_template",
    "seed_default_templates",
    "DEFAULT_TEMPLATES",
    # Models
    "EmailTemplate",
    "DEFAULT_CATEGORY",
    "CreateTemplateInput",
    "UpdateTemplateInput",
    "DeleteTemplateInput",
    "DeleteTemplatesInput",
    "TemplateOutput",
    "DeleteTemplatesOutput",
    "TemplateError",
    # Ports
    "TemplateRepoPort",
    "TemplateUsagePort",
]
