from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str
    site_name: str = "Newsletter"


class TokenRules(BaseModel):
    confirm_ttl_hours: int = Field(24, ge=1)
    manage_ttl_minutes: int = Field(60, ge=1)


class CategoryRule(BaseModel):
    id: str
    label: str


class SubscriptionRules(BaseModel):
    categories: list[CategoryRule]
    frequencies: list[str] = ["DAILY", "WEEKLY", "MONTHLY", "REALTIME"]
    default_frequency: str = "WEEKLY"

    @field_validator("categories")
    @classmethod
    def categories_not_empty(cls, v: list[CategoryRule]) -> list[CategoryRule]:
        if not v:
            raise ValueError("At least one category must be configured")
        ids = [c.id for c in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Category ids must be unique")
        return v


class AudienceRules(BaseModel):
    active_window_days: int = 30
    new_window_days: int = 7
    engaged_min_opens: int = 5


class BroadcastRules(BaseModel):
    batch_size: int = Field(10, ge=1)
    send_timeout_seconds: float = Field(30.0, gt=0)
    audiences: AudienceRules = AudienceRules()


class RateLimitWindow(BaseModel):
    window_seconds: int
    max_attempts: int | None = None
    max_requests: int | None = None


class RateLimitRules(BaseModel):
    login: RateLimitWindow
    subscribe: RateLimitWindow


class AdminBootstrapRules(BaseModel):
    enabled_if_no_admins: bool
    required_env_when_enabled: list[str]


class OpsRules(BaseModel):
    required_env: list[str]
    bootstrap_admin: AdminBootstrapRules


class Rules(BaseModel):
    project: ProjectRules
    tokens: TokenRules
    subscriptions: SubscriptionRules
    broadcast: BroadcastRules
    rate_limits: RateLimitRules
    ops: OpsRules
