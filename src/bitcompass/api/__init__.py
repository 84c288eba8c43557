"""Backend API — PostgREST client and record models."""

from bitcompass.api.client import RestClient
from bitcompass.api.errors import (
    AUTH_REQUIRED_MSG,
    NOT_CONFIGURED_MSG,
    AuthRequiredError,
    BackendError,
    NotConfiguredError,
    NotFoundError,
)
from bitcompass.api.models import ActivityLog, ActivityLogInsert, Rule, RuleInsert, RuleUpdate

__all__ = [
    "AUTH_REQUIRED_MSG",
    "NOT_CONFIGURED_MSG",
    "ActivityLog",
    "ActivityLogInsert",
    "AuthRequiredError",
    "BackendError",
    "NotConfiguredError",
    "NotFoundError",
    "RestClient",
    "Rule",
    "RuleInsert",
    "RuleUpdate",
]
