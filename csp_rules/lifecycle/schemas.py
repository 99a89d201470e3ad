"""Pydantic models for lifecycle API responses."""

from pydantic import BaseModel, Field

from csp_rules.persistence import SavedObject
from csp_rules.rules.schemas import ReconciliationReport, RemovalReport


class LifecycleEventResponse(BaseModel):
    """Reports produced by dispatching one lifecycle event."""

    event: str
    reports: list[ReconciliationReport | RemovalReport] = Field(default_factory=list)


class InstallationStatusResponse(BaseModel):
    installed: bool


class RulesListResponse(BaseModel):
    """Rules of one package policy."""

    package_policy_id: str
    policy_id: str
    rules: list[SavedObject]
    total: int
