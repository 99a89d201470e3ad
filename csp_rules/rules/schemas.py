"""Pydantic models for package policies, rule templates and sync reports."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Package Policy Models (owned by the host framework)
# =============================================================================


class PackageInfo(BaseModel):
    """The integration package a policy was created from."""

    name: str
    version: str | None = None
    title: str | None = None


class PackagePolicyInput(BaseModel):
    """One configured input slot of a package policy."""

    model_config = ConfigDict(extra="allow")

    type: str = Field("", description="Input type, '<family>/<benchmark_id>'")
    enabled: bool = False
    policy_template: str | None = None
    streams: list[dict[str, Any]] = Field(default_factory=list)


class PackagePolicy(BaseModel):
    """A deployed package policy, as carried by create/upgrade events."""

    id: str = Field(..., description="Package policy id")
    policy_id: str = Field(..., description="Owning agent policy id")
    name: str | None = None
    namespace: str | None = None
    package: PackageInfo | None = None
    inputs: list[PackagePolicyInput] = Field(default_factory=list)


class DeletedPackagePolicy(BaseModel):
    """A package policy reported by a delete event."""

    id: str
    policy_id: str
    name: str | None = None
    package: PackageInfo | None = None
    success: bool = True


# =============================================================================
# Rule Models
# =============================================================================


class BenchmarkInfo(BaseModel):
    """Benchmark a rule template belongs to."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="Benchmark id (e.g., 'cis_k8s')")
    name: str | None = None
    version: str | None = None


class RuleMetadata(BaseModel):
    """Descriptive content of a rule; copied verbatim into generated rules."""

    model_config = ConfigDict(extra="allow")

    rego_rule_id: str = Field(..., description="Stable rule identifier within a benchmark")
    benchmark: BenchmarkInfo
    id: str | None = None
    name: str | None = None
    section: str | None = None
    rule_number: str | None = None
    description: str | None = None
    rationale: str | None = None
    remediation: str | None = None
    tags: list[str] = Field(default_factory=list)


class CspRuleTemplate(BaseModel):
    """Attributes of a `csp-rule-template` saved object."""

    model_config = ConfigDict(extra="allow")

    enabled: bool = Field(True, description="Default enabled state of generated rules")
    metadata: RuleMetadata

    @property
    def rego_rule_id(self) -> str:
        return self.metadata.rego_rule_id

    @property
    def benchmark_id(self) -> str:
        return self.metadata.benchmark.id


class CspRule(CspRuleTemplate):
    """Attributes of a `csp-rule` saved object bound to one package policy."""

    package_policy_id: str
    policy_id: str


# =============================================================================
# Sync Reports
# =============================================================================


class ReconciliationReport(BaseModel):
    """Outcome of regenerating the rules of one package policy."""

    package_policy_id: str
    policy_id: str
    benchmark_id: str
    created_ids: list[str] = Field(default_factory=list)
    deleted_ids: list[str] = Field(default_factory=list)
    cleanup_failures: dict[str, str] = Field(
        default_factory=dict, description="Old rule id -> deletion error"
    )
    error: str | None = Field(None, description="Set when the sync was aborted")
    orphaned_ids: list[str] = Field(
        default_factory=list, description="Rules created by an aborted sync and left in place"
    )

    @property
    def consistent(self) -> bool:
        return self.error is None and not self.cleanup_failures and not self.orphaned_ids


class RemovalReport(BaseModel):
    """Outcome of removing the rules of a deleted package policy."""

    package_policy_id: str
    policy_id: str
    deleted_ids: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict, description="Rule id -> error")
    error: str | None = None
