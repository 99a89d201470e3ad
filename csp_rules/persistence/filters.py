"""Filter expressions selecting documents by exact attribute values."""

from __future__ import annotations

from pydantic import BaseModel, Field

from csp_rules.constants import (
    CSP_RULE_SAVED_OBJECT_TYPE,
    CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE,
)


class DocumentFilter(BaseModel):
    """Conjunction of exact matches on dotted attribute paths."""

    type: str = Field(..., description="Saved object type the filter applies to")
    attributes: dict[str, str] = Field(
        default_factory=dict, description="Attribute path -> expected value"
    )

    def __str__(self) -> str:
        # Kibana-style rendering, used in log messages
        return " AND ".join(
            f'{self.type}.attributes.{path}: "{value}"'
            for path, value in self.attributes.items()
        )


def rule_filter_by_package_policy(package_policy_id: str, policy_id: str) -> DocumentFilter:
    """Select the rules belonging to exactly one (package policy, policy) pair."""
    return DocumentFilter(
        type=CSP_RULE_SAVED_OBJECT_TYPE,
        attributes={
            "package_policy_id": package_policy_id,
            "policy_id": policy_id,
        },
    )


def template_filter_by_benchmark(benchmark_id: str) -> DocumentFilter:
    """Select the rule templates of one benchmark."""
    return DocumentFilter(
        type=CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE,
        attributes={"metadata.benchmark.id": benchmark_id},
    )
