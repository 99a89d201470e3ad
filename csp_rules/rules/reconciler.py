"""
Rule reconciliation.

Generates the rules of a package policy from its benchmark's templates,
carrying over the `enabled` state of rules generated earlier, and swaps
the new rule set in: create everything first, delete the old set after.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from pydantic import ValidationError

from csp_rules.constants import CSP_RULE_SAVED_OBJECT_TYPE
from csp_rules.persistence import (
    BulkCreateObject,
    DocumentNotFoundError,
    DocumentStore,
    DocumentStoreError,
    SavedObject,
)
from csp_rules.rules.errors import RuleCreateError
from csp_rules.rules.schemas import CspRuleTemplate, PackagePolicy

logger = logging.getLogger("csp.rules")


@dataclass
class CommitResult:
    """What a commit wrote and what it failed to clean up."""

    created: list[SavedObject] = field(default_factory=list)
    deleted_ids: list[str] = field(default_factory=list)
    cleanup_failures: dict[str, str] = field(default_factory=dict)


def generate_rules_from_templates(
    package_policy_id: str,
    policy_id: str,
    templates: Sequence[SavedObject],
    existing: Mapping[str, SavedObject],
) -> list[BulkCreateObject]:
    """One new rule per template, bound to the policy pair.

    `enabled` comes from the existing rule with the same rego rule id when
    there is one, otherwise from the template default.
    """
    rules = []
    for template in templates:
        try:
            parsed = CspRuleTemplate.model_validate(template.attributes)
        except ValidationError as e:
            logger.warning(f"Skipping malformed rule template {template.id}: {e}")
            continue

        enabled = parsed.enabled
        old_rule = existing.get(parsed.rego_rule_id)
        if old_rule is not None and old_rule.attributes.get("enabled") is not None:
            enabled = bool(old_rule.attributes["enabled"])

        rules.append(
            BulkCreateObject(
                type=CSP_RULE_SAVED_OBJECT_TYPE,
                attributes={
                    **template.attributes,
                    "package_policy_id": package_policy_id,
                    "policy_id": policy_id,
                    "enabled": enabled,
                },
            )
        )
    return rules


def reconcile(
    policy: PackagePolicy,
    templates: Sequence[SavedObject],
    existing: Mapping[str, SavedObject],
) -> list[BulkCreateObject]:
    """Rules to create for `policy`."""
    return generate_rules_from_templates(policy.id, policy.policy_id, templates, existing)


def delete_rules(
    store: DocumentStore,
    rules: Sequence[SavedObject],
    type: str = CSP_RULE_SAVED_OBJECT_TYPE,
) -> tuple[list[str], dict[str, str]]:
    """Delete each document independently.

    Returns:
        (deleted ids, {id: error} for the deletions that failed)
    """
    deleted: list[str] = []
    failures: dict[str, str] = {}
    for rule in rules:
        try:
            store.delete(type, rule.id)
        except DocumentNotFoundError:
            # Already gone
            deleted.append(rule.id)
        except DocumentStoreError as e:
            failures[rule.id] = str(e)
        else:
            deleted.append(rule.id)
    return deleted, failures


def commit_rules(
    store: DocumentStore,
    new_rules: Sequence[BulkCreateObject],
    existing_rules: Sequence[SavedObject],
    package_policy_id: str | None = None,
    policy_id: str | None = None,
) -> CommitResult:
    """Create `new_rules`, then delete every rule in `existing_rules`.

    Deletion only starts once every new rule was created. Deletion
    failures are reported in the result, not raised.

    Raises:
        RuleCreateError: if any new rule could not be created
    """
    try:
        result = store.bulk_create(list(new_rules))
    except DocumentStoreError as e:
        raise RuleCreateError(
            f"Failed to create rules for package policy {package_policy_id}: {e}",
            package_policy_id=package_policy_id,
            policy_id=policy_id,
        ) from e

    if result.failed:
        raise RuleCreateError(
            f"Failed to create {len(result.errors)} of {len(new_rules)} rules "
            f"for package policy {package_policy_id}",
            package_policy_id=package_policy_id,
            policy_id=policy_id,
            item_errors=[err.error for err in result.errors],
            created_ids=[obj.id for obj in result.saved_objects],
        )

    deleted_ids, failures = delete_rules(store, existing_rules)
    for rule_id, error in failures.items():
        logger.warning(
            f"Failed to delete superseded rule {rule_id} of package policy "
            f"{package_policy_id} (policy {policy_id}): {error}"
        )

    return CommitResult(
        created=result.saved_objects,
        deleted_ids=deleted_ids,
        cleanup_failures=failures,
    )
