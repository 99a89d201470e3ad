"""Index of the rules currently stored for a package policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from csp_rules.constants import CSP_RULE_SAVED_OBJECT_TYPE
from csp_rules.persistence import (
    DocumentStore,
    DocumentStoreError,
    SavedObject,
    rule_filter_by_package_policy,
)
from csp_rules.persistence.store import DEFAULT_PER_PAGE
from csp_rules.rules.errors import ExistingRulesFetchError

logger = logging.getLogger("csp.rules")


@dataclass
class ExistingRuleIndex:
    """Stored rules of one policy pair.

    `rules` is every loaded rule (the set cleanup deletes);
    `by_rego_rule_id` is the override lookup.
    """

    rules: list[SavedObject] = field(default_factory=list)
    by_rego_rule_id: dict[str, SavedObject] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.rules)


def rule_rego_rule_id(rule: SavedObject) -> str | None:
    metadata = rule.attributes.get("metadata") or {}
    return metadata.get("rego_rule_id")


def index_rules(rules: Iterable[SavedObject]) -> dict[str, SavedObject]:
    """Map rules by rego rule id. On a duplicate key the last rule wins."""
    indexed: dict[str, SavedObject] = {}
    for rule in rules:
        key = rule_rego_rule_id(rule)
        if key is None:
            logger.warning(f"Rule {rule.id} has no rego_rule_id, it will not carry overrides")
            continue
        if key in indexed:
            logger.warning(f"Duplicate rules {indexed[key].id} and {rule.id} for {key}, keeping {rule.id}")
        indexed[key] = rule
    return indexed


def load_existing(
    store: DocumentStore,
    package_policy_id: str,
    policy_id: str,
    per_page: int = DEFAULT_PER_PAGE,
) -> ExistingRuleIndex:
    """Load and index all rules of (`package_policy_id`, `policy_id`).

    Raises:
        ExistingRulesFetchError: if the store query fails
    """
    try:
        rules = store.find_all(
            CSP_RULE_SAVED_OBJECT_TYPE,
            filter=rule_filter_by_package_policy(package_policy_id, policy_id),
            per_page=per_page,
        )
    except DocumentStoreError as e:
        raise ExistingRulesFetchError(
            f"Failed to read rules of package policy {package_policy_id}: {e}",
            package_policy_id=package_policy_id,
            policy_id=policy_id,
        ) from e

    return ExistingRuleIndex(rules=rules, by_rego_rule_id=index_rules(rules))
