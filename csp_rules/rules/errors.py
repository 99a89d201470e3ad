"""
Rule sync errors.

Raised by the reconciliation path; the lifecycle service catches them,
logs them with the policy ids and reports them instead of failing the
host's policy operation.
"""


class RuleSyncError(Exception):
    """Base error for rule generation and cleanup."""

    def __init__(
        self,
        message: str,
        package_policy_id: str | None = None,
        policy_id: str | None = None,
    ):
        self.package_policy_id = package_policy_id
        self.policy_id = policy_id
        super().__init__(message)


class TemplateFetchError(RuleSyncError):
    """Rule templates could not be read. Nothing was written."""


class ExistingRulesFetchError(RuleSyncError):
    """Current rules of the policy could not be read. Nothing was written."""


class RuleCreateError(RuleSyncError):
    """New rules could not be created. Old rules were left untouched."""

    def __init__(
        self,
        message: str,
        package_policy_id: str | None = None,
        policy_id: str | None = None,
        item_errors: list[str] | None = None,
        created_ids: list[str] | None = None,
    ):
        self.item_errors = item_errors or []
        # Items the store committed before the failure; the next sync removes them
        self.created_ids = created_ids or []
        super().__init__(message, package_policy_id, policy_id)
