"""Rule sync service - the handlers behind package policy lifecycle events."""

from __future__ import annotations

import logging
from contextlib import nullcontext

from csp_rules.constants import CSP_RULE_SAVED_OBJECT_TYPE
from csp_rules.core.config import Settings, get_settings
from csp_rules.lifecycle.locks import PolicyLocks
from csp_rules.persistence import DocumentStore, DocumentStoreError
from csp_rules.rules.benchmark import resolve_benchmark
from csp_rules.rules.errors import RuleCreateError, RuleSyncError
from csp_rules.rules.index import load_existing
from csp_rules.rules.reconciler import commit_rules, delete_rules, reconcile
from csp_rules.rules.schemas import (
    DeletedPackagePolicy,
    PackagePolicy,
    ReconciliationReport,
    RemovalReport,
)
from csp_rules.rules.templates import find_rule_templates

logger = logging.getLogger("csp.lifecycle")


class RuleSyncService:
    """Keeps the generated rules of CSP package policies in sync.

    `sync_rules` raises on failure. The `on_*` handlers never raise: rule
    sync is best-effort relative to the policy operation that triggered
    it, so failures are logged and returned in the report.
    """

    def __init__(
        self,
        store: DocumentStore,
        settings: Settings | None = None,
        locks: PolicyLocks | None = None,
    ):
        """Initialize the service.

        Args:
            store: Document store holding templates and rules
            settings: Settings override (defaults to the cached settings)
            locks: Shared per-policy locks; required for serialization to
                hold across service instances
        """
        self.store = store
        self.settings = settings or get_settings()
        self.locks = locks or PolicyLocks()

    def _policy_scope(self, policy_id: str):
        if self.settings.serialize_policy_events:
            return self.locks.hold(policy_id)
        return nullcontext()

    # =========================================================================
    # Reconciliation
    # =========================================================================

    def sync_rules(self, policy: PackagePolicy) -> ReconciliationReport:
        """Regenerate the rules of `policy` from its benchmark's templates.

        Raises:
            TemplateFetchError, ExistingRulesFetchError: read failed, nothing written
            RuleCreateError: new rules not created, old rules untouched
        """
        benchmark_id = resolve_benchmark(policy.inputs, self.settings.default_benchmark_input)
        per_page = self.settings.find_page_size

        with self._policy_scope(policy.policy_id):
            templates = find_rule_templates(self.store, benchmark_id, per_page=per_page)
            existing = load_existing(self.store, policy.id, policy.policy_id, per_page=per_page)
            new_rules = reconcile(policy, templates, existing.by_rego_rule_id)
            result = commit_rules(
                self.store,
                new_rules,
                existing.rules,
                package_policy_id=policy.id,
                policy_id=policy.policy_id,
            )

        logger.info(
            f"Generated {len(result.created)} CSP rules ({benchmark_id}) for package policy "
            f"{policy.id} (policy {policy.policy_id}), replaced {len(result.deleted_ids)}"
        )
        return ReconciliationReport(
            package_policy_id=policy.id,
            policy_id=policy.policy_id,
            benchmark_id=benchmark_id,
            created_ids=[rule.id for rule in result.created],
            deleted_ids=result.deleted_ids,
            cleanup_failures=result.cleanup_failures,
        )

    def _sync_best_effort(self, policy: PackagePolicy) -> ReconciliationReport:
        try:
            return self.sync_rules(policy)
        except RuleSyncError as e:
            logger.error(
                f"Failed to generate rules out of templates for package policy "
                f"{policy.id} (policy {policy.policy_id}): {e}",
                exc_info=True,
            )
            return ReconciliationReport(
                package_policy_id=policy.id,
                policy_id=policy.policy_id,
                benchmark_id=resolve_benchmark(policy.inputs, self.settings.default_benchmark_input),
                error=str(e),
                orphaned_ids=e.created_ids if isinstance(e, RuleCreateError) else [],
            )

    # =========================================================================
    # Lifecycle Handlers
    # =========================================================================

    def on_policy_created(self, policy: PackagePolicy) -> ReconciliationReport:
        return self._sync_best_effort(policy)

    def on_policy_upgraded(self, policy: PackagePolicy) -> ReconciliationReport:
        # Same path as create; existing rules carry their overrides forward
        return self._sync_best_effort(policy)

    def on_policy_deleted(self, deleted: DeletedPackagePolicy) -> RemovalReport:
        """Remove every rule of a deleted package policy."""
        report = RemovalReport(package_policy_id=deleted.id, policy_id=deleted.policy_id)

        with self._policy_scope(deleted.policy_id):
            try:
                existing = load_existing(
                    self.store,
                    deleted.id,
                    deleted.policy_id,
                    per_page=self.settings.find_page_size,
                )
            except RuleSyncError as e:
                logger.error(
                    f"Failed to delete CSP rules after delete package policy {deleted.id}: {e}",
                    exc_info=True,
                )
                report.error = str(e)
                return report

            report.deleted_ids, report.failures = delete_rules(self.store, existing.rules)

        for rule_id, error in report.failures.items():
            logger.error(f"Failed to delete CSP rule {rule_id} of package policy {deleted.id}: {error}")
        logger.info(
            f"Removed {len(report.deleted_ids)} CSP rules of deleted package policy {deleted.id} "
            f"({len(report.failures)} failed)"
        )
        return report

    # =========================================================================
    # Queries
    # =========================================================================

    def is_package_installed(self) -> bool:
        """Whether any CSP rule exists. Store failures answer False."""
        try:
            result = self.store.find(CSP_RULE_SAVED_OBJECT_TYPE, per_page=1)
        except DocumentStoreError as e:
            logger.error(f"Failed to check CSP package installation: {e}")
            return False
        return result.total > 0
