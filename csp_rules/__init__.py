"""CSP rule sync - generates per-policy security posture rules from templates.

When a cloud security posture package policy is created or upgraded, the
rules of its benchmark are regenerated from the installed rule templates,
keeping each rule's user-set `enabled` state. Deleting the policy removes
its rules.
"""

from .rules import (
    PackagePolicy,
    PackagePolicyInput,
    DeletedPackagePolicy,
    CspRuleTemplate,
    CspRule,
    ReconciliationReport,
    RemovalReport,
    RuleSyncError,
    resolve_benchmark,
    select_templates,
    load_existing,
    reconcile,
    commit_rules,
)
from .lifecycle import (
    LifecycleEvent,
    LifecycleCallbackRegistry,
    RuleSyncService,
    register_csp_callbacks,
)

__version__ = "0.1.0"

__all__ = [
    "PackagePolicy",
    "PackagePolicyInput",
    "DeletedPackagePolicy",
    "CspRuleTemplate",
    "CspRule",
    "ReconciliationReport",
    "RemovalReport",
    "RuleSyncError",
    "resolve_benchmark",
    "select_templates",
    "load_existing",
    "reconcile",
    "commit_rules",
    "LifecycleEvent",
    "LifecycleCallbackRegistry",
    "RuleSyncService",
    "register_csp_callbacks",
]
