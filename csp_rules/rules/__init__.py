"""Rules domain - benchmark resolution, templates and rule reconciliation."""

from .schemas import (
    PackageInfo,
    PackagePolicyInput,
    PackagePolicy,
    DeletedPackagePolicy,
    BenchmarkInfo,
    RuleMetadata,
    CspRuleTemplate,
    CspRule,
    ReconciliationReport,
    RemovalReport,
)
from .errors import (
    RuleSyncError,
    TemplateFetchError,
    ExistingRulesFetchError,
    RuleCreateError,
)
from .benchmark import get_input_type, resolve_benchmark
from .reconciler import (
    CommitResult,
    generate_rules_from_templates,
    reconcile,
    delete_rules,
    commit_rules,
)
from .index import ExistingRuleIndex, index_rules, load_existing
from .templates import (
    TemplateLoader,
    select_templates,
    find_rule_templates,
    install_templates,
)

__all__ = [
    # Schemas
    "PackageInfo",
    "PackagePolicyInput",
    "PackagePolicy",
    "DeletedPackagePolicy",
    "BenchmarkInfo",
    "RuleMetadata",
    "CspRuleTemplate",
    "CspRule",
    "ReconciliationReport",
    "RemovalReport",
    # Errors
    "RuleSyncError",
    "TemplateFetchError",
    "ExistingRulesFetchError",
    "RuleCreateError",
    # Benchmark
    "get_input_type",
    "resolve_benchmark",
    # Reconciler
    "CommitResult",
    "generate_rules_from_templates",
    "reconcile",
    "delete_rules",
    "commit_rules",
    # Index
    "ExistingRuleIndex",
    "index_rules",
    "load_existing",
    # Templates
    "TemplateLoader",
    "select_templates",
    "find_rule_templates",
    "install_templates",
]
