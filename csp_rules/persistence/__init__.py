"""
Persistence layer for CSP rule sync.

Saved objects (rule templates and generated rules) live in a single
SQLModel table and are accessed through the `DocumentStore` interface.
"""

from csp_rules.persistence.models import (
    SavedObjectRecord,
    SavedObject,
    BulkCreateObject,
    BulkCreateItemError,
    BulkCreateResult,
    FindResult,
    generate_uuid,
)
from csp_rules.persistence.filters import (
    DocumentFilter,
    rule_filter_by_package_policy,
    template_filter_by_benchmark,
)
from csp_rules.persistence.store import (
    DocumentStore,
    SqlDocumentStore,
    DocumentStoreError,
    DocumentNotFoundError,
)

__all__ = [
    # Models
    "SavedObjectRecord",
    "SavedObject",
    "BulkCreateObject",
    "BulkCreateItemError",
    "BulkCreateResult",
    "FindResult",
    "generate_uuid",
    # Filters
    "DocumentFilter",
    "rule_filter_by_package_policy",
    "template_filter_by_benchmark",
    # Store
    "DocumentStore",
    "SqlDocumentStore",
    "DocumentStoreError",
    "DocumentNotFoundError",
]
