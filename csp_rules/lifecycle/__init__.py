"""Lifecycle domain - package policy event handlers and their wiring."""

from .locks import PolicyLocks
from .callbacks import (
    LifecycleEvent,
    LifecycleCallbackRegistry,
    DuplicateCallbackError,
    is_csp_package_policy,
    register_csp_callbacks,
)
from .service import RuleSyncService
from .router import router

__all__ = [
    "PolicyLocks",
    "LifecycleEvent",
    "LifecycleCallbackRegistry",
    "DuplicateCallbackError",
    "is_csp_package_policy",
    "register_csp_callbacks",
    "RuleSyncService",
    "router",
]
