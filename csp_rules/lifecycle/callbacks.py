"""
Lifecycle callback registration point.

The host framework announces package policy lifecycle events; handlers
are plain callables registered per event. Dispatch is best-effort: a
failing handler is logged and never fails the host's policy operation.
"""

import logging
from enum import Enum
from threading import Lock
from typing import Any, Callable

from csp_rules.constants import CLOUD_SECURITY_POSTURE_PACKAGE_NAME
from csp_rules.rules.schemas import DeletedPackagePolicy, PackagePolicy

logger = logging.getLogger("csp.lifecycle")


class LifecycleEvent(str, Enum):
    """Package policy lifecycle events."""

    POST_CREATE = "packagePolicyPostCreate"
    UPGRADE = "packagePolicyUpgrade"
    POST_DELETE = "postPackagePolicyDelete"


class DuplicateCallbackError(ValueError):
    """The handler is already registered for the event."""


class LifecycleCallbackRegistry:
    """In-memory map of lifecycle event -> handlers. Thread-safe."""

    def __init__(self):
        self._callbacks: dict[LifecycleEvent, list[Callable[[Any], Any]]] = {}
        self._lock = Lock()

    def register(self, event: LifecycleEvent, callback: Callable[[Any], Any]) -> None:
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback)}")

        event = LifecycleEvent(event)
        name = getattr(callback, "__qualname__", str(callback))
        with self._lock:
            callbacks = self._callbacks.setdefault(event, [])
            if callback in callbacks:
                raise DuplicateCallbackError(f"{name} already registered for {event.value}")
            callbacks.append(callback)

        logger.debug(f"Lifecycle callback registered: {name} -> {event.value}")

    def get_callbacks(self, event: LifecycleEvent) -> list[Callable[[Any], Any]]:
        with self._lock:
            return list(self._callbacks.get(event, []))

    def dispatch(self, event: LifecycleEvent, payload: Any) -> list[Any]:
        """Invoke every handler of `event`; returns the non-None results."""
        results = []
        for callback in self.get_callbacks(event):
            try:
                result = callback(payload)
            except Exception as exc:
                logger.error(
                    f"Lifecycle callback {getattr(callback, '__qualname__', callback)} "
                    f"failed on {event.value}: {exc}",
                    exc_info=True,
                )
                continue
            if result is not None:
                results.append(result)
        return results


def is_csp_package_policy(policy: PackagePolicy | DeletedPackagePolicy) -> bool:
    return policy.package is not None and policy.package.name == CLOUD_SECURITY_POSTURE_PACKAGE_NAME


def register_csp_callbacks(registry: LifecycleCallbackRegistry, service) -> None:
    """Wire a `RuleSyncService` to the lifecycle events of CSP package policies."""

    def on_create(policy: PackagePolicy):
        if is_csp_package_policy(policy):
            return service.on_policy_created(policy)
        return None

    def on_upgrade(policy: PackagePolicy):
        if is_csp_package_policy(policy):
            return service.on_policy_upgraded(policy)
        return None

    def on_delete(deleted: DeletedPackagePolicy):
        # A failed policy deletion leaves the policy and its rules in place
        if is_csp_package_policy(deleted) and deleted.success:
            return service.on_policy_deleted(deleted)
        return None

    registry.register(LifecycleEvent.POST_CREATE, on_create)
    registry.register(LifecycleEvent.UPGRADE, on_upgrade)
    registry.register(LifecycleEvent.POST_DELETE, on_delete)
