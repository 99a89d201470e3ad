"""API routes receiving package policy lifecycle events from the host."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from csp_rules.core.config import get_settings
from csp_rules.lifecycle.callbacks import (
    LifecycleCallbackRegistry,
    LifecycleEvent,
    register_csp_callbacks,
)
from csp_rules.lifecycle.locks import PolicyLocks
from csp_rules.lifecycle.schemas import (
    InstallationStatusResponse,
    LifecycleEventResponse,
    RulesListResponse,
)
from csp_rules.lifecycle.service import RuleSyncService
from csp_rules.persistence import DocumentStore, SqlDocumentStore
from csp_rules.rules.errors import RuleSyncError
from csp_rules.rules.index import load_existing
from csp_rules.rules.schemas import DeletedPackagePolicy, PackagePolicy

logger = logging.getLogger("csp.api")

router = APIRouter(prefix="/csp", tags=["csp"])

# Shared across requests so events of one policy are serialized process-wide
_policy_locks = PolicyLocks()


def get_store() -> DocumentStore:
    return SqlDocumentStore()


def get_service(store: DocumentStore = Depends(get_store)) -> RuleSyncService:
    return RuleSyncService(store, locks=_policy_locks)


def get_registry(service: RuleSyncService = Depends(get_service)) -> LifecycleCallbackRegistry:
    registry = LifecycleCallbackRegistry()
    register_csp_callbacks(registry, service)
    return registry


@router.post("/lifecycle/package-policies", response_model=LifecycleEventResponse)
def package_policy_created(
    policy: PackagePolicy,
    registry: LifecycleCallbackRegistry = Depends(get_registry),
) -> LifecycleEventResponse:
    reports = registry.dispatch(LifecycleEvent.POST_CREATE, policy)
    return LifecycleEventResponse(event=LifecycleEvent.POST_CREATE.value, reports=reports)


@router.put("/lifecycle/package-policies", response_model=LifecycleEventResponse)
def package_policy_upgraded(
    policy: PackagePolicy,
    registry: LifecycleCallbackRegistry = Depends(get_registry),
) -> LifecycleEventResponse:
    reports = registry.dispatch(LifecycleEvent.UPGRADE, policy)
    return LifecycleEventResponse(event=LifecycleEvent.UPGRADE.value, reports=reports)


@router.post("/lifecycle/package-policies/delete", response_model=LifecycleEventResponse)
def package_policies_deleted(
    deleted: list[DeletedPackagePolicy],
    registry: LifecycleCallbackRegistry = Depends(get_registry),
) -> LifecycleEventResponse:
    reports = []
    for policy in deleted:
        reports.extend(registry.dispatch(LifecycleEvent.POST_DELETE, policy))
    return LifecycleEventResponse(event=LifecycleEvent.POST_DELETE.value, reports=reports)


@router.get("/status", response_model=InstallationStatusResponse)
def installation_status(
    service: RuleSyncService = Depends(get_service),
) -> InstallationStatusResponse:
    return InstallationStatusResponse(installed=service.is_package_installed())


@router.get("/rules", response_model=RulesListResponse)
def list_rules(
    package_policy_id: str,
    policy_id: str,
    store: DocumentStore = Depends(get_store),
) -> RulesListResponse:
    try:
        existing = load_existing(
            store, package_policy_id, policy_id, per_page=get_settings().find_page_size
        )
    except RuleSyncError as e:
        logger.error(f"Failed to list rules of package policy {package_policy_id}: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e)) from e
    return RulesListResponse(
        package_policy_id=package_policy_id,
        policy_id=policy_id,
        rules=existing.rules,
        total=len(existing),
    )
