"""Pytest fixtures for test suite."""

from pathlib import Path
from typing import Any

import pytest
from sqlmodel import create_engine
from sqlmodel.pool import StaticPool

from csp_rules.constants import CSP_RULE_SAVED_OBJECT_TYPE, CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE
from csp_rules.core.config import Settings
from csp_rules.core.database import init_sqlmodel_tables
from csp_rules.persistence import (
    BulkCreateObject,
    BulkCreateResult,
    DocumentStoreError,
    SqlDocumentStore,
)
from csp_rules.rules import PackagePolicy, PackagePolicyInput, TemplateLoader, install_templates


# =============================================================================
# Store Fixtures
# =============================================================================


class RecordingStore(SqlDocumentStore):
    """SQL store that records calls and fails on demand."""

    def __init__(self, engine):
        super().__init__(engine)
        self.bulk_create_calls = 0
        self.delete_calls: list[str] = []
        self.fail_bulk_create = False
        self.fail_find_types: set[str] = set()
        self.fail_delete_ids: set[str] = set()
        self.fail_item_indexes: set[int] = set()

    def find(self, type, filter=None, page=1, per_page=20):
        if type in self.fail_find_types:
            raise DocumentStoreError(f"find {type} unavailable")
        return super().find(type, filter=filter, page=page, per_page=per_page)

    def bulk_create(self, objects: list[BulkCreateObject]) -> BulkCreateResult:
        self.bulk_create_calls += 1
        if self.fail_bulk_create:
            raise DocumentStoreError("bulk create rejected")
        objects = [
            BulkCreateObject(type="", attributes=obj.attributes) if i in self.fail_item_indexes else obj
            for i, obj in enumerate(objects)
        ]
        return super().bulk_create(objects)

    def delete(self, type: str, id: str) -> None:
        self.delete_calls.append(id)
        if id in self.fail_delete_ids:
            raise DocumentStoreError(f"delete {id} timed out")
        super().delete(type, id)


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    init_sqlmodel_tables(engine)
    return engine


@pytest.fixture
def store(engine) -> RecordingStore:
    return RecordingStore(engine)


@pytest.fixture
def settings() -> Settings:
    """Settings with a small page size so paging is exercised."""
    return Settings(find_page_size=2)


# =============================================================================
# Template Fixtures
# =============================================================================


@pytest.fixture
def templates_dir() -> Path:
    """Path to the shipped rule templates."""
    return Path(__file__).parent.parent / "csp_rules" / "rules" / "data"


@pytest.fixture
def installed_templates(store: RecordingStore, templates_dir: Path):
    """Shipped templates installed into the store."""
    templates = TemplateLoader(templates_dir).load_directory()
    installed = install_templates(store, templates)
    store.bulk_create_calls = 0
    store.delete_calls.clear()
    return installed


# =============================================================================
# Builders
# =============================================================================


def template_attributes(rego_rule_id: str, enabled: bool = True, benchmark_id: str = "cis_k8s") -> dict[str, Any]:
    return {
        "enabled": enabled,
        "metadata": {
            "rego_rule_id": rego_rule_id,
            "name": f"Rule {rego_rule_id}",
            "benchmark": {"id": benchmark_id, "name": benchmark_id.upper(), "version": "v1.0.0"},
        },
    }


def rule_attributes(
    rego_rule_id: str,
    enabled: bool,
    package_policy_id: str = "pp-1",
    policy_id: str = "agent-policy-1",
    benchmark_id: str = "cis_k8s",
) -> dict[str, Any]:
    return {
        **template_attributes(rego_rule_id, True, benchmark_id),
        "package_policy_id": package_policy_id,
        "policy_id": policy_id,
        "enabled": enabled,
    }


def create_templates(store, *attributes: dict[str, Any]):
    return store.bulk_create(
        [BulkCreateObject(type=CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE, attributes=a) for a in attributes]
    ).saved_objects


def create_rules(store, *attributes: dict[str, Any]):
    return store.bulk_create(
        [BulkCreateObject(type=CSP_RULE_SAVED_OBJECT_TYPE, attributes=a) for a in attributes]
    ).saved_objects


def make_policy(
    *inputs: tuple[str, bool],
    id: str = "pp-1",
    policy_id: str = "agent-policy-1",
    package: str | None = "cloud_security_posture",
) -> PackagePolicy:
    return PackagePolicy(
        id=id,
        policy_id=policy_id,
        package={"name": package, "version": "0.0.21"} if package else None,
        inputs=[PackagePolicyInput(type=t, enabled=e) for t, e in inputs],
    )
