"""Rule templates - loading package assets, installing and selecting them."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from csp_rules.constants import CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE
from csp_rules.persistence import (
    BulkCreateObject,
    DocumentStore,
    DocumentStoreError,
    SavedObject,
    template_filter_by_benchmark,
)
from csp_rules.persistence.store import DEFAULT_PER_PAGE
from csp_rules.rules.errors import RuleCreateError, TemplateFetchError
from csp_rules.rules.reconciler import delete_rules
from csp_rules.rules.schemas import CspRuleTemplate

logger = logging.getLogger("csp.rules")


# =============================================================================
# Selection
# =============================================================================


def template_benchmark_id(template: SavedObject) -> str | None:
    """Benchmark id recorded in a template's metadata, if any."""
    metadata = template.attributes.get("metadata") or {}
    benchmark = metadata.get("benchmark") or {}
    return benchmark.get("id")


def select_templates(templates: Sequence[SavedObject], benchmark_id: str) -> list[SavedObject]:
    """Templates of exactly `benchmark_id`, in input order."""
    return [t for t in templates if template_benchmark_id(t) == benchmark_id]


def find_rule_templates(
    store: DocumentStore,
    benchmark_id: str,
    per_page: int = DEFAULT_PER_PAGE,
) -> list[SavedObject]:
    """Read the installed templates of one benchmark from the store.

    Raises:
        TemplateFetchError: if the store query fails
    """
    try:
        templates = store.find_all(
            CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE,
            filter=template_filter_by_benchmark(benchmark_id),
            per_page=per_page,
        )
    except DocumentStoreError as e:
        raise TemplateFetchError(f"Failed to read rule templates of benchmark {benchmark_id}: {e}") from e

    return select_templates(templates, benchmark_id)


# =============================================================================
# Template Loader
# =============================================================================


class TemplateLoader:
    """Loads rule templates shipped as YAML package assets.

    A file holds one benchmark::

        benchmark:
          id: cis_k8s
          name: CIS Kubernetes V1.23
          version: v1.0.0
        rules:
          - enabled: true
            metadata:
              rego_rule_id: cis_1_1_1
              name: ...
    """

    def __init__(self, templates_dir: str | Path | None = None):
        self.templates_dir = Path(templates_dir) if templates_dir else None
        self._templates: dict[tuple[str, str], CspRuleTemplate] = {}

    def load_file(self, path: str | Path) -> list[CspRuleTemplate]:
        """Load the templates of a single YAML file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Template file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            content = yaml.safe_load(f) or {}

        benchmark = content.get("benchmark")
        templates = []
        for item in content.get("rules", []):
            template = self._parse_template(item, benchmark)
            templates.append(template)
            self._templates[(template.benchmark_id, template.rego_rule_id)] = template

        return templates

    def load_directory(self, path: str | Path | None = None) -> list[CspRuleTemplate]:
        """Load all YAML template files from a directory."""
        path = Path(path) if path else self.templates_dir
        if not path:
            raise ValueError("No templates directory specified")
        if not path.exists():
            raise FileNotFoundError(f"Templates directory not found: {path}")

        templates = []
        for yaml_file in sorted(path.glob("*.yaml")):
            try:
                templates.extend(self.load_file(yaml_file))
            except (yaml.YAMLError, ValidationError) as e:
                logger.warning(f"Failed to load templates from {yaml_file}: {e}")

        return templates

    def get_all_templates(self) -> list[CspRuleTemplate]:
        return list(self._templates.values())

    def _parse_template(self, data: dict[str, Any], benchmark: dict[str, Any] | None) -> CspRuleTemplate:
        metadata = dict(data.get("metadata") or {})
        if benchmark and "benchmark" not in metadata:
            metadata["benchmark"] = benchmark
        return CspRuleTemplate.model_validate({**data, "metadata": metadata})


# =============================================================================
# Installation
# =============================================================================


def install_templates(
    store: DocumentStore,
    templates: Sequence[CspRuleTemplate],
    per_page: int = DEFAULT_PER_PAGE,
) -> list[SavedObject]:
    """Install templates, replacing those already installed for their benchmarks.

    New templates are created before the previous ones are removed, so a
    failed install leaves the installed set as it was.
    """
    benchmark_ids = list(dict.fromkeys(t.benchmark_id for t in templates))

    try:
        previous = [
            obj
            for benchmark_id in benchmark_ids
            for obj in store.find_all(
                CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE,
                filter=template_filter_by_benchmark(benchmark_id),
                per_page=per_page,
            )
        ]
    except DocumentStoreError as e:
        raise TemplateFetchError(f"Failed to read installed rule templates: {e}") from e

    objects = [
        BulkCreateObject(
            type=CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE,
            attributes=t.model_dump(mode="json", exclude_none=True),
        )
        for t in templates
    ]
    try:
        result = store.bulk_create(objects)
    except DocumentStoreError as e:
        raise RuleCreateError(f"Failed to install rule templates: {e}") from e
    if result.failed:
        raise RuleCreateError(
            f"Failed to install {len(result.errors)} of {len(objects)} rule templates",
            item_errors=[err.error for err in result.errors],
            created_ids=[obj.id for obj in result.saved_objects],
        )

    _, failures = delete_rules(store, previous, CSP_RULE_TEMPLATE_SAVED_OBJECT_TYPE)
    for template_id, error in failures.items():
        logger.warning(f"Failed to remove superseded rule template {template_id}: {error}")

    logger.info(
        f"Installed {len(result.saved_objects)} rule templates for benchmarks {', '.join(benchmark_ids)}"
    )
    return result.saved_objects
