"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from csp_rules.core.config import Settings
from csp_rules.rules import TemplateLoader


class TestSettings:
    def test_default_templates_dir_outside_project_root(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TEMPLATES_DIR", raising=False)
        monkeypatch.chdir(tmp_path)

        templates = TemplateLoader(Settings().templates_dir).load_directory()

        assert {t.benchmark_id for t in templates} == {"cis_k8s", "cis_eks"}
        assert len(templates) == 7

    def test_templates_dir_override(self, tmp_path):
        assert Settings(templates_dir=str(tmp_path)).templates_dir == str(tmp_path)

    @pytest.mark.parametrize("page_size", [0, -1])
    def test_find_page_size_must_be_positive(self, page_size):
        with pytest.raises(ValidationError):
            Settings(find_page_size=page_size)
