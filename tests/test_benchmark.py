"""Tests for benchmark resolution."""

import pytest

from csp_rules.rules import PackagePolicyInput, get_input_type, resolve_benchmark


def inputs(*pairs):
    return [PackagePolicyInput(type=t, enabled=e) for t, e in pairs]


class TestResolveBenchmark:
    def test_single_enabled_input(self):
        result = resolve_benchmark(inputs(("cloudbeat/cis_k8s", False), ("cloudbeat/cis_eks", True)))
        assert result == "cis_eks"

    def test_no_enabled_input_uses_default(self):
        result = resolve_benchmark(inputs(("cloudbeat/cis_eks", False)))
        assert result == "cis_k8s"

    def test_empty_inputs_uses_default(self):
        assert resolve_benchmark([]) == "cis_k8s"

    def test_two_enabled_inputs_are_ambiguous(self):
        result = resolve_benchmark(inputs(("cloudbeat/aws", True), ("cloudbeat/aws", True)))
        assert result == "cis_k8s"
        assert result != "aws"

    def test_input_without_type_is_ignored(self):
        result = resolve_benchmark(inputs(("", True), ("cloudbeat/cis_eks", True)))
        assert result == "cis_eks"

    def test_custom_default(self):
        result = resolve_benchmark([], default_input_type="cloudbeat/cis_aws")
        assert result == "cis_aws"

    @pytest.mark.parametrize(
        "enabled,expected",
        [
            ([], "cis_k8s"),
            (["cloudbeat/cis_gcp"], "cis_gcp"),
            (["cloudbeat/cis_gcp", "cloudbeat/cis_eks"], "cis_k8s"),
            (["cloudbeat/cis_gcp", "cloudbeat/cis_eks", "cloudbeat/cis_aws"], "cis_k8s"),
        ],
    )
    def test_only_exactly_one_enabled_input_selects(self, enabled, expected):
        policy_inputs = inputs(("cloudbeat/cis_azure", False), *[(t, True) for t in enabled])
        assert resolve_benchmark(policy_inputs) == expected


class TestGetInputType:
    def test_suffix_after_family(self):
        assert get_input_type("cloudbeat/cis_k8s") == "cis_k8s"

    def test_splits_on_first_separator(self):
        assert get_input_type("cloudbeat/cis/aws") == "cis/aws"

    def test_missing_separator_uses_whole_type(self, caplog):
        assert get_input_type("cis_k8s") == "cis_k8s"
        assert "no family prefix" in caplog.text
