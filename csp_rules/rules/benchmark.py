"""Resolve which benchmark governs rule generation for a package policy."""

import logging
from typing import Sequence

from csp_rules.constants import CLOUDBEAT_VANILLA, INPUT_TYPE_SEPARATOR
from csp_rules.rules.schemas import PackagePolicyInput

logger = logging.getLogger("csp.rules")


def is_enabled_benchmark_input(policy_input: PackagePolicyInput) -> bool:
    return bool(policy_input.type) and policy_input.enabled


def get_input_type(input_type: str) -> str:
    """Benchmark id part of an input type: 'cloudbeat/cis_eks' -> 'cis_eks'.

    A type without a separator is taken as the benchmark id itself.
    """
    family, sep, benchmark_id = input_type.partition(INPUT_TYPE_SEPARATOR)
    if not sep:
        logger.warning(f"Input type '{input_type}' has no family prefix, using it as benchmark id")
        return family
    return benchmark_id


def resolve_benchmark(
    inputs: Sequence[PackagePolicyInput],
    default_input_type: str = CLOUDBEAT_VANILLA,
) -> str:
    """Benchmark id of the only enabled input, else the default benchmark.

    Zero or several enabled inputs is an unset or ambiguous configuration
    and falls back to the default rather than failing.
    """
    enabled_inputs = [i for i in inputs if is_enabled_benchmark_input(i)]

    # Use the only enabled input
    if len(enabled_inputs) == 1:
        return get_input_type(enabled_inputs[0].type)

    return get_input_type(default_input_type)
