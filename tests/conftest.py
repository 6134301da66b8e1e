"""Shared pytest setup for lexpatch.

Hypothesis budgets live here and nowhere else. Pick one with
HYPOTHESIS_PROFILE=dev|ci|verbose; with no choice made, CI=true selects
"ci" and anything else selects "dev".

Tests marked ``fuzz`` push thousands of hostile trees through the sanitizer
and validator. They are skipped unless selected with ``-m fuzz`` or by
naming test_content_fuzzing.py on the command line.
"""

import os

import pytest
from hypothesis import Phase, Verbosity, settings

_PHASES = [Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink]

_PROFILES: dict[str, dict[str, object]] = {
    "dev": {"max_examples": 500},
    # Reproducible runs; failing examples print a replay blob.
    "ci": {"max_examples": 50, "derandomize": True, "print_blob": True},
    "verbose": {"max_examples": 100, "verbosity": Verbosity.verbose},
}

for _name, _options in _PROFILES.items():
    settings.register_profile(_name, phases=_PHASES, **_options)


def _selected_profile() -> str:
    requested = os.environ.get("HYPOTHESIS_PROFILE")
    if requested in _PROFILES:
        return requested
    return "ci" if os.environ.get("CI") == "true" else "dev"


settings.load_profile(_selected_profile())


def _fuzz_requested(config: pytest.Config) -> bool:
    if "fuzz" in str(config.getoption("-m", default="")):
        return True
    return any("test_content_fuzzing" in str(arg) for arg in config.invocation_params.args)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip hostile-content fuzzing unless it was asked for."""
    if _fuzz_requested(config):
        return

    skip_fuzz = pytest.mark.skip(reason="hostile-content fuzzing; run with -m fuzz")
    for item in items:
        if "fuzz" in item.keywords:
            item.add_marker(skip_fuzz)
