"""Shared test fixtures and helpers for shutterguide tests."""

import importlib.util
import sys
from pathlib import Path

import pytest

# Load helpers module from the tests directory using importlib to avoid
# polluting sys.path.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from shutterguide.observability import ObservabilityHub  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_hub():
    """Every test starts and ends with tracing off."""
    ObservabilityHub.reset_instance()
    yield
    ObservabilityHub.reset_instance()
