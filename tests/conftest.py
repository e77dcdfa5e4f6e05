"""Shared fixtures and helpers for tests."""

from pathlib import Path

import pytest

from json_graph.config import PipelineSettings

_REPO_ROOT = Path(__file__).parent.parent

SAMPLE_JSON = '{"a": 1, "b": [true, null]}'


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_json() -> str:
    """Return the small object used throughout the pipeline tests."""
    return SAMPLE_JSON


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    """Write the sample document to a temporary file."""
    path = tmp_path / "sample.json"
    path.write_text(SAMPLE_JSON, encoding="utf-8")
    return path


@pytest.fixture
def settings() -> PipelineSettings:
    """Settings with no debounce so timers fire on the next loop iteration."""
    return PipelineSettings(
        debounce_small=0.0,
        debounce_medium=0.0,
        debounce_large=0.0,
        debounce_very_large=0.0,
    )
