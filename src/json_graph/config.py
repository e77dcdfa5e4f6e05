"""Pipeline settings.

Defaults live on the model; every field can be overridden with a
``JSON_GRAPH_<FIELD>`` environment variable (e.g. ``JSON_GRAPH_MAX_SIZE_BYTES``).
"""

from __future__ import annotations

import os
from typing import Literal

from pydantic import BaseModel, ValidationError

KIB = 1024

_ENV_PREFIX = "JSON_GRAPH_"


class PipelineSettings(BaseModel):
    # size bands: upper bounds (exclusive) in bytes, and debounce per band in seconds
    small_max_bytes: int = 10 * KIB
    medium_max_bytes: int = 100 * KIB
    large_max_bytes: int = 1024 * KIB
    debounce_small: float = 0.05
    debounce_medium: float = 0.2
    debounce_large: float = 0.5
    debounce_very_large: float = 1.0

    warning_size_bytes: int = 150 * KIB
    max_size_bytes: int = 300 * KIB

    # documents up to this size are processed on the interactive thread
    inline_max_bytes: int = 10 * KIB
    worker_kind: Literal["thread", "process"] = "thread"

    node_width: float = 150.0
    node_height: float = 40.0
    rank_sep: float = 80.0
    node_sep: float = 30.0
    margin_x: float = 20.0
    margin_y: float = 20.0
    size_by_label: bool = False

    max_display_length: int = 40


def load_settings() -> PipelineSettings:
    """Build settings from defaults plus ``JSON_GRAPH_*`` environment overrides."""
    overrides: dict[str, str] = {}
    for name in PipelineSettings.model_fields:
        value = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
        if value is not None:
            overrides[name] = value
    try:
        return PipelineSettings.model_validate(overrides)
    except ValidationError as exc:
        raise ValueError(f"Invalid {_ENV_PREFIX}* setting: {exc}") from None


_settings: PipelineSettings | None = None


def get_settings() -> PipelineSettings:
    """Return the process-wide settings, loading them on first use."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings
