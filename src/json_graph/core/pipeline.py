"""The unit of work that crosses the background boundary, and document size helpers."""

from __future__ import annotations

import logging
from enum import StrEnum

from json_graph.config import PipelineSettings, get_settings
from json_graph.core.graph import build_graph
from json_graph.core.layout import layout
from json_graph.core.parser import parse
from json_graph.models import WorkerRequest, WorkerResponse

logger = logging.getLogger(__name__)


class SizeCategory(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    VERY_LARGE = "very_large"


def byte_size(text: str) -> int:
    return len(text.encode("utf-8"))


def size_category(size_bytes: int, settings: PipelineSettings | None = None) -> SizeCategory:
    cfg = settings or get_settings()
    if size_bytes < cfg.small_max_bytes:
        return SizeCategory.SMALL
    if size_bytes < cfg.medium_max_bytes:
        return SizeCategory.MEDIUM
    if size_bytes < cfg.large_max_bytes:
        return SizeCategory.LARGE
    return SizeCategory.VERY_LARGE


def debounce_delay(category: SizeCategory, settings: PipelineSettings | None = None) -> float:
    cfg = settings or get_settings()
    return {
        SizeCategory.SMALL: cfg.debounce_small,
        SizeCategory.MEDIUM: cfg.debounce_medium,
        SizeCategory.LARGE: cfg.debounce_large,
        SizeCategory.VERY_LARGE: cfg.debounce_very_large,
    }[category]


def check_size_limit(size_bytes: int, settings: PipelineSettings | None = None) -> bool:
    """True when the document is within the hard ceiling."""
    return size_bytes <= (settings or get_settings()).max_size_bytes


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / 1024:.1f}KB"


def size_limit_message(size_bytes: int, settings: PipelineSettings | None = None) -> str:
    limit = (settings or get_settings()).max_size_bytes
    return f"JSON too large ({format_size(size_bytes)}). Maximum size is {format_size(limit)}."


def process_request(request: WorkerRequest, settings: PipelineSettings | None = None) -> WorkerResponse:
    """Parse, build and lay out one document.

    Runs on either side of the background boundary, so it only touches its
    arguments. A document with any syntax error yields ``errors`` and no graph.
    """
    cfg = settings or get_settings()
    result = parse(request.text)
    if result.tree is None or result.errors:
        logger.debug("Request %d: %d syntax error(s)", request.request_id, len(result.errors))
        return WorkerResponse(request_id=request.request_id, errors=result.errors)

    nodes, edges = build_graph(result.tree, cfg.max_display_length)
    positioned = layout(nodes, edges, cfg)
    logger.debug("Request %d: %d node(s), %d edge(s)", request.request_id, len(positioned), len(edges))
    return WorkerResponse(request_id=request.request_id, nodes=positioned, edges=edges)
