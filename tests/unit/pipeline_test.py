"""Tests for size bands and the background work unit."""

from __future__ import annotations

import pickle

import pytest

from json_graph.config import KIB, PipelineSettings
from json_graph.core.pipeline import (
    SizeCategory,
    byte_size,
    check_size_limit,
    debounce_delay,
    format_size,
    process_request,
    size_category,
    size_limit_message,
)
from json_graph.models import WorkerRequest

_SETTINGS = PipelineSettings()


class TestSizeBands:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [
            (0, SizeCategory.SMALL),
            (10 * KIB - 1, SizeCategory.SMALL),
            (10 * KIB, SizeCategory.MEDIUM),
            (100 * KIB - 1, SizeCategory.MEDIUM),
            (100 * KIB, SizeCategory.LARGE),
            (1024 * KIB - 1, SizeCategory.LARGE),
            (1024 * KIB, SizeCategory.VERY_LARGE),
        ],
    )
    def test_size_category(self, size: int, expected: SizeCategory) -> None:
        assert size_category(size, _SETTINGS) is expected

    def test_debounce_grows_with_size(self) -> None:
        delays = [debounce_delay(category, _SETTINGS) for category in SizeCategory]
        assert delays == sorted(delays)
        assert delays == [0.05, 0.2, 0.5, 1.0]

    def test_byte_size_counts_utf8(self) -> None:
        assert byte_size("é") == 2
        assert byte_size("abc") == 3

    def test_size_limit(self) -> None:
        assert check_size_limit(300 * KIB, _SETTINGS) is True
        assert check_size_limit(300 * KIB + 1, _SETTINGS) is False

    def test_format_size(self) -> None:
        assert format_size(300 * KIB) == "300.0KB"
        assert format_size(512) == "0.5KB"

    def test_size_limit_message(self) -> None:
        message = size_limit_message(400 * KIB, _SETTINGS)
        assert message == "JSON too large (400.0KB). Maximum size is 300.0KB."


class TestProcessRequest:
    def test_valid_document(self, sample_json: str) -> None:
        response = process_request(WorkerRequest(request_id=7, text=sample_json), _SETTINGS)
        assert response.request_id == 7
        assert response.errors is None
        assert response.nodes is not None
        assert response.edges is not None
        assert len(response.nodes) == 5
        assert len(response.edges) == 4
        assert all(n.position.x >= _SETTINGS.margin_x for n in response.nodes)

    def test_invalid_document_yields_only_errors(self) -> None:
        response = process_request(WorkerRequest(request_id=3, text='{"a":}'), _SETTINGS)
        assert response.request_id == 3
        assert response.errors
        assert response.nodes is None
        assert response.edges is None

    def test_empty_document(self) -> None:
        response = process_request(WorkerRequest(request_id=1, text=""), _SETTINGS)
        assert response.errors
        assert response.nodes is None

    def test_display_length_from_settings(self) -> None:
        settings = PipelineSettings(max_display_length=10)
        response = process_request(WorkerRequest(request_id=1, text='["' + "x" * 50 + '"]'), settings)
        assert response.nodes is not None
        assert len(response.nodes[1].display_value or "") == 10

    def test_request_and_response_are_picklable(self, sample_json: str) -> None:
        request = WorkerRequest(request_id=1, text=sample_json)
        response = process_request(pickle.loads(pickle.dumps(request)), _SETTINGS)
        restored = pickle.loads(pickle.dumps(response))
        assert restored == response
