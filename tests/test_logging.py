"""
Unit tests for generator performance logging
"""
import pytest
from structlog.testing import capture_logs

from app.services.heuristics import generate_flashcards, summarize_text
from app.services.logging import log_performance

TEXT = (
    "Photosynthesis: plants convert light into energy.\n"
    "Chlorophyll is the pigment that absorbs light in the leaves."
)


def _events(logs, name):
    return [entry for entry in logs if entry["event"] == name]


class TestLogPerformance:
    def test_summary_logs_output_length(self):
        with capture_logs() as logs:
            summary = summarize_text(TEXT, 2)
        (entry,) = _events(logs, "function_completed")
        assert entry["function"] == "heuristic_summary"
        assert entry["status"] == "success"
        assert entry["chars"] == len(summary)

    def test_flashcards_log_item_count(self):
        with capture_logs() as logs:
            cards = generate_flashcards(TEXT, 2)
        (entry,) = _events(logs, "function_completed")
        assert entry["function"] == "heuristic_flashcards"
        assert entry["items"] == len(cards)

    def test_failure_logged_and_reraised(self):
        @log_performance("broken_generator")
        def broken():
            raise ValueError("no sentences")

        with capture_logs() as logs:
            with pytest.raises(ValueError):
                broken()
        (entry,) = _events(logs, "function_failed")
        assert entry["log_level"] == "error"
        assert entry["error_type"] == "ValueError"
        assert entry["error"] == "no sentences"
