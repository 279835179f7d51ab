"""Tests for the logging helpers."""

from unittest.mock import patch

import pytest

from laylapet.logging import EventCategory, LogTimer


class TestLogTimer:
    """Tests for LogTimer."""

    def test_logs_completed_stage(self):
        with patch("laylapet.logging.logger") as logger:
            with LogTimer("rank_catalog", catalog_size=6) as timer:
                pass

        assert timer.duration_ms is not None
        logger.debug.assert_called_once()
        event, fields = logger.debug.call_args.args[0], logger.debug.call_args.kwargs
        assert event == "stage_completed"
        assert fields["stage"] == "rank_catalog"
        assert fields["category"] == EventCategory.PERFORMANCE.value
        assert fields["catalog_size"] == 6

    def test_elapsed_while_running(self):
        with patch("laylapet.logging.logger"):
            with LogTimer("chat_turn") as timer:
                assert timer.duration_ms is None
                assert timer.elapsed_ms >= 0
            assert timer.elapsed_ms == timer.duration_ms

    def test_failure_logged_and_reraised(self):
        """Exceptions propagate after the failed stage is logged."""
        with patch("laylapet.logging.logger") as logger:
            with pytest.raises(RuntimeError):
                with LogTimer("ground_reply"):
                    raise RuntimeError("boom")

        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["stage"] == "ground_reply"
        assert logger.warning.call_args.kwargs["error_type"] == "RuntimeError"
        logger.debug.assert_not_called()
