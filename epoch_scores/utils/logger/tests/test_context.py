from unittest.mock import patch

import pytest

from epoch_scores.utils.logger.context import (
    add_context,
    clear_context,
    get_context,
    logger_context,
    start_run,
    start_trace,
)


class TestLoggerContext:
    @pytest.fixture
    def mock_uuid(self):
        with patch("epoch_scores.utils.logger.context.uuid4") as mock:
            yield mock

    def test_get_context_no_context(self):
        # Clear any existing context
        logger_context.set(None)

        assert get_context() == {}

    def test_add_context_merges(self):
        logger_context.set(None)

        add_context({"command": "merge"})
        add_context({"batch_digest": "abc"})
        add_context({"command": "snapshot"})

        assert get_context() == {"command": "snapshot", "batch_digest": "abc"}

    def test_clear_context_keys(self):
        logger_context.set({"command": "merge", "batch_digest": "abc", "run_id": "1"})

        clear_context("batch_digest", "missing")

        assert get_context() == {"command": "merge", "run_id": "1"}

    def test_start_run_creates_unique_run_ids(self, mock_uuid):
        run_ids = [
            "12345678-1234-5678-1234-567812345672",
            "87654321-4321-8765-4321-876543218765",
        ]
        mock_uuid.side_effect = run_ids

        logger_context.set(None)

        start_run()
        first_run_id = get_context()["run_id"]

        start_run()
        second_run_id = get_context()["run_id"]

        assert first_run_id == run_ids[0]
        assert second_run_id == run_ids[1]

        assert mock_uuid.call_count == 2

    def test_start_trace_keeps_run_id(self, mock_uuid):
        mock_uuid.side_effect = ["run", "trace-1", "trace-2"]

        logger_context.set(None)

        start_run()
        start_trace()

        assert get_context() == {"run_id": "run", "trace_id": "trace-1"}

        start_trace()

        assert get_context() == {"run_id": "run", "trace_id": "trace-2"}
