"""
Tests for correlation ID propagation into log records.

System role: Verification of logging context
"""

import logging

from backend.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from backend.observability.logger import CorrelationIdFilter


class TestCorrelationId:
    def test_set_should_generate_when_missing(self) -> None:
        value = set_correlation_id()

        assert value
        assert get_correlation_id() == value
        clear_correlation_id()
        assert get_correlation_id() == ""

    def test_filter_should_stamp_records(self) -> None:
        """Test every record carries the current correlation ID, or '-'."""
        # Arrange
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        log_filter = CorrelationIdFilter()

        # Act
        set_correlation_id("job-7")
        log_filter.filter(record)
        clear_correlation_id()
        other = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
        log_filter.filter(other)

        # Assert
        assert record.correlation_id == "job-7"
        assert other.correlation_id == "-"
