"""
Module: reporter.py
Description: Turns a finished BatchResult into the caller's result.
"""

from typing import Any, List

from sqs_batch.exceptions import SQSBatchProcessingError
from sqs_batch.models.outcome import BatchResult
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)


class OutcomeReporter:
    """Raises the aggregate error or returns success values."""

    def report(self, result: BatchResult, suppress: bool = False) -> List[Any]:
        """
        Decide how the batch ends for the caller.

        Args:
            result: Batch result after acknowledgement
            suppress: Return normally even when messages failed

        Returns:
            Success values in input order

        Raises:
            SQSBatchProcessingError: If any message failed and suppress is False
        """
        if not result.has_failures:
            return result.success_values

        if not suppress:
            raise SQSBatchProcessingError(result)

        for failure in result.failures:
            logger.warning(
                "Suppressed message failure",
                message_id=failure.message_id,
                stage=failure.stage.value,
                discarded=failure.discarded,
                error=str(failure.cause),
                error_type=type(failure.cause).__name__
            )
        return result.success_values
