"""
Module: exceptions.py
Description: Error hierarchy for SQS batch processing.

Handler errors are whatever the message handler raises and are never
wrapped. Acknowledgement errors describe why a successfully handled
message could not be deleted. SQSBatchProcessingError is the only
error surfaced to callers of a processor.
"""

from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from sqs_batch.models.message import SQSMessage
    from sqs_batch.models.outcome import BatchResult


class BatchProcessingError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(BatchProcessingError):
    """Required setup is missing; raised before any message is handled."""


class AcknowledgementError(BatchProcessingError):
    """
    A DeleteMessageBatch call failed as a whole.

    Every message of the group stays on the queue. The transport or
    provider error is chained as __cause__.

    Attributes:
        message_ids: Ids of the messages in the failed group
    """

    def __init__(self, message_ids: Sequence[str], reason: str):
        self.message_ids = list(message_ids)
        self.reason = reason
        super().__init__(
            f"Failed to delete {len(self.message_ids)} message(s) from queue: {reason}"
        )


class AcknowledgementRejection(BatchProcessingError):
    """
    SQS rejected a single entry of an otherwise successful delete call.

    Attributes:
        message_id: Id of the rejected message
        code: Error code reported by SQS (e.g. ReceiptHandleIsInvalid)
        sender_fault: Whether SQS blamed the request rather than itself
    """

    def __init__(
        self,
        message_id: str,
        code: str,
        message: Optional[str] = None,
        sender_fault: bool = False
    ):
        self.message_id = message_id
        self.code = code
        self.detail = message
        self.sender_fault = sender_fault
        super().__init__(
            f"Delete rejected for message {message_id}: {code}"
            + (f" ({message})" if message else "")
        )


class SQSBatchProcessingError(BatchProcessingError):
    """
    Aggregate error for a batch where at least one message failed.

    Carries the full BatchResult so callers can see what succeeded
    (and was already deleted) next to each failure and its cause.
    """

    def __init__(self, result: "BatchResult"):
        self.result = result
        failures = result.failure_causes
        details = "; ".join(
            f"{message_id}: {type(cause).__name__}: {cause}"
            for message_id, cause in failures
        )
        super().__init__(
            f"{len(failures)} of {len(result)} message(s) failed processing. {details}"
        )

    @property
    def successes(self) -> List[Any]:
        """Handler return values of acknowledged messages, in input order."""
        return self.result.success_values

    @property
    def failures(self) -> List[Tuple[str, BaseException]]:
        """Ordered (message_id, cause) pairs."""
        return self.result.failure_causes

    @property
    def failed_messages(self) -> List["SQSMessage"]:
        """Messages that remain on the queue (or were discarded as non-retryable)."""
        return [outcome.message for outcome in self.result.failures]
