"""
Module: models
Description: Package initialization for Pydantic data models.

- SQSMessage: One message of a batch
- ProcessingOutcome / BatchResult: Per-message and per-batch results
- DeleteBatchResponse: Parsed DeleteMessageBatch response
"""

from .message import SQSMessage, parse_sqs_event
from .outcome import (
    AcknowledgementResult,
    BatchResult,
    DeleteBatchFailure,
    DeleteBatchResponse,
    FailureOutcome,
    FailureStage,
    ProcessingOutcome,
    SuccessOutcome,
)

__all__ = [
    "SQSMessage",
    "parse_sqs_event",
    "AcknowledgementResult",
    "BatchResult",
    "DeleteBatchFailure",
    "DeleteBatchResponse",
    "FailureOutcome",
    "FailureStage",
    "ProcessingOutcome",
    "SuccessOutcome",
]
