"""
Package: sqs_batch
Description: Partial-failure batch processing for Amazon SQS.

Handles each message of a batch independently, deletes the successful
ones from the queue and reports the failures in one aggregate error.
"""

from .exceptions import (
    AcknowledgementError,
    AcknowledgementRejection,
    BatchProcessingError,
    ConfigurationError,
    SQSBatchProcessingError,
)
from .models import BatchResult, FailureStage, SQSMessage, parse_sqs_event
from .processing import (
    AsyncBatchProcessor,
    BatchProcessor,
    SqsMessageHandler,
    batch_processor,
    sqs_batch_processor,
)
from .sqs_queue import override_async_sqs_client, override_sqs_client

__version__ = "0.1.0"

__all__ = [
    "AcknowledgementError",
    "AcknowledgementRejection",
    "AsyncBatchProcessor",
    "BatchProcessingError",
    "BatchProcessor",
    "BatchResult",
    "ConfigurationError",
    "FailureStage",
    "SQSBatchProcessingError",
    "SQSMessage",
    "SqsMessageHandler",
    "batch_processor",
    "override_async_sqs_client",
    "override_sqs_client",
    "parse_sqs_event",
    "sqs_batch_processor",
]
