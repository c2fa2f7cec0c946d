"""
Package: processing
Description: Batch orchestration, acknowledgement and reporting.
"""

from .acknowledgement import AcknowledgementBatcher
from .async_processor import AsyncBatchProcessor
from .decorator import sqs_batch_processor
from .handler import MessageHandler, SqsMessageHandler, as_callable
from .orchestrator import BatchOrchestrator
from .processor import BatchProcessor, batch_processor
from .reporter import OutcomeReporter

__all__ = [
    "AcknowledgementBatcher",
    "AsyncBatchProcessor",
    "BatchOrchestrator",
    "BatchProcessor",
    "MessageHandler",
    "OutcomeReporter",
    "SqsMessageHandler",
    "as_callable",
    "batch_processor",
    "sqs_batch_processor",
]
