"""
Module: decorator.py
Description: Lambda entry point decorator for SQS batch processing.

Wraps a Lambda handler so the SQS batch in the event is processed,
and successes deleted, before the wrapped handler runs. When messages
fail and suppression is off, SQSBatchProcessingError propagates out of
the Lambda invocation and the wrapped handler is not called.
"""

import functools
from typing import Any, Callable, Dict, Optional, Tuple, Type

from sqs_batch.models.message import parse_sqs_event
from sqs_batch.processing.handler import MessageHandler
from sqs_batch.processing.processor import BatchProcessor

LambdaHandler = Callable[[Dict[str, Any], Any], Any]


def sqs_batch_processor(
    record_handler: MessageHandler,
    suppress_exception: bool = False,
    client: Optional[Any] = None,
    non_retryable_exceptions: Tuple[Type[BaseException], ...] = (),
    delete_non_retryable: bool = False,
    max_workers: Optional[int] = None,
    queue_url: Optional[str] = None
) -> Callable[[LambdaHandler], LambdaHandler]:
    """
    Decorate a Lambda handler with partial-failure batch processing.

    Args:
        record_handler: Function or SqsMessageHandler for one message
        suppress_exception: Return normally even when messages failed
        client: Optional SQSClient or boto3 SQS client
        non_retryable_exceptions: Handler exceptions never worth a retry
        delete_non_retryable: Delete messages failing with those exceptions
        max_workers: Messages handled concurrently
        queue_url: Explicit queue URL

    Example:
        >>> @sqs_batch_processor(record_handler=handle_order)
        ... def lambda_handler(event, context):
        ...     return {"statusCode": 200}
    """
    processor = BatchProcessor(
        client=client,
        queue_url=queue_url,
        suppress_exception=suppress_exception,
        max_workers=max_workers,
        non_retryable_exceptions=non_retryable_exceptions,
        delete_non_retryable=delete_non_retryable
    )

    def decorator(lambda_handler: LambdaHandler) -> LambdaHandler:
        @functools.wraps(lambda_handler)
        def wrapper(event: Dict[str, Any], context: Any) -> Any:
            processor.process(parse_sqs_event(event), record_handler)
            return lambda_handler(event, context)

        return wrapper

    return decorator
