"""
Package: sqs_queue
Description: SQS access for batch acknowledgement.

Provides sync (boto3) and async (aioboto3) clients for deleting
processed messages, plus the process-wide client provider.
"""

from .sqs import SQSClient, parse_queue_arn
from .async_sqs import AsyncSQSClient
from .provider import (
    get_async_sqs_client,
    get_sqs_client,
    override_async_sqs_client,
    override_sqs_client,
    reset_sqs_client,
)

__all__ = [
    "SQSClient",
    "AsyncSQSClient",
    "parse_queue_arn",
    "get_sqs_client",
    "get_async_sqs_client",
    "override_sqs_client",
    "override_async_sqs_client",
    "reset_sqs_client",
]
