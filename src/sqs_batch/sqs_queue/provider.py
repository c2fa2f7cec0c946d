"""
Module: provider.py
Description: Process-wide SQS client provider.

The default client is built lazily from settings.aws_region on first
use. Applications needing a custom region, credentials or endpoint
call override_sqs_client() once at start-up, before any batch is
processed. Swapping the client while batches are in flight is not
supported.
"""

import threading
from typing import Any, Optional

from sqs_batch.config.settings import settings
from sqs_batch.sqs_queue.async_sqs import AsyncSQSClient
from sqs_batch.sqs_queue.sqs import SQSClient
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)

_lock = threading.Lock()
_client: Optional[SQSClient] = None
_async_client: Optional[AsyncSQSClient] = None


def get_sqs_client() -> SQSClient:
    """Return the shared SQS client, building the default one on first use."""
    global _client
    if _client is None:
        with _lock:
            if _client is None:
                _client = SQSClient(region_name=settings.aws_region)
    return _client


def override_sqs_client(client: Any) -> None:
    """
    Replace the shared SQS client.

    Args:
        client: A boto3 SQS client or an SQSClient instance
    """
    global _client
    if not isinstance(client, SQSClient):
        client = SQSClient(client=client)
    with _lock:
        _client = client
    logger.info("SQS client overridden")


def get_async_sqs_client() -> AsyncSQSClient:
    """Return the shared async SQS client, building the default one on first use."""
    global _async_client
    if _async_client is None:
        with _lock:
            if _async_client is None:
                _async_client = AsyncSQSClient(region_name=settings.aws_region)
    return _async_client


def override_async_sqs_client(client: Any) -> None:
    """
    Replace the shared async SQS client.

    Args:
        client: An aioboto3 Session or an AsyncSQSClient instance
    """
    global _async_client
    if not isinstance(client, AsyncSQSClient):
        client = AsyncSQSClient(session=client)
    with _lock:
        _async_client = client
    logger.info("Async SQS client overridden")


def reset_sqs_client() -> None:
    """Forget both shared clients so the defaults are rebuilt on next use."""
    global _client, _async_client
    with _lock:
        _client = None
        _async_client = None
