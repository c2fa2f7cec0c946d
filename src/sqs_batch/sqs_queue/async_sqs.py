"""
Module: async_sqs.py
Description: Async SQS client for batch acknowledgement.

aioboto3 counterpart of SQSClient used by AsyncBatchProcessor.
Each call opens a short-lived client from the shared session.
"""

from typing import Optional, Sequence

from aioboto3 import Session
from botocore.exceptions import ClientError

from sqs_batch.models.message import SQSMessage
from sqs_batch.models.outcome import DeleteBatchResponse
from sqs_batch.sqs_queue.sqs import build_delete_entries, parse_queue_arn
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)


class AsyncSQSClient:
    """
    Async SQS client for batch acknowledgement.

    Provides the same delete and queue URL operations as SQSClient
    for use inside an event loop.
    """

    def __init__(self, session: Optional[Session] = None, region_name: Optional[str] = None):
        """
        Initialize async SQS client.

        Args:
            session: Pre-built aioboto3 session (custom credentials)
            region_name: Region used when no session is supplied
        """
        self.session = session if session is not None else Session(region_name=region_name)
        self.region_name = region_name

        logger.info(
            "Async SQS client initialized",
            region=region_name,
            custom_session=session is not None
        )

    async def delete_message_batch(
        self,
        queue_url: str,
        messages: Sequence[SQSMessage]
    ) -> DeleteBatchResponse:
        """
        Delete one group of messages.

        Args:
            queue_url: URL of the queue the messages came from
            messages: At most 10 messages with unique ids

        Returns:
            Parsed response with successful ids and rejected entries

        Raises:
            ClientError: If the call fails as a whole
        """
        if not queue_url or not isinstance(queue_url, str):
            raise ValueError("queue_url must be a non-empty string")
        if not messages:
            raise ValueError("messages must not be empty")

        try:
            async with self.session.client('sqs', region_name=self.region_name) as sqs:
                response = await sqs.delete_message_batch(
                    QueueUrl=queue_url,
                    Entries=build_delete_entries(messages)
                )
        except ClientError as e:
            logger.error(
                "Failed to delete message batch",
                queue_url=queue_url,
                group_size=len(messages),
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        return DeleteBatchResponse.from_api(response)

    async def resolve_queue_url(self, event_source_arn: str) -> str:
        """Look up the queue URL for an event source ARN."""
        _, account_id, queue_name = parse_queue_arn(event_source_arn)

        try:
            async with self.session.client('sqs', region_name=self.region_name) as sqs:
                response = await sqs.get_queue_url(
                    QueueName=queue_name,
                    QueueOwnerAWSAccountId=account_id
                )
        except ClientError as e:
            logger.error(
                "Failed to resolve queue URL",
                event_source_arn=event_source_arn,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        return response['QueueUrl']
