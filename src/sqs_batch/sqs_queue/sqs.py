"""
Module: sqs.py
Description: SQS client for batch acknowledgement.

Wraps a boto3 SQS client with the three calls the processor needs:
deleting groups of processed messages, resolving a queue URL from an
event source ARN, and receiving messages for polling consumers.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import boto3
from botocore.exceptions import ClientError

from sqs_batch.exceptions import ConfigurationError
from sqs_batch.models.message import SQSMessage
from sqs_batch.models.outcome import DeleteBatchResponse
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)


def parse_queue_arn(arn: str) -> Tuple[str, str, str]:
    """
    Split an SQS queue ARN into its parts.

    Args:
        arn: ARN like arn:aws:sqs:us-east-1:123456789012:orders

    Returns:
        (region, account_id, queue_name)

    Raises:
        ConfigurationError: If the ARN is not an SQS queue ARN
    """
    parts = (arn or "").split(":")
    if len(parts) != 6 or parts[0] != "arn" or parts[2] != "sqs" or not all(parts[3:]):
        raise ConfigurationError(f"Not a valid SQS queue ARN: {arn!r}")
    return parts[3], parts[4], parts[5]


def build_delete_entries(messages: Sequence[SQSMessage]) -> List[Dict[str, str]]:
    """DeleteMessageBatch entries keyed by message id."""
    return [
        {'Id': message.message_id, 'ReceiptHandle': message.receipt_handle}
        for message in messages
    ]


class SQSClient:
    """
    SQS client for batch acknowledgement.

    Safe to share between threads; boto3 clients are thread-safe for
    concurrent calls once constructed.

    Example:
        >>> client = SQSClient(region_name="eu-west-1")
        >>> response = client.delete_message_batch(queue_url, messages)
        >>> response.failed
        []
    """

    def __init__(self, client: Optional[Any] = None, region_name: Optional[str] = None):
        """
        Initialize SQS client.

        Args:
            client: Pre-built boto3 SQS client (custom credentials/endpoint)
            region_name: Region used when no client is supplied
        """
        self.client = client if client is not None else boto3.client('sqs', region_name=region_name)

        logger.info(
            "SQS client initialized",
            region=self.client.meta.region_name,
            custom_client=client is not None
        )

    def delete_message_batch(
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
            ValueError: If parameters are invalid
        """
        if not queue_url or not isinstance(queue_url, str):
            raise ValueError("queue_url must be a non-empty string")
        if not messages:
            raise ValueError("messages must not be empty")

        try:
            response = self.client.delete_message_batch(
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

        result = DeleteBatchResponse.from_api(response)
        logger.debug(
            "Message batch deleted",
            queue_url=queue_url,
            successful=len(result.successful),
            failed=len(result.failed)
        )
        return result

    def resolve_queue_url(self, event_source_arn: str) -> str:
        """
        Look up the queue URL for an event source ARN.

        Args:
            event_source_arn: ARN of the source queue

        Returns:
            Queue URL

        Raises:
            ConfigurationError: If the ARN is malformed
            ClientError: If GetQueueUrl fails
        """
        _, account_id, queue_name = parse_queue_arn(event_source_arn)

        try:
            response = self.client.get_queue_url(
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

        queue_url = response['QueueUrl']
        logger.debug("Queue URL resolved", event_source_arn=event_source_arn, queue_url=queue_url)
        return queue_url

    def receive_messages(
        self,
        queue_url: str,
        max_messages: int = 10,
        wait_time_seconds: int = 0,
        visibility_timeout: Optional[int] = None
    ) -> List[SQSMessage]:
        """
        Receive up to max_messages messages from a queue.

        Args:
            queue_url: URL of the queue
            max_messages: 1..10 messages per call
            wait_time_seconds: Long polling wait time
            visibility_timeout: Optional visibility timeout override

        Returns:
            Received messages (possibly empty)

        Raises:
            ClientError: If ReceiveMessage fails
        """
        if not 1 <= max_messages <= 10:
            raise ValueError("max_messages must be between 1 and 10")

        params: Dict[str, Any] = {
            'QueueUrl': queue_url,
            'MaxNumberOfMessages': max_messages,
            'WaitTimeSeconds': wait_time_seconds,
            'AttributeNames': ['All'],
            'MessageAttributeNames': ['All'],
        }
        if visibility_timeout is not None:
            params['VisibilityTimeout'] = visibility_timeout

        try:
            response = self.client.receive_message(**params)
        except ClientError as e:
            logger.error(
                "Failed to receive messages",
                queue_url=queue_url,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        messages = [
            SQSMessage.from_receive_response(entry)
            for entry in response.get('Messages', [])
        ]
        logger.debug("Messages received", queue_url=queue_url, count=len(messages))
        return messages
