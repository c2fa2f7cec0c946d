"""
Module: message.py
Description: SQS message model shared by all processing stages.

Defines the immutable SQSMessage record plus constructors for the two
shapes messages arrive in: Lambda SQS event records (camelCase keys)
and ReceiveMessage API entries (PascalCase keys).

Key Components:
- SQSMessage: One message of a batch
- parse_sqs_event(): Decode a Lambda SQS event into messages

Dependencies: pydantic, json, typing
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SQSMessage(BaseModel):
    """
    One message of a batch.

    Attributes:
        message_id: Identifier assigned by SQS, unique within a batch
        receipt_handle: Token required to delete the message
        body: Raw message payload
        attributes: System attributes (SentTimestamp, ApproximateReceiveCount, ...)
        message_attributes: User supplied message attributes
        md5_of_body: MD5 digest of the body as reported by SQS
        event_source_arn: ARN of the source queue (Lambda records only)
        aws_region: Region of the source queue (Lambda records only)
    """

    model_config = ConfigDict(frozen=True)

    message_id: str = Field(..., min_length=1, description="SQS message id")
    receipt_handle: str = Field(..., min_length=1, description="Receipt handle used for deletion")
    body: str = Field(default="", description="Raw message body")
    attributes: Dict[str, Any] = Field(default_factory=dict)
    message_attributes: Dict[str, Any] = Field(default_factory=dict)
    md5_of_body: Optional[str] = None
    event_source_arn: Optional[str] = None
    aws_region: Optional[str] = None

    @classmethod
    def from_lambda_record(cls, record: Dict[str, Any]) -> "SQSMessage":
        """
        Build a message from a Lambda SQS event record.

        Args:
            record: One entry of event['Records']

        Returns:
            SQSMessage instance
        """
        return cls(
            message_id=record['messageId'],
            receipt_handle=record['receiptHandle'],
            body=record.get('body') or "",
            attributes=record.get('attributes') or {},
            message_attributes=record.get('messageAttributes') or {},
            md5_of_body=record.get('md5OfBody'),
            event_source_arn=record.get('eventSourceARN'),
            aws_region=record.get('awsRegion'),
        )

    @classmethod
    def from_receive_response(
        cls,
        entry: Dict[str, Any],
        event_source_arn: Optional[str] = None
    ) -> "SQSMessage":
        """
        Build a message from a ReceiveMessage response entry.

        Args:
            entry: One entry of response['Messages']
            event_source_arn: Optional ARN of the queue the entry came from

        Returns:
            SQSMessage instance
        """
        return cls(
            message_id=entry['MessageId'],
            receipt_handle=entry['ReceiptHandle'],
            body=entry.get('Body') or "",
            attributes=entry.get('Attributes') or {},
            message_attributes=entry.get('MessageAttributes') or {},
            md5_of_body=entry.get('MD5OfBody'),
            event_source_arn=event_source_arn,
        )

    def json_body(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)


def parse_sqs_event(event: Dict[str, Any]) -> List[SQSMessage]:
    """
    Decode a Lambda SQS event into messages, keeping record order.

    Args:
        event: Lambda event with a 'Records' list

    Returns:
        List of SQSMessage, one per record

    Raises:
        ValueError: If the event has no 'Records' list
    """
    if not isinstance(event, dict) or not isinstance(event.get('Records'), list):
        raise ValueError("event must be a dict with a 'Records' list")

    return [SQSMessage.from_lambda_record(record) for record in event['Records']]
