"""
Module: conftest.py
Description: Shared pytest fixtures for SQS batch processor tests.

Provides message factories, fake SQS clients that record delete calls,
and moto-backed AWS fixtures for end-to-end tests.
"""

import os
from types import SimpleNamespace

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError
from moto import mock_aws

from sqs_batch.config.settings import Settings
from sqs_batch.models.message import SQSMessage
from sqs_batch.models.outcome import DeleteBatchFailure, DeleteBatchResponse
from sqs_batch.sqs_queue import provider

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123456789012/test-queue"
QUEUE_ARN = "arn:aws:sqs:us-east-1:123456789012:test-queue"


class TestSettings(Settings):
    """Settings that ignore the environment and .env files."""

    __test__ = False

    @classmethod
    def settings_customise_sources(cls, settings_cls, init_settings, env_settings,
                                   dotenv_settings, file_secret_settings):
        return (init_settings,)


class FakeSQS:
    """
    Stand-in for a boto3 SQS client.

    Records every DeleteMessageBatch call. Calls whose index is in
    fail_calls raise a transport error; ids in reject_ids come back in
    the Failed list.
    """

    def __init__(self, fail_calls=(), reject_ids=()):
        self.meta = SimpleNamespace(region_name="us-east-1")
        self.fail_calls = set(fail_calls)
        self.reject_ids = set(reject_ids)
        self.delete_calls = []
        self.queue_url_lookups = []

    def delete_message_batch(self, QueueUrl, Entries):
        index = len(self.delete_calls)
        self.delete_calls.append([entry['Id'] for entry in Entries])
        if index in self.fail_calls:
            raise EndpointConnectionError(endpoint_url=QueueUrl)
        return {
            'Successful': [{'Id': e['Id']} for e in Entries if e['Id'] not in self.reject_ids],
            'Failed': [
                {
                    'Id': e['Id'],
                    'Code': 'ReceiptHandleIsInvalid',
                    'Message': 'The receipt handle has expired',
                    'SenderFault': True
                }
                for e in Entries if e['Id'] in self.reject_ids
            ]
        }

    def get_queue_url(self, QueueName, QueueOwnerAWSAccountId):
        self.queue_url_lookups.append((QueueName, QueueOwnerAWSAccountId))
        return {'QueueUrl': f"https://sqs.us-east-1.amazonaws.com/{QueueOwnerAWSAccountId}/{QueueName}"}

    @property
    def deleted_ids(self):
        return [message_id for call in self.delete_calls for message_id in call]


class FakeAsyncSQSClient:
    """Stand-in for AsyncSQSClient with the same failure knobs as FakeSQS."""

    def __init__(self, fail_calls=(), reject_ids=()):
        self.fail_calls = set(fail_calls)
        self.reject_ids = set(reject_ids)
        self.delete_calls = []

    async def delete_message_batch(self, queue_url, messages):
        index = len(self.delete_calls)
        self.delete_calls.append([m.message_id for m in messages])
        if index in self.fail_calls:
            raise EndpointConnectionError(endpoint_url=queue_url)
        return DeleteBatchResponse(
            successful=[m.message_id for m in messages if m.message_id not in self.reject_ids],
            failed=[
                DeleteBatchFailure(id=m.message_id, code='ReceiptHandleIsInvalid', sender_fault=True)
                for m in messages if m.message_id in self.reject_ids
            ]
        )

    async def resolve_queue_url(self, event_source_arn):
        return QUEUE_URL

    @property
    def deleted_ids(self):
        return [message_id for call in self.delete_calls for message_id in call]


def build_message(number, body=None, event_source_arn=QUEUE_ARN):
    return SQSMessage(
        message_id=f"msg-{number}",
        receipt_handle=f"handle-{number}",
        body=body if body is not None else f'{{"order_id": {number}}}',
        event_source_arn=event_source_arn
    )


def build_lambda_record(number, event_source_arn=QUEUE_ARN):
    return {
        "messageId": f"msg-{number}",
        "receiptHandle": f"handle-{number}",
        "body": f'{{"order_id": {number}}}',
        "attributes": {
            "ApproximateReceiveCount": "1",
            "SentTimestamp": "1545082649183",
        },
        "messageAttributes": {},
        "md5OfBody": "e4e68fb7bd0e697a0ae8f1bb342846b3",
        "eventSource": "aws:sqs",
        "eventSourceARN": event_source_arn,
        "awsRegion": "us-east-1"
    }


@pytest.fixture
def test_settings():
    """Settings with an explicit queue URL and no environment lookup."""
    return TestSettings(queue_url=QUEUE_URL, log_level="DEBUG")


@pytest.fixture
def make_messages():
    """Factory for batches of messages numbered from 1."""
    def _make(count):
        return [build_message(i) for i in range(1, count + 1)]
    return _make


@pytest.fixture
def sqs_event():
    """Factory for Lambda SQS events."""
    def _make(count, event_source_arn=QUEUE_ARN):
        return {"Records": [build_lambda_record(i, event_source_arn) for i in range(1, count + 1)]}
    return _make


@pytest.fixture
def fake_sqs():
    return FakeSQS()


@pytest.fixture(autouse=True)
def reset_provider():
    """Make every test start without a shared SQS client."""
    provider.reset_sqs_client()
    yield
    provider.reset_sqs_client()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mocked AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_sqs_queue(aws_credentials):
    """
    Create a moto-backed SQS queue.

    Yields (boto3 client, queue_url, queue_arn).
    """
    with mock_aws():
        client = boto3.client('sqs', region_name='us-east-1')
        queue_url = client.create_queue(QueueName='orders-queue')['QueueUrl']
        queue_arn = client.get_queue_attributes(
            QueueUrl=queue_url,
            AttributeNames=['QueueArn']
        )['Attributes']['QueueArn']
        yield client, queue_url, queue_arn
