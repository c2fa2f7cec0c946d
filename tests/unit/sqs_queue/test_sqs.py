"""
Module: test_sqs.py
Description: Unit tests for the SQS client wrapper and client provider.

Uses botocore's Stubber to pin the exact DeleteMessageBatch,
GetQueueUrl and ReceiveMessage request and response shapes.
"""

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import Stubber

from sqs_batch.exceptions import ConfigurationError
from sqs_batch.sqs_queue import provider
from sqs_batch.sqs_queue.async_sqs import AsyncSQSClient
from sqs_batch.sqs_queue.sqs import SQSClient, parse_queue_arn
from conftest import QUEUE_ARN, QUEUE_URL, FakeSQS, build_message


@pytest.fixture
def stubbed(aws_credentials):
    """SQSClient around a stubbed boto3 client."""
    raw = boto3.client('sqs', region_name='us-east-1')
    with Stubber(raw) as stubber:
        yield SQSClient(client=raw), stubber
        stubber.assert_no_pending_responses()


class FailingSession:
    """aioboto3 session stand-in whose clients reject every call with error_code."""

    def __init__(self, error_code):
        self.error_code = error_code
        self.calls = []

    def client(self, service_name, region_name=None):
        return FailingClientContext(self)


class FailingClientContext:
    def __init__(self, session):
        self.session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def get_queue_url(self, **kwargs):
        self.session.calls.append(('get_queue_url', kwargs))
        raise ClientError(
            {'Error': {'Code': self.session.error_code, 'Message': 'denied'}},
            'GetQueueUrl'
        )


class TestParseQueueArn:

    def test_valid_arn(self):
        assert parse_queue_arn(QUEUE_ARN) == ("us-east-1", "123456789012", "test-queue")

    def test_fifo_queue_arn(self):
        assert parse_queue_arn("arn:aws:sqs:eu-west-1:111122223333:orders.fifo")[2] == "orders.fifo"

    @pytest.mark.parametrize("arn", [None, "", "arn:aws:sns:us-east-1:123456789012:topic", "arn:aws:sqs:us-east-1::queue"])
    def test_invalid_arn(self, arn):
        with pytest.raises(ConfigurationError):
            parse_queue_arn(arn)


class TestSQSClient:

    def test_delete_message_batch_request_shape(self, stubbed):
        client, stubber = stubbed
        stubber.add_response(
            'delete_message_batch',
            {
                'Successful': [{'Id': 'msg-1'}],
                'Failed': [{
                    'Id': 'msg-2',
                    'SenderFault': True,
                    'Code': 'ReceiptHandleIsInvalid',
                    'Message': 'The input receipt handle is invalid.'
                }]
            },
            {
                'QueueUrl': QUEUE_URL,
                'Entries': [
                    {'Id': 'msg-1', 'ReceiptHandle': 'handle-1'},
                    {'Id': 'msg-2', 'ReceiptHandle': 'handle-2'},
                ]
            }
        )

        response = client.delete_message_batch(QUEUE_URL, [build_message(1), build_message(2)])

        assert response.successful == ['msg-1']
        assert response.failed[0].id == 'msg-2'
        assert response.failed[0].code == 'ReceiptHandleIsInvalid'
        assert response.failed[0].sender_fault is True

    def test_delete_message_batch_client_error(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error(
            'delete_message_batch',
            service_error_code='AWS.SimpleQueueService.NonExistentQueue',
            service_message='The specified queue does not exist.',
            http_status_code=400
        )

        with pytest.raises(ClientError):
            client.delete_message_batch(QUEUE_URL, [build_message(1)])

    def test_delete_message_batch_validates_input(self, stubbed):
        client, _ = stubbed

        with pytest.raises(ValueError, match="queue_url"):
            client.delete_message_batch("", [build_message(1)])
        with pytest.raises(ValueError, match="messages"):
            client.delete_message_batch(QUEUE_URL, [])

    def test_resolve_queue_url(self, stubbed):
        client, stubber = stubbed
        stubber.add_response(
            'get_queue_url',
            {'QueueUrl': QUEUE_URL},
            {'QueueName': 'test-queue', 'QueueOwnerAWSAccountId': '123456789012'}
        )

        assert client.resolve_queue_url(QUEUE_ARN) == QUEUE_URL

    def test_resolve_queue_url_error(self, stubbed):
        client, stubber = stubbed
        stubber.add_client_error('get_queue_url', service_error_code='AccessDenied')

        with pytest.raises(ClientError):
            client.resolve_queue_url(QUEUE_ARN)

    def test_receive_messages(self, stubbed):
        client, stubber = stubbed
        stubber.add_response(
            'receive_message',
            {'Messages': [{'MessageId': 'm-1', 'ReceiptHandle': 'rh-1', 'Body': 'payload'}]},
            {
                'QueueUrl': QUEUE_URL,
                'MaxNumberOfMessages': 10,
                'WaitTimeSeconds': 0,
                'AttributeNames': ['All'],
                'MessageAttributeNames': ['All'],
                'VisibilityTimeout': 30
            }
        )

        messages = client.receive_messages(QUEUE_URL, visibility_timeout=30)

        assert [(m.message_id, m.receipt_handle, m.body) for m in messages] == [('m-1', 'rh-1', 'payload')]

    def test_receive_messages_limits(self, stubbed):
        client, _ = stubbed

        with pytest.raises(ValueError, match="between 1 and 10"):
            client.receive_messages(QUEUE_URL, max_messages=11)


class TestAsyncSQSClient:

    @pytest.mark.asyncio
    async def test_resolve_queue_url_error_propagates(self):
        session = FailingSession('AWS.SimpleQueueService.NonExistentQueue')
        client = AsyncSQSClient(session=session, region_name='us-east-1')

        with pytest.raises(ClientError) as exc_info:
            await client.resolve_queue_url(QUEUE_ARN)

        assert exc_info.value.response['Error']['Code'] == 'AWS.SimpleQueueService.NonExistentQueue'
        assert session.calls == [
            ('get_queue_url', {'QueueName': 'test-queue', 'QueueOwnerAWSAccountId': '123456789012'})
        ]


class TestClientProvider:

    def test_default_client_is_lazy_and_shared(self, aws_credentials):
        first = provider.get_sqs_client()

        assert isinstance(first, SQSClient)
        assert provider.get_sqs_client() is first

    def test_default_client_uses_configured_region(self, aws_credentials, monkeypatch):
        monkeypatch.setattr(provider.settings, 'aws_region', 'eu-central-1')

        assert provider.get_sqs_client().client.meta.region_name == 'eu-central-1'

    def test_override_wraps_boto3_client(self):
        fake = FakeSQS()
        provider.override_sqs_client(fake)

        client = provider.get_sqs_client()
        assert isinstance(client, SQSClient)
        assert client.client is fake

    def test_override_keeps_sqs_client(self):
        wrapped = SQSClient(client=FakeSQS())
        provider.override_sqs_client(wrapped)

        assert provider.get_sqs_client() is wrapped

    def test_reset(self):
        provider.override_sqs_client(FakeSQS())
        provider.reset_sqs_client()

        assert provider._client is None

    def test_async_client_default_and_override(self, aws_credentials):
        default = provider.get_async_sqs_client()
        assert isinstance(default, AsyncSQSClient)
        assert provider.get_async_sqs_client() is default

        custom = AsyncSQSClient(region_name='ap-southeast-2')
        provider.override_async_sqs_client(custom)
        assert provider.get_async_sqs_client() is custom
