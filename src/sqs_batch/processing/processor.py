"""
Module: processor.py
Description: Partial-failure batch processor for SQS.

Handles every message of a batch, deletes the ones that succeeded and
reports the rest. Failed messages stay on the queue and come back
through redelivery, so handlers must be idempotent.

Key Components:
- BatchProcessor: Orchestrate, acknowledge, report
- batch_processor(): One-call entry point for a Lambda SQS event

Dependencies: boto3 (through SQSClient), structlog
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple, Type

from botocore.exceptions import BotoCoreError, ClientError

from sqs_batch.config.settings import Settings, settings as default_settings
from sqs_batch.exceptions import ConfigurationError
from sqs_batch.models.message import SQSMessage, parse_sqs_event
from sqs_batch.models.outcome import AcknowledgementResult, BatchResult, FailureOutcome, SuccessOutcome
from sqs_batch.processing.acknowledgement import AcknowledgementBatcher
from sqs_batch.processing.handler import MessageHandler, as_callable
from sqs_batch.processing.orchestrator import BatchOrchestrator
from sqs_batch.processing.reporter import OutcomeReporter
from sqs_batch.sqs_queue.provider import get_sqs_client
from sqs_batch.sqs_queue.sqs import SQSClient, parse_queue_arn
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)


class BaseBatchProcessor:
    """
    Configuration and bookkeeping shared by the sync and async processors.

    Attributes:
        queue_url: Explicit queue URL; falls back to settings, then to
            the event source ARN of the batch
        suppress_exception: Default suppression flag
        non_retryable_exceptions: Handler exception types that will
            never succeed on redelivery
        delete_non_retryable: Delete messages that failed with a
            non-retryable exception instead of leaving them on the queue
    """

    def __init__(
        self,
        queue_url: Optional[str] = None,
        suppress_exception: Optional[bool] = None,
        max_workers: Optional[int] = None,
        max_delete_batch_size: Optional[int] = None,
        non_retryable_exceptions: Tuple[Type[BaseException], ...] = (),
        delete_non_retryable: bool = False,
        config: Optional[Settings] = None
    ):
        config = config or default_settings

        self.queue_url = queue_url or config.queue_url
        self.suppress_exception = (
            config.suppress_exception if suppress_exception is None else suppress_exception
        )
        self.max_workers = max_workers or config.max_workers
        self.non_retryable_exceptions = tuple(non_retryable_exceptions)
        self.delete_non_retryable = delete_non_retryable

        if self.delete_non_retryable and not self.non_retryable_exceptions:
            raise ConfigurationError("delete_non_retryable requires non_retryable_exceptions")

        self.batcher = AcknowledgementBatcher(
            max_batch_size=max_delete_batch_size or config.max_delete_batch_size,
            max_workers=self.max_workers
        )
        self.reporter = OutcomeReporter()
        self._queue_urls: Dict[str, str] = {}

    def _event_source_arn(self, messages: Sequence[SQSMessage]) -> str:
        """ARN to resolve the queue URL from, validated before any handler runs."""
        arn = next((m.event_source_arn for m in messages if m.event_source_arn), None)
        if arn is None:
            raise ConfigurationError(
                "queue_url is not configured and the messages carry no event source ARN"
            )
        parse_queue_arn(arn)
        return arn

    def _is_non_retryable(self, cause: BaseException) -> bool:
        return bool(self.non_retryable_exceptions) and isinstance(cause, self.non_retryable_exceptions)

    def _messages_to_delete(self, result: BatchResult) -> List[SQSMessage]:
        """Successes plus discardable failures, in input order."""
        to_delete = []
        for outcome in result.outcomes:
            if isinstance(outcome, SuccessOutcome):
                to_delete.append(outcome.message)
            elif (
                self.delete_non_retryable
                and isinstance(outcome, FailureOutcome)
                and self._is_non_retryable(outcome.cause)
            ):
                to_delete.append(outcome.message)
        return to_delete

    @staticmethod
    def _apply_acknowledgement(result: BatchResult, ack: AcknowledgementResult) -> BatchResult:
        """Demote undeleted successes and flag deleted non-retryable failures."""
        success_ids = {outcome.message_id for outcome in result.successes}
        demoted = {
            message_id: cause
            for message_id, cause in ack.unacknowledged.items()
            if message_id in success_ids
        }
        discarded = [message_id for message_id in ack.acknowledged if message_id not in success_ids]

        if demoted:
            logger.warning(
                "Handled messages could not be deleted",
                message_ids=list(demoted)
            )
        if discarded:
            logger.warning(
                "Non-retryable messages deleted from queue",
                message_ids=discarded
            )
        return result.demote(demoted).mark_discarded(discarded)

    def _finish(self, result: BatchResult, suppress_exception: Optional[bool]) -> List[Any]:
        suppress = self.suppress_exception if suppress_exception is None else suppress_exception
        logger.info(
            "Batch processed",
            batch_size=len(result),
            succeeded=len(result.successes),
            failed=len(result.failures),
            suppress_exception=suppress
        )
        return self.reporter.report(result, suppress)


class BatchProcessor(BaseBatchProcessor):
    """
    Processes SQS batches with partial-failure semantics.

    Successful messages are deleted from the queue in groups of up to
    ten. If anything failed, SQSBatchProcessingError is raised with the
    successes and failures attached, unless suppression is on, in which
    case the success values are returned and the failures logged.

    Example:
        >>> processor = BatchProcessor(queue_url=url)
        >>> processor.process(messages, lambda message: message.json_body()["id"])
        ['order-1', 'order-2']
    """

    def __init__(self, client: Optional[Any] = None, **kwargs):
        """
        Initialize batch processor.

        Args:
            client: SQSClient or boto3 SQS client; the shared provider
                client is used when omitted
            **kwargs: See BaseBatchProcessor
        """
        super().__init__(**kwargs)
        if client is not None and not isinstance(client, SQSClient):
            client = SQSClient(client=client)
        self._client = client
        self.orchestrator = BatchOrchestrator(max_workers=self.max_workers)

    @property
    def client(self) -> SQSClient:
        if self._client is None:
            self._client = get_sqs_client()
        return self._client

    def process(
        self,
        messages: Sequence[SQSMessage],
        handler: MessageHandler,
        suppress_exception: Optional[bool] = None
    ) -> List[Any]:
        """
        Process a batch.

        Args:
            messages: Batch in delivery order
            handler: Function or SqsMessageHandler for one message
            suppress_exception: Overrides the processor default

        Returns:
            Handler return values of deleted messages, in input order

        Raises:
            ConfigurationError: Before any handler call if setup is missing
            SQSBatchProcessingError: If any message failed and not suppressed
        """
        process_one = as_callable(handler)
        messages = list(messages)
        if not messages:
            logger.debug("Empty batch, nothing to process")
            return []

        queue_url = self.resolve_queue_url(messages)
        logger.info("Processing batch", batch_size=len(messages), queue_url=queue_url)

        result = self.orchestrator.process(
            messages,
            process_one,
            on_interrupted=lambda partial: self._acknowledge_interrupted(partial, queue_url)
        )
        result = self.acknowledge(result, queue_url)
        return self._finish(result, suppress_exception)

    def _acknowledge_interrupted(self, partial: BatchResult, queue_url: str) -> None:
        """Delete messages that finished before the batch was interrupted."""
        logger.warning(
            "Batch interrupted, acknowledging finished messages",
            batch_size=len(partial),
            succeeded=len(partial.successes)
        )
        self.acknowledge(partial, queue_url)

    def acknowledge(self, result: BatchResult, queue_url: str) -> BatchResult:
        """
        Delete what can be deleted and fold the outcome back into result.

        Args:
            result: Handler-stage result
            queue_url: Queue the batch came from

        Returns:
            Result with undeletable successes demoted to failures
        """
        to_delete = self._messages_to_delete(result)
        ack = self.batcher.acknowledge(
            to_delete,
            lambda group: self.client.delete_message_batch(queue_url, group)
        )
        return self._apply_acknowledgement(result, ack)

    def resolve_queue_url(self, messages: Sequence[SQSMessage]) -> str:
        """
        Queue URL for the batch.

        Raises:
            ConfigurationError: If no URL is configured and none can be resolved
        """
        if self.queue_url:
            return self.queue_url

        arn = self._event_source_arn(messages)
        if arn not in self._queue_urls:
            try:
                self._queue_urls[arn] = self.client.resolve_queue_url(arn)
            except (ClientError, BotoCoreError) as e:
                raise ConfigurationError(f"Could not resolve queue URL for {arn}: {e}") from e
        return self._queue_urls[arn]


def batch_processor(
    event: Dict[str, Any],
    handler: MessageHandler,
    suppress_exception: bool = False,
    client: Optional[Any] = None,
    **kwargs
) -> List[Any]:
    """
    Process a Lambda SQS event in one call.

    Args:
        event: Lambda SQS event
        handler: Function or SqsMessageHandler for one message
        suppress_exception: Return normally even when messages failed
        client: Optional SQSClient or boto3 SQS client
        **kwargs: Further BatchProcessor options

    Returns:
        Handler return values of deleted messages, in record order
    """
    processor = BatchProcessor(client=client, suppress_exception=suppress_exception, **kwargs)
    return processor.process(parse_sqs_event(event), handler)
