"""
Module: async_processor.py
Description: asyncio flavour of the batch processor.

Runs one task per message (bounded by max_workers) and deletes groups
through aioboto3. Coroutine handlers are awaited; plain functions run
in a worker thread. If the surrounding task is cancelled, messages
still in flight become failures, whatever already succeeded is
deleted, and the cancellation is re-raised.
"""

import asyncio
import inspect
from typing import Any, Callable, List, Optional, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from sqs_batch.exceptions import ConfigurationError
from sqs_batch.models.message import SQSMessage
from sqs_batch.models.outcome import BatchResult, FailureOutcome, ProcessingOutcome, SuccessOutcome
from sqs_batch.processing.handler import MessageHandler, as_callable
from sqs_batch.processing.processor import BaseBatchProcessor
from sqs_batch.sqs_queue.async_sqs import AsyncSQSClient
from sqs_batch.sqs_queue.provider import get_async_sqs_client
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)


class AsyncBatchProcessor(BaseBatchProcessor):
    """
    Processes SQS batches with partial-failure semantics inside an event loop.

    Example:
        >>> processor = AsyncBatchProcessor(queue_url=url, max_workers=5)
        >>> await processor.process(messages, handle_order)
    """

    def __init__(self, client: Optional[AsyncSQSClient] = None, **kwargs):
        """
        Initialize async batch processor.

        Args:
            client: AsyncSQSClient; the shared provider client is used when omitted
            **kwargs: See BaseBatchProcessor
        """
        super().__init__(**kwargs)
        self._client = client

    @property
    def client(self) -> AsyncSQSClient:
        if self._client is None:
            self._client = get_async_sqs_client()
        return self._client

    async def process(
        self,
        messages: Sequence[SQSMessage],
        handler: MessageHandler,
        suppress_exception: Optional[bool] = None
    ) -> List[Any]:
        """
        Process a batch.

        Args:
            messages: Batch in delivery order
            handler: Function, coroutine function or SqsMessageHandler
            suppress_exception: Overrides the processor default

        Returns:
            Handler return values of deleted messages, in input order

        Raises:
            ConfigurationError: Before any handler call if setup is missing
            SQSBatchProcessingError: If any message failed and not suppressed
            asyncio.CancelledError: After acknowledging finished messages
        """
        process_one = as_callable(handler)
        messages = list(messages)
        if not messages:
            logger.debug("Empty batch, nothing to process")
            return []

        queue_url = await self.resolve_queue_url(messages)
        logger.info("Processing batch", batch_size=len(messages), queue_url=queue_url)

        outcomes: List[Optional[ProcessingOutcome]] = [None] * len(messages)
        semaphore = asyncio.Semaphore(self.max_workers)

        async def run(index: int, message: SQSMessage) -> None:
            async with semaphore:
                outcomes[index] = await invoke_handler_async(process_one, message)

        tasks = [asyncio.ensure_future(run(i, m)) for i, m in enumerate(messages)]
        try:
            await asyncio.gather(*tasks)
        except asyncio.CancelledError as cancelled:
            for task in tasks:
                task.cancel()
            partial = BatchResult(outcomes=tuple(
                outcome if outcome is not None else FailureOutcome(message=message, cause=cancelled)
                for outcome, message in zip(outcomes, messages)
            ))
            logger.warning(
                "Batch cancelled, acknowledging finished messages",
                batch_size=len(messages),
                succeeded=len(partial.successes)
            )
            await self.acknowledge(partial, queue_url)
            raise

        result = await self.acknowledge(BatchResult(outcomes=tuple(outcomes)), queue_url)
        return self._finish(result, suppress_exception)

    async def acknowledge(self, result: BatchResult, queue_url: str) -> BatchResult:
        """Delete what can be deleted and fold the outcome back into result."""
        to_delete = self._messages_to_delete(result)
        ack = await self.batcher.acknowledge_async(
            to_delete,
            lambda group: self.client.delete_message_batch(queue_url, group)
        )
        return self._apply_acknowledgement(result, ack)

    async def resolve_queue_url(self, messages: Sequence[SQSMessage]) -> str:
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
                self._queue_urls[arn] = await self.client.resolve_queue_url(arn)
            except (ClientError, BotoCoreError) as e:
                raise ConfigurationError(f"Could not resolve queue URL for {arn}: {e}") from e
        return self._queue_urls[arn]


async def invoke_handler_async(process_one: Callable[[SQSMessage], Any], message: SQSMessage) -> ProcessingOutcome:
    """Await or thread the handler once and turn the result into an outcome."""
    try:
        if inspect.iscoroutinefunction(process_one):
            value = await process_one(message)
        else:
            value = await asyncio.to_thread(process_one, message)
            if inspect.isawaitable(value):
                value = await value
    except asyncio.CancelledError as e:
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        # Raised by the handler itself, nobody cancelled this task
        logger.warning(
            "Message handler failed",
            message_id=message.message_id,
            error=str(e),
            error_type=type(e).__name__
        )
        return FailureOutcome(message=message, cause=e)
    except Exception as e:
        logger.warning(
            "Message handler failed",
            message_id=message.message_id,
            error=str(e),
            error_type=type(e).__name__
        )
        return FailureOutcome(message=message, cause=e)

    return SuccessOutcome(message=message, result=value)
