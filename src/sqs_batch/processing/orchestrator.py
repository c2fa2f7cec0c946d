"""
Module: orchestrator.py
Description: Runs the message handler over a batch.

Each message gets exactly one handler call and exactly one outcome.
A failing message never stops the rest of the batch, and outcomes are
returned in input order even when messages run on a thread pool.
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, List, Optional, Sequence

from sqs_batch.models.message import SQSMessage
from sqs_batch.models.outcome import BatchResult, FailureOutcome, ProcessingOutcome, SuccessOutcome
from sqs_batch.processing.handler import MessageHandler, as_callable
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)


class BatchOrchestrator:
    """
    Invokes a handler once per message and collects the outcomes.

    Attributes:
        max_workers: Messages handled concurrently; 1 runs sequentially
    """

    def __init__(self, max_workers: int = 1):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_workers = max_workers

    def process(
        self,
        messages: Sequence[SQSMessage],
        handler: MessageHandler,
        on_interrupted: Optional[Callable[[BatchResult], None]] = None
    ) -> BatchResult:
        """
        Handle every message of the batch.

        If a handler call raises a BaseException (an interrupt or a
        runtime abandon signal), messages that did not finish become
        failures carrying that exception, on_interrupted receives the
        partial result and the exception is re-raised.

        Args:
            messages: Batch in delivery order (may be empty)
            handler: Function or SqsMessageHandler for one message
            on_interrupted: Called with the partial result before re-raising

        Returns:
            BatchResult with one outcome per message, in input order
        """
        process_one = as_callable(handler)
        messages = list(messages)
        if not messages:
            return BatchResult()

        outcomes: List[Optional[ProcessingOutcome]] = [None] * len(messages)
        try:
            if self.max_workers == 1 or len(messages) == 1:
                for index, message in enumerate(messages):
                    outcomes[index] = invoke_handler(process_one, message)
            else:
                self._process_concurrently(messages, process_one, outcomes)
        except BaseException as interrupt:
            partial = BatchResult(outcomes=tuple(
                outcome if outcome is not None else FailureOutcome(message=message, cause=interrupt)
                for outcome, message in zip(outcomes, messages)
            ))
            logger.warning(
                "Batch interrupted",
                batch_size=len(messages),
                succeeded=len(partial.successes),
                error_type=type(interrupt).__name__
            )
            if on_interrupted is not None:
                on_interrupted(partial)
            raise

        result = BatchResult(outcomes=tuple(outcomes))
        logger.info(
            "Batch handled",
            batch_size=len(messages),
            succeeded=len(result.successes),
            failed=len(result.failures)
        )
        return result

    def _process_concurrently(
        self,
        messages: List[SQSMessage],
        process_one: Callable[[SQSMessage], object],
        outcomes: List[Optional[ProcessingOutcome]]
    ) -> None:
        """Fill outcomes by index; on interruption keep whatever already finished."""
        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(messages)))
        futures = {
            executor.submit(invoke_handler, process_one, message): index
            for index, message in enumerate(messages)
        }
        try:
            for future in as_completed(futures):
                # invoke_handler only lets non-Exception errors escape
                outcomes[futures[future]] = future.result()
        except BaseException:
            executor.shutdown(wait=False, cancel_futures=True)
            for future, index in futures.items():
                if (
                    outcomes[index] is None
                    and future.done()
                    and not future.cancelled()
                    and future.exception() is None
                ):
                    outcomes[index] = future.result()
            raise
        executor.shutdown()


def invoke_handler(process_one: Callable[[SQSMessage], object], message: SQSMessage) -> ProcessingOutcome:
    """Call the handler once and turn its return value or exception into an outcome."""
    try:
        value = process_one(message)
    except Exception as e:
        logger.warning(
            "Message handler failed",
            message_id=message.message_id,
            error=str(e),
            error_type=type(e).__name__
        )
        return FailureOutcome(message=message, cause=e)

    return SuccessOutcome(message=message, result=value)
