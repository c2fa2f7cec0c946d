"""
Module: acknowledgement.py
Description: Deletes successfully handled messages in provider-sized groups.

Messages are split into contiguous groups of at most max_batch_size and
each group is deleted with one call. A group whose call fails stays on
the queue as a whole; entries SQS rejects individually stay on the
queue on their own. Nothing is sent for deletion twice.
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Awaitable, Callable, Dict, List, Sequence, Tuple

from sqs_batch.config.settings import SQS_MAX_DELETE_BATCH_SIZE
from sqs_batch.exceptions import AcknowledgementError, AcknowledgementRejection
from sqs_batch.models.message import SQSMessage
from sqs_batch.models.outcome import AcknowledgementResult, DeleteBatchResponse
from sqs_batch.utils.batch_helpers import chunk_list, group_count
from sqs_batch.utils.logger import get_logger

logger = get_logger(__name__)

DeleteBatchFn = Callable[[List[SQSMessage]], DeleteBatchResponse]
AsyncDeleteBatchFn = Callable[[List[SQSMessage]], Awaitable[DeleteBatchResponse]]
GroupOutcome = Tuple[List[str], Dict[str, BaseException]]


class AcknowledgementBatcher:
    """
    Groups messages and deletes each group once.

    Attributes:
        max_batch_size: Maximum entries per delete call (SQS allows 10)
        max_workers: Groups deleted concurrently; 1 runs sequentially
    """

    def __init__(self, max_batch_size: int = SQS_MAX_DELETE_BATCH_SIZE, max_workers: int = 1):
        if not 1 <= max_batch_size <= SQS_MAX_DELETE_BATCH_SIZE:
            raise ValueError(f"max_batch_size must be between 1 and {SQS_MAX_DELETE_BATCH_SIZE}")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.max_batch_size = max_batch_size
        self.max_workers = max_workers

    def acknowledge(self, messages: Sequence[SQSMessage], delete_batch: DeleteBatchFn) -> AcknowledgementResult:
        """
        Delete messages group by group.

        Args:
            messages: Messages to delete, in input order
            delete_batch: Performs one delete call for a group

        Returns:
            AcknowledgementResult listing deleted ids and the cause for
            every id left on the queue
        """
        groups = chunk_list(messages, self.max_batch_size)
        if not groups:
            return AcknowledgementResult()

        logger.debug(
            "Acknowledging messages",
            messages=len(messages),
            groups=group_count(len(messages), self.max_batch_size),
            max_batch_size=self.max_batch_size
        )
        if self.max_workers == 1 or len(groups) == 1:
            group_outcomes = [self._delete_group(group, delete_batch) for group in groups]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(groups))) as executor:
                # map() yields in submission order
                group_outcomes = list(executor.map(lambda g: self._delete_group(g, delete_batch), groups))

        return self._merge(group_outcomes)

    async def acknowledge_async(
        self,
        messages: Sequence[SQSMessage],
        delete_batch: AsyncDeleteBatchFn
    ) -> AcknowledgementResult:
        """Async variant of acknowledge(); groups are deleted concurrently."""
        groups = chunk_list(messages, self.max_batch_size)
        if not groups:
            return AcknowledgementResult()

        group_outcomes = await asyncio.gather(
            *(self._delete_group_async(group, delete_batch) for group in groups)
        )
        return self._merge(list(group_outcomes))

    def _delete_group(self, group: List[SQSMessage], delete_batch: DeleteBatchFn) -> GroupOutcome:
        try:
            response = delete_batch(group)
        except Exception as e:
            return self._group_failed(group, e)
        return self._classify(group, response)

    async def _delete_group_async(self, group: List[SQSMessage], delete_batch: AsyncDeleteBatchFn) -> GroupOutcome:
        try:
            response = await delete_batch(group)
        except Exception as e:
            return self._group_failed(group, e)
        return self._classify(group, response)

    @staticmethod
    def _group_failed(group: List[SQSMessage], error: Exception) -> GroupOutcome:
        message_ids = [message.message_id for message in group]
        ack_error = AcknowledgementError(message_ids, reason=f"{type(error).__name__}: {error}")
        ack_error.__cause__ = error

        logger.error(
            "Delete group failed, messages stay on queue",
            group_size=len(group),
            message_ids=message_ids,
            error=str(error),
            error_type=type(error).__name__
        )
        return [], {message_id: ack_error for message_id in message_ids}

    @staticmethod
    def _classify(group: List[SQSMessage], response: DeleteBatchResponse) -> GroupOutcome:
        rejected = {failure.id: failure for failure in response.failed}
        deleted = set(response.successful)

        acknowledged: List[str] = []
        unacknowledged: Dict[str, BaseException] = {}
        for message in group:
            message_id = message.message_id
            if message_id in rejected:
                failure = rejected[message_id]
                unacknowledged[message_id] = AcknowledgementRejection(
                    message_id,
                    code=failure.code,
                    message=failure.message,
                    sender_fault=failure.sender_fault
                )
                logger.warning(
                    "Delete entry rejected",
                    message_id=message_id,
                    error_code=failure.code,
                    error_message=failure.message,
                    sender_fault=failure.sender_fault
                )
            elif message_id in deleted:
                acknowledged.append(message_id)
            else:
                # Not confirmed either way, so assume it is still on the queue
                unacknowledged[message_id] = AcknowledgementRejection(
                    message_id,
                    code="MissingFromResponse",
                    message="entry absent from DeleteMessageBatch response"
                )
                logger.warning("Delete entry missing from response", message_id=message_id)

        logger.info(
            "Delete group sent",
            group_size=len(group),
            acknowledged=len(acknowledged),
            rejected=len(unacknowledged)
        )
        return acknowledged, unacknowledged

    @staticmethod
    def _merge(group_outcomes: List[GroupOutcome]) -> AcknowledgementResult:
        result = AcknowledgementResult(groups=len(group_outcomes))
        for acknowledged, unacknowledged in group_outcomes:
            result.acknowledged.extend(acknowledged)
            result.unacknowledged.update(unacknowledged)
        return result
