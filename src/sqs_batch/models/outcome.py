"""
Module: outcome.py
Description: Result models produced by the processing stages.

Key Components:
- FailureStage: Where a message failed (handler or acknowledgement)
- SuccessOutcome / FailureOutcome: Exactly one per input message
- BatchResult: Ordered outcomes of one invocation
- DeleteBatchResponse: Parsed DeleteMessageBatch response
- AcknowledgementResult: What the acknowledgement stage achieved

Dependencies: pydantic, enum, typing
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from sqs_batch.models.message import SQSMessage


class FailureStage(str, Enum):
    """Processing stage a failure was recorded in."""

    HANDLER = "handler"
    ACKNOWLEDGEMENT = "acknowledgement"


class SuccessOutcome(BaseModel):
    """The handler returned a value for the message."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: SQSMessage
    result: Any = None

    @property
    def message_id(self) -> str:
        return self.message.message_id

    @property
    def succeeded(self) -> bool:
        return True


class FailureOutcome(BaseModel):
    """
    The message failed and, unless discarded, stays on the queue.

    Attributes:
        message: The failed message
        cause: Handler exception or acknowledgement error
        stage: Stage the failure was recorded in
        discarded: True when the message was deleted as non-retryable
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    message: SQSMessage
    cause: BaseException
    stage: FailureStage = FailureStage.HANDLER
    discarded: bool = False

    @property
    def message_id(self) -> str:
        return self.message.message_id

    @property
    def succeeded(self) -> bool:
        return False


ProcessingOutcome = Union[SuccessOutcome, FailureOutcome]


class BatchResult(BaseModel):
    """
    Ordered outcomes of one batch invocation.

    Outcomes are kept in input order whatever the execution strategy,
    so every derived view (success values, failure pairs) is ordered too.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    outcomes: Tuple[ProcessingOutcome, ...] = Field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def successes(self) -> List[SuccessOutcome]:
        return [o for o in self.outcomes if isinstance(o, SuccessOutcome)]

    @property
    def failures(self) -> List[FailureOutcome]:
        return [o for o in self.outcomes if isinstance(o, FailureOutcome)]

    @property
    def success_values(self) -> List[Any]:
        return [o.result for o in self.successes]

    @property
    def failure_causes(self) -> List[Tuple[str, BaseException]]:
        return [(o.message_id, o.cause) for o in self.failures]

    @property
    def has_failures(self) -> bool:
        return any(isinstance(o, FailureOutcome) for o in self.outcomes)

    def demote(self, causes: Mapping[str, BaseException]) -> "BatchResult":
        """
        Re-classify successes whose deletion failed.

        Args:
            causes: Acknowledgement error per message id

        Returns:
            New BatchResult where each listed success became an
            acknowledgement-stage failure in the same position
        """
        if not causes:
            return self

        outcomes = []
        for outcome in self.outcomes:
            if isinstance(outcome, SuccessOutcome) and outcome.message_id in causes:
                outcome = FailureOutcome(
                    message=outcome.message,
                    cause=causes[outcome.message_id],
                    stage=FailureStage.ACKNOWLEDGEMENT
                )
            outcomes.append(outcome)
        return BatchResult(outcomes=tuple(outcomes))

    def mark_discarded(self, message_ids: List[str]) -> "BatchResult":
        """Flag handler failures whose messages were deleted as non-retryable."""
        if not message_ids:
            return self

        discarded = set(message_ids)
        outcomes = []
        for outcome in self.outcomes:
            if isinstance(outcome, FailureOutcome) and outcome.message_id in discarded:
                outcome = outcome.model_copy(update={'discarded': True})
            outcomes.append(outcome)
        return BatchResult(outcomes=tuple(outcomes))


class DeleteBatchFailure(BaseModel):
    """One rejected entry of a DeleteMessageBatch response."""

    id: str
    code: str
    message: Optional[str] = None
    sender_fault: bool = False


class DeleteBatchResponse(BaseModel):
    """
    Parsed DeleteMessageBatch response.

    Entry ids are the message ids of the group, so each list maps
    straight back to messages.
    """

    successful: List[str] = Field(default_factory=list)
    failed: List[DeleteBatchFailure] = Field(default_factory=list)

    @classmethod
    def from_api(cls, response: Dict[str, Any]) -> "DeleteBatchResponse":
        """
        Build from the raw boto3 response.

        Args:
            response: Dict with optional 'Successful' and 'Failed' lists
        """
        return cls(
            successful=[entry['Id'] for entry in response.get('Successful') or []],
            failed=[
                DeleteBatchFailure(
                    id=entry['Id'],
                    code=entry.get('Code', 'Unknown'),
                    message=entry.get('Message'),
                    sender_fault=bool(entry.get('SenderFault', False))
                )
                for entry in response.get('Failed') or []
            ]
        )


class AcknowledgementResult(BaseModel):
    """
    What the acknowledgement stage achieved.

    Attributes:
        acknowledged: Deleted message ids, in input order
        unacknowledged: Cause per message id that is still on the queue
        groups: Number of delete calls issued
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    acknowledged: List[str] = Field(default_factory=list)
    unacknowledged: Dict[str, BaseException] = Field(default_factory=dict)
    groups: int = 0
