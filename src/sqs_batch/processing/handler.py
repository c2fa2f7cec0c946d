"""
Module: handler.py
Description: Message handler contract.

A handler processes one message and returns a value or raises. It can
be a plain function or any object with a process(message) method.
"""

from typing import Any, Callable, Protocol, Union, runtime_checkable

from sqs_batch.exceptions import ConfigurationError
from sqs_batch.models.message import SQSMessage


@runtime_checkable
class SqsMessageHandler(Protocol):
    """Object form of a message handler."""

    def process(self, message: SQSMessage) -> Any:
        ...


MessageHandler = Union[Callable[[SQSMessage], Any], SqsMessageHandler]


def as_callable(handler: MessageHandler) -> Callable[[SQSMessage], Any]:
    """
    Normalize a handler to a single-argument callable.

    Raises:
        ConfigurationError: If handler is neither callable nor a SqsMessageHandler
    """
    if isinstance(handler, SqsMessageHandler):
        return handler.process
    if callable(handler):
        return handler
    raise ConfigurationError(
        f"handler must be callable or implement process(message), got {type(handler).__name__}"
    )
