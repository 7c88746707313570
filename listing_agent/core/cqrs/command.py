from abc import ABC, abstractmethod
from typing import Generic, TypeVar

TCommand = TypeVar('TCommand', bound='Command')
# A command does not always return something
TResult = TypeVar('TResult')


class Command(ABC):
    """Base class for all commands. A command is a DTO describing a write."""
    pass


class CommandHandler(Generic[TCommand, TResult], ABC):
    """Handles one specific command type and (optionally) returns a result."""

    @abstractmethod
    async def handle(self, command: TCommand) -> TResult:
        raise NotImplementedError
