import logging
from typing import Any, Awaitable, Callable, Dict, Type

from listing_agent.core.cqrs.command import Command

logger = logging.getLogger(__name__)


class CommandBus:
    """
    Routes commands to their registered handler.
    Every command type has exactly one handler.
    """

    def __init__(self):
        self._handlers: Dict[Type[Command], Callable[[Command], Awaitable[Any]]] = {}

    def register(self, command_type: Type[Command], handler: Callable[[Command], Awaitable[Any]]):
        """Register the handler for a command type. Raises ValueError on duplicates."""
        if command_type in self._handlers:
            logger.error(f"Handler for command '{command_type.__name__}' is already registered.")
            raise ValueError(f"Handler for command '{command_type.__name__}' is already registered.")

        self._handlers[command_type] = handler
        logger.debug(f"Handler {handler.__name__} registered for {command_type.__name__}")

    def is_registered(self, command_type: Type[Command]) -> bool:
        return command_type in self._handlers

    async def execute(self, command: Command) -> Any:
        handler = self._handlers.get(type(command))
        if not handler:
            logger.error(f"No handler registered for command '{type(command).__name__}'")
            raise ValueError(f"No handler registered for command '{type(command).__name__}'")

        return await handler(command)
