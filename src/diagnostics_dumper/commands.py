"""Command registry: the manual-trigger surface."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .exceptions import UnknownCommandError
from .source import Disposable

logger = logging.getLogger(__name__)

DUMP_NOW_COMMAND = "diagnosticsDumper.dumpNow"


class CommandRegistry:
    """Maps command ids to no-argument handlers.

    :meth:`execute` runs the handler synchronously and lets its exceptions
    reach the caller.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[[], Any]] = {}

    def register(self, command_id: str, handler: Callable[[], Any]) -> Disposable:
        if command_id in self._handlers:
            raise ValueError(f"Command already registered: {command_id}")
        self._handlers[command_id] = handler

        def unregister() -> None:
            if self._handlers.get(command_id) is handler:
                del self._handlers[command_id]

        return Disposable(unregister)

    def execute(self, command_id: str) -> Any:
        handler = self._handlers.get(command_id)
        if handler is None:
            raise UnknownCommandError(command_id)
        logger.debug("Executing command %s", command_id)
        return handler()

    def __contains__(self, command_id: str) -> bool:
        return command_id in self._handlers
