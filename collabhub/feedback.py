"""User-facing success/error strings ("toasts").

Purely observational: nothing in the core reads back what a sink received.
"""

import logging
from typing import Protocol


class ToastSink(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogSink:
    """Default sink: forwards toasts to the application log."""

    def __init__(self, name: str = "collabhub.toast"):
        self._logger = logging.getLogger(name)

    def success(self, message: str) -> None:
        self._logger.info(message)

    def error(self, message: str) -> None:
        self._logger.warning(message)


class ListSink:
    """Collects toasts in memory, e.g. to return them with a response."""

    def __init__(self):
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    @property
    def errors(self) -> list[str]:
        return [m for level, m in self.messages if level == "error"]
