"""Failures raised by the tool layer."""

from __future__ import annotations


class ToolExecutionError(RuntimeError):
    """A client call failed; the message names the operation and the cause."""

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"Failed to {operation}: {cause}")
        self.operation = operation
        self.cause = cause
