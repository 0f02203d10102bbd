"""
Error taxonomy for step execution.

Every error raised while executing a step is caught at the piece executor
boundary and classified here. The classification decides two things: whether
the retry wrapper may re-run the step, and which failure reason ends up on
the verdict.
"""

import json
from typing import Any


class ExecutionError(Exception):
    """Base class for errors raised while executing a step."""

    retryable: bool = False

    def __init__(self, message: str, *, retryable: bool | None = None):
        super().__init__(message)
        self.message = message
        if retryable is not None:
            self.retryable = retryable


class ValidationError(ExecutionError):
    """Input failed the action's processors/validators.

    ``errors`` maps a property name to its list of messages.
    """

    def __init__(self, errors: dict[str, Any]):
        super().__init__(json.dumps(errors))
        self.errors = errors


class ResolutionError(ExecutionError):
    """The piece or action referenced by a step could not be found."""


class TransientError(ExecutionError):
    """I/O or collaborator failure that is worth retrying."""

    retryable = True


class RunError(ExecutionError):
    """An error escaped the action's own run logic."""

    retryable = True

    def __init__(self, message: str, *, cause: BaseException | None = None, retryable: bool | None = None):
        super().__init__(message, retryable=retryable)
        self.cause = cause


class EngineError(ExecutionError):
    """Internal engine failure (misconfigured flow, broken invariant)."""
