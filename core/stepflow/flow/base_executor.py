"""Executor contract shared by every action kind."""

from typing import Protocol

from stepflow.flow.constants import EngineConstants
from stepflow.flow.context import ExecutionContext
from stepflow.schemas.action import Action


class BaseExecutor(Protocol):
    """Executes one action and returns the next ExecutionContext.

    Implementations never raise for step failures; the verdict on the
    returned context tells the caller whether to continue, pause or halt.
    """

    async def handle(
        self,
        action: Action,
        execution_state: ExecutionContext,
        constants: EngineConstants,
    ) -> ExecutionContext: ...
