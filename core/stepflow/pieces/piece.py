"""
Piece definitions - the code side of an action.

A Piece bundles related actions under a name and version. An ActionDefinition
declares its properties and the ``run`` entry point the engine calls with an
ActionContext. Actions with more than one declared output are "branchable":
their run returns a BranchOutput whose keys select which children execute.

Example:
    async def send(ctx):
        await ctx.tags.add("sent")
        return {"id": "msg_1"}

    piece = Piece(
        name="mail",
        version="0.1.0",
        actions={"send": ActionDefinition(name="send", run=send, props={"to": Property(required=True)})},
    )
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stepflow.flow.action_context import ActionContext

AUTHENTICATION_PROPERTY_NAME = "auth"

RunFunction = Callable[["ActionContext"], Awaitable[Any] | Any]


@dataclass
class Property:
    """An input property of an action.

    Processors transform the resolved value in order; validators return an
    error message (or None) for the processed value.
    """

    display_name: str = ""
    required: bool = False
    processors: list[Callable[[Any], Any]] = field(default_factory=list)
    validators: list[Callable[[Any], str | None]] = field(default_factory=list)


@dataclass
class ActionDefinition:
    name: str
    run: RunFunction
    display_name: str = ""
    props: dict[str, Property] = field(default_factory=dict)
    test: RunFunction | None = None
    outputs: list[str] | None = None

    @property
    def has_branches(self) -> bool:
        return self.outputs is not None and len(self.outputs) > 1


@dataclass
class Piece:
    name: str
    version: str
    actions: dict[str, ActionDefinition] = field(default_factory=dict)
    auth: Property | None = None
    display_name: str = ""

    def get_action(self, action_name: str) -> ActionDefinition | None:
        return self.actions.get(action_name)


@dataclass
class BranchOutput:
    """Return value of a branchable action: output key -> value, in order."""

    output: dict[str, Any]
    version: str = "v1"

    @classmethod
    def coerce(cls, value: Any) -> "BranchOutput | None":
        """Accept a BranchOutput or a mapping shaped like one."""
        if isinstance(value, BranchOutput):
            return value
        if isinstance(value, dict) and isinstance(value.get("output"), dict):
            return cls(output=value["output"], version=value.get("version") or "v1")
        return None
