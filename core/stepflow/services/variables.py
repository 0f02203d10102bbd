"""
Variable Service - resolves templated action input.

Templates reference earlier steps by name: ``{{step_1.id}}`` reads the ``id``
key of step_1's output, ``{{step_1.items.0}}`` indexes into a list. A value
that is exactly one template keeps the referenced value's type; templates
embedded in a longer string are interpolated as text.

Alongside the resolved input the service returns a censored copy that is safe
to store on the step output (auth values are redacted).
"""

import re
from typing import TYPE_CHECKING, Any

from stepflow.pieces.piece import AUTHENTICATION_PROPERTY_NAME, Property

if TYPE_CHECKING:
    from stepflow.flow.context import ExecutionContext

TEMPLATE_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")
REDACTED = "**REDACTED**"

REQUIRED_MESSAGE = "Expected a value but received none"


def _lookup(state: dict[str, Any], path: str) -> Any:
    current: Any = state
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list | tuple) and part.isdigit():
            index = int(part)
            current = current[index] if index < len(current) else None
        else:
            return None
        if current is None:
            return None
    return current


class VariableService:
    """Default variable resolution and input processing."""

    def __init__(self, censored_keys: frozenset[str] = frozenset({AUTHENTICATION_PROPERTY_NAME})):
        self._censored_keys = censored_keys

    def _resolve_value(self, value: Any, state: dict[str, Any]) -> Any:
        if isinstance(value, str):
            whole = TEMPLATE_PATTERN.fullmatch(value.strip())
            if whole:
                return _lookup(state, whole.group(1))

            def _interpolate(match: re.Match) -> str:
                resolved = _lookup(state, match.group(1))
                return "" if resolved is None else str(resolved)

            return TEMPLATE_PATTERN.sub(_interpolate, value)
        if isinstance(value, dict):
            return {k: self._resolve_value(v, state) for k, v in value.items()}
        if isinstance(value, list):
            return [self._resolve_value(v, state) for v in value]
        return value

    async def resolve(
        self,
        unresolved_input: dict[str, Any],
        execution_state: "ExecutionContext",
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return ``(resolved_input, censored_input)``."""
        state = execution_state.current_state()
        resolved = {k: self._resolve_value(v, state) for k, v in unresolved_input.items()}
        censored = {
            k: (REDACTED if k in self._censored_keys and v is not None else v)
            for k, v in resolved.items()
        }
        return resolved, censored

    async def apply_processors_and_validators(
        self,
        resolved_input: dict[str, Any],
        props: dict[str, Property],
        auth: Property | None,
    ) -> tuple[dict[str, Any], dict[str, list[str]]]:
        """Return ``(processed_input, errors)``; errors are keyed by property name."""
        all_props = dict(props)
        if auth is not None:
            all_props[AUTHENTICATION_PROPERTY_NAME] = auth

        processed = dict(resolved_input)
        errors: dict[str, list[str]] = {}

        for name, prop in all_props.items():
            value = processed.get(name)
            if value is None or value == "":
                if prop.required:
                    errors[name] = [REQUIRED_MESSAGE]
                continue

            field_errors: list[str] = []
            for processor in prop.processors:
                try:
                    value = processor(value)
                except (TypeError, ValueError) as e:
                    field_errors.append(str(e))
                    break
            if not field_errors:
                for validator in prop.validators:
                    message = validator(value)
                    if message:
                        field_errors.append(message)

            if field_errors:
                errors[name] = field_errors
            else:
                processed[name] = value

        return processed, errors
