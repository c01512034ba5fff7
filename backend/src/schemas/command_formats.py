"""
Conversions from historical `commands` storage shapes to the current one.

Stored mnemonics went through three shapes:

    A. ["git add .", "git push"]
    B. [{"command": "git commit", "inputs": ["message"]}]
    C. [{"command": "git commit", "inputs": [{"type": "text", "value": "message"}]}]

Each known shape is a (predicate, converter) pair in COMMAND_FORMATS; the first
matching predicate wins. Add new shapes there, ahead of the current format.

Shape A is recognised from the first element. Shape B is recognised if any
element has a string input, not just the first, so partly migrated rows are
still converted.
"""
from collections.abc import Callable, Mapping, Sequence
from typing import Any

PLACEHOLDER_COMMANDS: list[dict[str, Any]] = [{"command": "", "inputs": []}]


def placeholder_commands() -> list[dict[str, Any]]:
    """A fresh copy of PLACEHOLDER_COMMANDS that callers may mutate."""
    return [{"command": "", "inputs": []}]


Predicate = Callable[[Sequence[Any]], bool]
Converter = Callable[[Sequence[Any]], list[Any]]


def _is_string_list(commands: Sequence[Any]) -> bool:
    return isinstance(commands[0], str)


def _from_string_list(commands: Sequence[Any]) -> list[dict[str, Any]]:
    return [{"command": cmd, "inputs": []} for cmd in commands]


def _has_string_inputs(commands: Sequence[Any]) -> bool:
    return any(
        isinstance(cmd, Mapping)
        and isinstance(cmd.get("inputs"), list)
        and any(isinstance(step, str) for step in cmd["inputs"])
        for cmd in commands
    )


def _text_step(step: Any) -> Any:
    # Freeform strings become literal text; no Enter is inserted after them
    if isinstance(step, str):
        return {"type": "text", "value": step}
    return step


def _from_string_inputs(commands: Sequence[Any]) -> list[Any]:
    migrated = []
    for cmd in commands:
        if isinstance(cmd, Mapping) and isinstance(cmd.get("inputs"), list):
            cmd = {**cmd, "inputs": [_text_step(step) for step in cmd["inputs"]]}
        migrated.append(cmd)
    return migrated


def _is_current(commands: Sequence[Any]) -> bool:  # noqa: ARG001
    return True


def _unchanged(commands: Sequence[Any]) -> list[Any]:
    return list(commands)


COMMAND_FORMATS: list[tuple[Predicate, Converter]] = [
    (_is_string_list, _from_string_list),
    (_has_string_inputs, _from_string_inputs),
    (_is_current, _unchanged),
]


def migrate_commands(commands: Sequence[Any] | None) -> list[Any]:
    """
    Convert a stored `commands` value to the current step-based shape.

    Current-shape values come back equal to the input, so this is safe to apply
    to every read. Empty or missing values yield a single blank placeholder
    command so editors always have a row to show.
    """
    if not commands:
        return placeholder_commands()
    for matches, convert in COMMAND_FORMATS:
        if matches(commands):
            return convert(commands)
    return list(commands)


def migrated_for_storage(commands: Sequence[Any] | None) -> list[Any] | None:
    """
    The value to write back for a stored `commands`, or None to leave it alone.

    Only legacy shapes are rewritten. Empty rows stay empty since the
    placeholder is for display only.
    """
    if not commands:
        return None
    migrated = migrate_commands(commands)
    return None if migrated == list(commands) else migrated
