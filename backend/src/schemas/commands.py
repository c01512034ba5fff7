"""
Input steps and mnemonic commands.

A mnemonic command is a shell command plus the keystrokes replayed, in order,
on the spawned process's stdin:

    {"command": "git commit", "inputs": [
        {"type": "text", "value": "Initial commit"},
        {"type": "enter"},
    ]}

The Pydantic models below are the typed form used in request and response
schemas. The predicates and `normalize_commands` operate on raw decoded JSON so
that request bodies can be checked and canonicalized before model parsing.
"""
from collections.abc import Mapping
from typing import Annotated, Any, Literal, get_args

from pydantic import BaseModel, Field

KeyName = Literal["up", "down", "left", "right", "space", "tab", "backspace"]
KEY_NAMES: frozenset[str] = frozenset(get_args(KeyName))

STEP_TYPES = ("text", "enter", "key")

MIN_COMMANDS_ERROR = "At least one command is required"


class TextStep(BaseModel):
    """Type literal text; no newline is implied."""

    type: Literal["text"]
    value: str


class EnterStep(BaseModel):
    """Press Enter."""

    type: Literal["enter"]


class KeyStep(BaseModel):
    """Press one named control key."""

    type: Literal["key"]
    key: KeyName


InputStep = Annotated[TextStep | EnterStep | KeyStep, Field(discriminator="type")]


class MnemonicCommand(BaseModel):
    """A shell command and its ordered input steps."""

    command: str
    inputs: list[InputStep] = []


def is_valid_input_step(step: Any) -> bool:
    """Return True if `step` is a well-formed InputStep mapping."""
    if not isinstance(step, Mapping):
        return False
    match step.get("type"):
        case "text":
            return isinstance(step.get("value"), str)
        case "enter":
            # Extra fields are ignored, not rejected
            return True
        case "key":
            key = step.get("key")
            return isinstance(key, str) and key in KEY_NAMES
        case _:
            return False


def is_valid_input_steps(steps: Any) -> bool:
    """Return True if `steps` is a list whose every element is a valid InputStep."""
    return isinstance(steps, list) and all(is_valid_input_step(s) for s in steps)


def canonical_step(step: Mapping[str, Any]) -> dict[str, Any]:
    """Keep only the fields the step's type requires. Assumes a valid step."""
    match step["type"]:
        case "text":
            return {"type": "text", "value": step["value"]}
        case "enter":
            return {"type": "enter"}
        case "key":
            return {"type": "key", "key": step["key"]}
        case other:
            raise ValueError(f"Unknown input step type: {other!r}")


def normalize_commands(commands: Any) -> list[dict[str, Any]]:
    """
    Validate a request's `commands` value and return its canonical form.

    - `commands` must be a list of objects, each with a string `command`.
    - `inputs`, when present, must be a list of valid input steps; it defaults
      to an empty list.
    - Commands are trimmed and blank ones dropped. At least one must remain.

    Raises:
        ValueError: With a message naming the offending element.
    """
    if not isinstance(commands, list):
        raise ValueError("Commands must be an array")

    normalized = []
    for index, cmd in enumerate(commands):
        if not isinstance(cmd, Mapping) or not isinstance(cmd.get("command"), str):
            raise ValueError(
                f"Invalid command at index {index}: expected an object with a "
                "'command' string",
            )
        inputs = cmd.get("inputs")
        if inputs is None:
            inputs = []
        if not is_valid_input_steps(inputs):
            raise ValueError(
                f"Invalid inputs for command at index {index}: inputs must be an "
                "array of input steps ({'type': 'text', 'value': ...}, "
                "{'type': 'enter'} or {'type': 'key', 'key': ...})",
            )
        command = cmd["command"].strip()
        if not command:
            continue
        normalized.append({
            "command": command,
            "inputs": [canonical_step(step) for step in inputs],
        })

    if not normalized:
        raise ValueError(MIN_COMMANDS_ERROR)
    return normalized
