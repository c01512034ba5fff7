"""Import and export of mnemonic commands as standalone JSON documents."""
import json
from typing import Any

from schemas.commands import canonical_step, is_valid_input_steps
from schemas.command_formats import migrate_commands
from services.exceptions import ValidationFailedError

EXAMPLE_IMPORT: dict[str, Any] = {
    "commands": [
        {"command": "git add .", "inputs": []},
        {
            "command": "git commit",
            "inputs": [
                {"type": "text", "value": "Initial commit"},
                {"type": "enter"},
            ],
        },
    ],
}


def _is_valid_import_command(cmd: Any) -> bool:
    # Unlike request bodies, an export always lists `inputs`
    return (
        isinstance(cmd, dict)
        and isinstance(cmd.get("command"), str)
        and bool(cmd["command"].strip())
        and is_valid_input_steps(cmd.get("inputs"))
    )


def parse_import_json(text: str) -> list[dict[str, Any]]:
    """
    Parse an exported document into canonical commands.

    Raises:
        ValidationFailedError: If the text is not JSON or not of the form
            {"commands": [{"command": str, "inputs": [InputStep, ...]}, ...]}.
    """
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationFailedError(f"Invalid JSON: {e.msg}") from e

    if not isinstance(parsed, dict):
        raise ValidationFailedError("Invalid JSON: Root must be an object")
    commands = parsed.get("commands")
    if not isinstance(commands, list):
        raise ValidationFailedError('Invalid format: "commands" must be an array')
    if not commands:
        raise ValidationFailedError("Invalid format: At least one command is required")

    for index, cmd in enumerate(commands):
        if not _is_valid_import_command(cmd):
            raise ValidationFailedError(
                f"Invalid command at index {index}: Command must have "
                '"command" (string) and "inputs" (array of InputStep)',
            )

    return [
        {
            "command": cmd["command"].strip(),
            "inputs": [canonical_step(step) for step in cmd["inputs"]],
        }
        for cmd in commands
    ]


def export_commands(stored_commands: Any) -> dict[str, Any]:
    """Build an importable document from a mnemonic's stored commands."""
    return {"commands": migrate_commands(stored_commands)}
