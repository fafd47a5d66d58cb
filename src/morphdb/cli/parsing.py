"""Input parsing utilities for CLI commands."""

import json
from pathlib import Path
from typing import Any

FLAG_MODIFIERS = {"notnull": "notNull", "unique": "unique"}


def parse_column_spec(spec: str) -> dict[str, Any]:
    """Parse a column specification string.

    Format: name:type[:modifier1][:modifier2]...

    Examples:
        "email:text:notnull:unique" → {"name": "email", "type": "text",
            "constraints": {"notNull": True, "unique": True}}
        "score:integer:default=0" → {"name": "score", "type": "integer",
            "constraints": {"default": 0}}
        "owner_id:integer:references=users.id:ondelete=cascade"

    Args:
        spec: Column specification string

    Returns:
        Column dictionary in the same shape the HTTP API accepts

    Raises:
        ValueError: If spec format is invalid
    """
    parts = spec.split(":")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(f"Invalid column spec: '{spec}'. Expected format: name:type[:modifier]...")

    column: dict[str, Any] = {"name": parts[0], "type": parts[1].lower()}
    constraints: dict[str, Any] = {}
    references: dict[str, Any] = {}

    for modifier in parts[2:]:
        if "=" in modifier:
            key, value = modifier.split("=", 1)
            key = key.lower()
            if key == "default":
                # JSON first so numbers and booleans keep their type
                try:
                    constraints["default"] = json.loads(value)
                except json.JSONDecodeError:
                    constraints["default"] = value
            elif key == "check":
                constraints["check"] = value
            elif key == "references":
                table, _, target = value.partition(".")
                if not table or not target:
                    raise ValueError(
                        f"Invalid reference: '{value}'. Expected format: references=table.column"
                    )
                references.update({"table": table, "column": target})
            elif key in ("ondelete", "onupdate"):
                references["onDelete" if key == "ondelete" else "onUpdate"] = value
            else:
                raise ValueError(f"Invalid modifier: '{modifier}'")
        elif modifier.lower() in FLAG_MODIFIERS:
            constraints[FLAG_MODIFIERS[modifier.lower()]] = True
        else:
            raise ValueError(
                f"Invalid modifier: '{modifier}'. Supported: notnull, unique, default=value, "
                "check=expr, references=table.column, ondelete=action, onupdate=action"
            )

    if references:
        if "table" not in references:
            raise ValueError(f"'{spec}' sets a referential action without references=table.column")
        constraints["references"] = references
    if constraints:
        column["constraints"] = constraints
    return column


def read_json_file(path: str) -> Any:
    """Read a JSON document from file.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If file contains invalid JSON
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open("r") as f:
        return json.load(f)
