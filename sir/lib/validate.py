"""
JSON Schema checks for the state files the agent writes.

Schemas live in sir/schemas/<name>.schema.json. A check reports every
violation at once, ordered by location, so one failed `sir rafael` run shows
the agent (or the human) everything that has to be fixed in tasks.json.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema

SCHEMAS_DIR = Path(__file__).resolve().parent.parent / "schemas"


class ValidationError(Exception):
    """A document is unreadable or does not match its schema."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        location = f" at {path}" if path else ""
        super().__init__(f"[{schema_name}] {message}{location}")


@lru_cache(maxsize=None)
def get_validator(schema_name: str):
    """Compiled validator for a named schema."""
    schema_file = SCHEMAS_DIR / f"{schema_name}.schema.json"
    try:
        schema = json.loads(schema_file.read_text())
    except FileNotFoundError:
        raise ValidationError(schema_name, f"no schema file {schema_file}") from None

    validator_cls = jsonschema.validators.validator_for(schema)
    validator_cls.check_schema(schema)
    return validator_cls(schema)


def _location(error: jsonschema.ValidationError) -> str:
    return ".".join(str(part) for part in error.absolute_path) or "(root)"


def validate(data, schema_name: str) -> None:
    """
    Check `data` against a named schema.

    Raises:
        ValidationError: carrying the first violation by location, and a
            count of the others
    """
    errors = sorted(
        get_validator(schema_name).iter_errors(data),
        key=lambda e: [str(part) for part in e.absolute_path],
    )
    if not errors:
        return

    first = errors[0]
    message = first.message
    if len(errors) > 1:
        message += f" (+{len(errors) - 1} more problem(s))"
    raise ValidationError(schema_name, message, _location(first))


def validate_file(filepath: Path, schema_name: str):
    """Read a JSON document and check it; returns the parsed data."""
    try:
        text = filepath.read_text()
    except FileNotFoundError:
        raise ValidationError(schema_name, f"File not found: {filepath}") from None

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(
            schema_name, f"Invalid JSON in {filepath.name} (line {e.lineno}, col {e.colno}): {e.msg}"
        ) from None

    validate(data, schema_name)
    return data
