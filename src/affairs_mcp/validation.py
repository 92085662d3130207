"""Argument validation against tool input schemas.

Validation runs in two passes:
1. Presence: every name in ``required`` must be a key of the arguments.
   A key explicitly set to "" or 0 counts as present. All missing names are
   collected before failing.
2. Shape: types, enums and array items are checked with JSON Schema.
"""
import logging
from typing import Any, Mapping, Optional

from jsonschema import Draft202012Validator

logger = logging.getLogger("affairs-mcp.validation")


class DispatchError(Exception):
    """Base class for requests rejected before a handler runs."""


class UnknownOperationError(DispatchError):
    """Raised when no operation is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Unknown operation: {name}")
        self.name = name


class MissingArgumentsError(DispatchError):
    """Raised when required arguments are absent."""

    def __init__(self, missing: list[str]):
        super().__init__(f"Missing required arguments: {', '.join(missing)}")
        self.missing = missing


class InvalidArgumentsError(DispatchError):
    """Raised when arguments are present but have the wrong shape."""

    def __init__(self, problems: list[str]):
        super().__init__(f"Invalid arguments: {'; '.join(problems)}")
        self.problems = problems


def find_missing_arguments(arguments: Mapping[str, Any], schema: Optional[Mapping[str, Any]]) -> list[str]:
    """
    List required argument names that are absent.

    Args:
        arguments: Arguments supplied by the caller
        schema: Tool input schema; a missing or empty ``required`` list
            always passes

    Returns:
        Missing names in the order the schema declares them
    """
    required = (schema or {}).get("required") or []
    return [field for field in required if field not in arguments]


def find_shape_problems(arguments: Mapping[str, Any], schema: Optional[Mapping[str, Any]]) -> list[str]:
    """Describe every type/enum violation, ordered by argument path."""
    if not schema:
        return []
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(dict(arguments)), key=lambda err: list(map(str, err.path)))
    return [
        f"{'.'.join(map(str, err.path)) or '<root>'}: {err.message}"
        for err in errors
        if err.validator != "required"
    ]


def validate_arguments(arguments: Mapping[str, Any], schema: Optional[Mapping[str, Any]]) -> None:
    """
    Validate arguments against a tool input schema.

    Raises:
        MissingArgumentsError: If any required argument is absent
        InvalidArgumentsError: If any argument has the wrong type or value
    """
    missing = find_missing_arguments(arguments, schema)
    if missing:
        raise MissingArgumentsError(missing)

    problems = find_shape_problems(arguments, schema)
    if problems:
        logger.debug(f"Rejected arguments: {problems}")
        raise InvalidArgumentsError(problems)
