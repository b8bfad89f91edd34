#!/usr/bin/env python3
# src/frappe_mcp_server/types/schema.py
"""
Schema - Declarative argument validation for tool input schemas

Tool schemas are plain JSON Schema dicts so they can be sent verbatim to
clients. This module checks incoming ``tools/call`` arguments against them:
required members, JSON types, enums, nested objects and arrays, ``anyOf``
alternatives and defaults. Lossless coercions ("5" -> 5, "true" -> True,
JSON strings for arrays/objects) are applied the way MCP clients tend to need.
"""

import copy
from typing import Any

import orjson

from ..errors import SchemaValidationError, format_missing_argument_error

JSON_TYPES = frozenset({"string", "integer", "number", "boolean", "array", "object", "null"})

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on", "t", "y"})
_FALSE_STRINGS = frozenset({"false", "0", "no", "off", "f", "n"})


def json_type_name(value: Any) -> str:
    """Name the JSON type of a decoded value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def validate_arguments(schema: dict[str, Any], arguments: Any) -> dict[str, Any]:
    """Validate and coerce tool arguments against an object schema.

    Returns a new dict; the caller's arguments are never mutated.

    Raises:
        SchemaValidationError: naming the first offending field.
    """
    if not isinstance(arguments, dict):
        raise SchemaValidationError("arguments", f"expected object, got {json_type_name(arguments)}")
    return _validate_object(arguments, schema, path="")


def validate_value(value: Any, schema: dict[str, Any], field: str) -> Any:
    """Validate a single value against a (sub)schema, returning the coerced value."""
    if "anyOf" in schema:
        for option in schema["anyOf"]:
            try:
                return validate_value(value, option, field)
            except SchemaValidationError:
                continue
        allowed = ", ".join(str(option.get("type", "any")) for option in schema["anyOf"])
        raise SchemaValidationError(field, f"expected one of [{allowed}], got {json_type_name(value)}")

    expected = schema.get("type")
    if expected is None:
        converted = value
    elif isinstance(expected, list):
        converted = _convert_any_of_types(value, expected, field)
    else:
        converted = _convert_type(value, expected, field)

    if isinstance(converted, list) and "items" in schema:
        converted = [validate_value(item, schema["items"], f"{field}[{index}]") for index, item in enumerate(converted)]
    elif isinstance(converted, dict) and ("properties" in schema or "required" in schema):
        converted = _validate_object(converted, schema, path=field)

    if "enum" in schema and converted not in schema["enum"]:
        choices = ", ".join(repr(choice) for choice in schema["enum"])
        raise SchemaValidationError(field, f"value {converted!r} must be one of [{choices}]")

    return converted


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _validate_object(value: dict[str, Any], schema: dict[str, Any], path: str) -> dict[str, Any]:
    properties: dict[str, Any] = schema.get("properties", {})
    required = schema.get("required", [])
    validated = dict(value)

    for name in required:
        if value.get(name) is None:
            raise SchemaValidationError(_join(path, name), format_missing_argument_error(name, schema))

    for name, prop in properties.items():
        item = value.get(name)
        if item is None:
            # Explicit nulls count as missing for optional members
            validated.pop(name, None)
            if "default" in prop:
                validated[name] = copy.deepcopy(prop["default"])
            continue
        validated[name] = validate_value(item, prop, _join(path, name))

    return validated


def _convert_any_of_types(value: Any, expected: list[str], field: str) -> Any:
    for type_name in expected:
        try:
            return _convert_type(value, type_name, field)
        except SchemaValidationError:
            continue
    raise SchemaValidationError(field, f"expected one of {expected}, got {json_type_name(value)}")


def _convert_type(value: Any, expected: str, field: str) -> Any:
    """Convert value to the expected JSON type or raise."""
    if expected not in JSON_TYPES:
        # Unknown type keywords are not enforced
        return value

    mismatch = SchemaValidationError(field, f"expected {expected}, got {json_type_name(value)}")

    if expected == "string":
        if isinstance(value, str):
            return value
        raise mismatch

    if expected == "integer":
        if isinstance(value, bool):
            raise mismatch
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value.is_integer():
                return int(value)
            raise SchemaValidationError(field, f"cannot convert {value} to integer without precision loss")
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                try:
                    float_val = float(value)
                except ValueError:
                    raise mismatch from None
                if float_val.is_integer():
                    return int(float_val)
                raise SchemaValidationError(field, f"cannot convert '{value}' to integer without precision loss")
        raise mismatch

    if expected == "number":
        if isinstance(value, bool):
            raise mismatch
        if isinstance(value, int | float):
            return value
        if isinstance(value, str):
            try:
                float_val = float(value)
            except ValueError:
                raise mismatch from None
            return int(float_val) if float_val.is_integer() and "." not in value else float_val
        raise mismatch

    if expected == "boolean":
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lower_val = value.lower()
            if lower_val in _TRUE_STRINGS:
                return True
            if lower_val in _FALSE_STRINGS:
                return False
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise mismatch

    if expected == "array":
        if isinstance(value, list):
            return value
        if isinstance(value, tuple):
            return list(value)
        if isinstance(value, str):
            parsed = _loads_or_none(value)
            if isinstance(parsed, list):
                return parsed
        raise mismatch

    if expected == "object":
        if isinstance(value, dict):
            return value
        if isinstance(value, str):
            parsed = _loads_or_none(value)
            if isinstance(parsed, dict):
                return parsed
        raise mismatch

    # expected == "null"
    if value is None:
        return None
    raise mismatch


def _loads_or_none(value: str) -> Any:
    try:
        return orjson.loads(value)
    except orjson.JSONDecodeError:
        return None


__all__ = ["JSON_TYPES", "json_type_name", "validate_arguments", "validate_value"]
