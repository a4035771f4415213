"""Tool-schema cleaning for Gemini function declarations.

Gemini accepts only a subset of JSON Schema for function parameters. This
module reduces an arbitrary schema to that subset: ``type``, ``description``,
``enum``, ``items`` and nested ``properties``/``required``. Keywords such as
``$schema``, ``additionalProperties`` or ``exclusiveMinimum`` are dropped and
a list of types collapses to its first entry.
"""

from __future__ import annotations

from typing import Any

from turnbridge.core.document import from_generic
from turnbridge.core.models import ToolSpecification

_DEFAULT_TYPE = "string"


def clean_parameters(schema: Any) -> dict[str, Any]:
    """Return the Gemini-compatible form of an object schema.

    The result always has ``type: "object"``, ``properties`` and ``required``.
    ``required`` entries that do not name a declared property are dropped.
    """
    cleaned: dict[str, Any] = {"type": "object", "properties": {}, "required": []}
    if not isinstance(schema, dict):
        return cleaned

    properties = schema.get("properties")
    if isinstance(properties, dict):
        cleaned["properties"] = {
            name: _clean_property(prop)
            for name, prop in properties.items()
            if isinstance(prop, dict)
        }

    required = schema.get("required")
    if isinstance(required, list):
        cleaned["required"] = [name for name in required if name in cleaned["properties"]]

    return cleaned


def _clean_property(prop: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {"type": _first_type(prop.get("type"))}

    if "description" in prop:
        cleaned["description"] = prop["description"]
    if "enum" in prop:
        cleaned["enum"] = prop["enum"]

    if cleaned["type"] == "array":
        items = prop.get("items")
        cleaned["items"] = _clean_items(items) if items is not None else {"type": _DEFAULT_TYPE}

    if cleaned["type"] == "object" and "properties" in prop:
        nested = clean_parameters(prop)
        cleaned["properties"] = nested["properties"]
        cleaned["required"] = nested["required"]

    return cleaned


def _clean_items(items: Any) -> dict[str, Any]:
    if not isinstance(items, dict):
        return {"type": _DEFAULT_TYPE}
    cleaned: dict[str, Any] = {"type": _first_type(items.get("type"))}
    if "description" in items:
        cleaned["description"] = items["description"]
    if "enum" in items:
        cleaned["enum"] = items["enum"]
    return cleaned


def _first_type(value: Any) -> Any:
    if value is None:
        return _DEFAULT_TYPE
    if isinstance(value, list):
        return value[0] if value else _DEFAULT_TYPE
    return value


def tool_specification_from_declaration(declaration: dict[str, Any]) -> ToolSpecification:
    """Rebuild a :class:`ToolSpecification` from a wire function declaration."""
    parameters = declaration.get("parameters") or {"type": "object", "properties": {}}
    return ToolSpecification(
        name=declaration["name"],
        description=declaration.get("description", ""),
        input_schema=from_generic(parameters),
    )
