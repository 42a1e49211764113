"""Body Flattener - Flattens nested request-body schemas into form fields.

A form-encoded body is a flat key/value mapping, so nested object schemas
are walked and each leaf property is recorded under its ancestors' names
joined with "_". The example supplies each leaf by that flattened name,
e.g. address.city is read as "address_city".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

MAX_DEPTH = 3


@dataclass(frozen=True)
class FlatField:
    """One leaf of a flattened schema.

    Attributes:
        schema: The leaf property's schema (may itself have properties when
                the depth bound stopped the walk).
        required: Whether the immediate parent lists the property as required.
    """

    schema: Mapping[str, Any]
    required: bool


def flatten_schema(
    schema: Mapping[str, Any],
    max_depth: int = MAX_DEPTH,
) -> dict[str, FlatField]:
    """Flatten an object schema into {flattened_name: FlatField}.

    A property is descended into only when it declares properties and the
    current depth is below max_depth; otherwise it is recorded as a leaf.
    """
    fields: dict[str, FlatField] = {}
    _collect(schema, "", 0, max_depth, fields)
    return fields


def _collect(
    schema: Mapping[str, Any],
    prefix: str,
    depth: int,
    max_depth: int,
    fields: dict[str, FlatField],
) -> None:
    required = set(schema.get("required") or [])
    for name, property_schema in (schema.get("properties") or {}).items():
        if property_schema.get("properties") and depth < max_depth:
            _collect(property_schema, f"{prefix}{name}_", depth + 1, max_depth, fields)
        else:
            fields[f"{prefix}{name}"] = FlatField(
                schema=property_schema,
                required=name in required,
            )


def derive_request_body_params(
    operation: Mapping[str, Any],
    media_type: str,
    max_depth: int = MAX_DEPTH,
) -> dict[str, FlatField]:
    """Flatten requestBody.content[media_type].schema of an OpenAPI 3 operation."""
    content = (operation.get("requestBody") or {}).get("content") or {}
    schema = (content.get(media_type) or {}).get("schema")
    if not schema:
        return {}
    return flatten_schema(schema, max_depth)
