"""Query Serializer - Encodes query parameters into query-string fragments.

OpenAPI 3 parameters are encoded by (schema type, style, explode), see
https://swagger.io/docs/specification/serialization/. Swagger 2 parameters
use collectionFormat instead.

Names and values are escaped with query-string rules (space becomes '+').
Separators and deepObject brackets are written literally.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping
from urllib.parse import quote_plus

from oas_request.errors import MissingRequiredValue
from oas_request.example import ExampleProvider

QuerySerializer = Callable[[Mapping[str, Any], Any], str]

# Joiners for non-exploded arrays, keyed by OpenAPI 3 style
_STYLE_SEPARATORS = {
    "form": ",",
    "spaceDelimited": "%20",
    "pipeDelimited": "|",
}

# Joiners for Swagger 2 array parameters, keyed by collectionFormat
_COLLECTION_SEPARATORS = {
    "csv": ",",
    "ssv": "%20",
    "tsv": "%09",
    "pipes": "|",
}


def stringify(value: Any) -> str:
    """Render a scalar the way it appears in a URL."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _escape(value: Any) -> str:
    return quote_plus(stringify(value))


def _flatten(value: Any) -> list[Any]:
    """Flatten nested lists; mappings become interleaved key/value items."""
    if isinstance(value, Mapping):
        items: Iterable[Any] = (part for pair in value.items() for part in pair)
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return [value]

    result: list[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            result.extend(_flatten(item))
        else:
            result.append(item)
    return result


def _deep_object_pairs(prefix: str, value: Any) -> list[str]:
    if isinstance(value, Mapping):
        pairs = []
        for key, nested in value.items():
            pairs.extend(_deep_object_pairs(f"{prefix}[{_escape(key)}]", nested))
        return pairs
    if isinstance(value, (list, tuple)):
        return [f"{prefix}[]={_escape(item)}" for item in value]
    return [f"{prefix}={_escape(value)}"]


def _serialize_object(name: str, value: Mapping[str, Any], style: str, explode: bool) -> str:
    if style == "deepObject":
        return "&".join(_deep_object_pairs(_escape(name), value))
    if style == "form":
        if explode:
            return "&".join(f"{_escape(k)}={_escape(v)}" for k, v in value.items())
        return f"{_escape(name)}=" + ",".join(_escape(v) for v in _flatten(value))
    # Other styles are not defined for objects in query parameters
    return ""


def _serialize_array(name: str, value: Any, style: str, explode: bool) -> str:
    items = _flatten(value)
    if explode:
        return "&".join(f"{_escape(name)}={_escape(item)}" for item in items)
    separator = _STYLE_SEPARATORS.get(style, ",")
    return f"{_escape(name)}=" + separator.join(_escape(item) for item in items)


def serialize_query_param(param: Mapping[str, Any], value: Any) -> str:
    """Encode one OpenAPI 3 query parameter.

    Args:
        param: Resolved parameter definition (name, schema, style, explode).
        value: The example-supplied value.

    Returns:
        A fragment such as "tags=a,b" or "tags=a&tags=b". Empty when the
        parameter declares no schema.
    """
    schema = param.get("schema")
    if not schema:
        return ""

    name = param["name"]
    style = param.get("style") or "form"
    explode = param.get("explode")
    if explode is None:
        explode = True

    schema_type = schema.get("type")
    if schema_type == "object":
        if not isinstance(value, Mapping):
            return f"{_escape(name)}={_escape(value)}"
        return _serialize_object(name, value, style, explode)
    if schema_type == "array":
        return _serialize_array(name, value, style, explode)
    return f"{_escape(name)}={_escape(value)}"


def serialize_swagger2_param(param: Mapping[str, Any], value: Any) -> str:
    """Encode one Swagger 2 query parameter using its collectionFormat."""
    name = _escape(param["name"])
    if param.get("type") != "array":
        return f"{name}={_escape(value)}"

    items = _flatten(value)
    collection_format = param.get("collectionFormat") or "csv"
    if collection_format == "multi":
        return "&".join(f"{name}={_escape(item)}" for item in items)
    separator = _COLLECTION_SEPARATORS.get(collection_format, ",")
    return f"{name}=" + separator.join(_escape(item) for item in items)


def build_query_string(
    params: list[Mapping[str, Any]],
    example: ExampleProvider,
    serializer: QuerySerializer = serialize_query_param,
) -> str:
    """Serialize every query parameter, in order, into "?a=1&b=2".

    Fragments that serialize to nothing are skipped.

    Raises:
        MissingRequiredValue: If a query parameter has no example value.
    """
    fragments = []
    for param in params:
        if param.get("in") != "query":
            continue
        if not example.has(param["name"]):
            raise MissingRequiredValue(param["name"], "query")
        fragment = serializer(param, example.get(param["name"]))
        if fragment:
            fragments.append(fragment)
    if not fragments:
        return ""
    return "?" + "&".join(fragments)
