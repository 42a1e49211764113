"""Path Builder - Renders the request path and query string.

The base path comes from the first server entry (OpenAPI 3) or basePath
(Swagger 2). Path placeholders are replaced by example values and the query
string is appended.
"""

from __future__ import annotations

import re
from typing import Any, Mapping
from urllib.parse import urlsplit

from oas_request.errors import MissingRequiredValue, warn_deprecated
from oas_request.example import ExampleProvider
from oas_request.query_serializer import (
    QuerySerializer,
    build_query_string,
    serialize_query_param,
    stringify,
)

# Server URL variables, e.g. https://{region}.example.com/{version}
_SERVER_VARIABLE = re.compile(r"\{(.*?)\}")
_PATH_PLACEHOLDER = re.compile(r"\{([^}]+)\}")


def base_path_from_servers(document: Mapping[str, Any], use_server: str = "default") -> str:
    """Derive the base path from the document's first server.

    Args:
        document: OpenAPI 3 document.
        use_server: Key read from each server variable. Falls back to the
                    variable's "default" when the key is absent.

    Returns:
        The path component of the server URL ("" when no servers are declared).
    """
    servers = document.get("servers") or []
    if not servers:
        return ""

    server = servers[0]
    variables = server.get("variables") or {}

    def replace(match: re.Match) -> str:
        variable = variables.get(match.group(1)) or {}
        return stringify(variable.get(use_server, variable.get("default")))

    url = _SERVER_VARIABLE.sub(replace, server.get("url", ""))
    return urlsplit(url).path.rstrip("/")


def openapi3_base_path(document: Mapping[str, Any], use_server: str = "default") -> str:
    """Base path for an OpenAPI 3 document; a legacy basePath is ignored with a warning."""
    if document.get("basePath"):
        warn_deprecated("basePath is replaced in OpenAPI 3. Declare servers instead")
        return ""
    return base_path_from_servers(document, use_server)


def swagger2_base_path(document: Mapping[str, Any]) -> str:
    return (document.get("basePath") or "").rstrip("/")


def render_template(
    template: str,
    params: list[Mapping[str, Any]],
    example: ExampleProvider,
) -> str:
    """Replace every {name} placeholder of each path parameter.

    Raises:
        MissingRequiredValue: If a path parameter has no example value.
    """
    values: dict[str, str] = {}
    for param in params:
        if param.get("in") != "path":
            continue
        name = param["name"]
        if not example.has(name):
            raise MissingRequiredValue(name, "path")
        values[name] = stringify(example.get(name))
    # Inserted values are not rescanned for placeholders
    return _PATH_PLACEHOLDER.sub(
        lambda match: values.get(match.group(1), match.group(0)), template
    )


def build_path(
    base_path: str,
    template: str,
    params: list[Mapping[str, Any]],
    example: ExampleProvider,
    serializer: QuerySerializer = serialize_query_param,
) -> str:
    """Render base_path + template, then append the query string."""
    path = render_template(base_path + template, params, example)
    return path + build_query_string(params, example, serializer)
