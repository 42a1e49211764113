"""Operation metadata helpers.

Builds OperationMetadata from a document's path items and attaches OpenAPI 3
request bodies without touching the original metadata.
"""

from __future__ import annotations

import copy
from typing import Any, Iterator, Mapping

from oas_request.errors import OperationNotFoundError
from oas_request.models import OperationMetadata, PathItemMetadata

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def list_operations(document: Mapping[str, Any]) -> Iterator[tuple[str, str, str | None]]:
    """Yield (verb, template, operationId) for every operation in the document."""
    for template, path_item in (document.get("paths") or {}).items():
        if not isinstance(path_item, Mapping):
            continue
        for verb in HTTP_METHODS:
            operation = path_item.get(verb)
            if isinstance(operation, Mapping):
                yield verb, template, operation.get("operationId")


def operation_metadata(
    document: Mapping[str, Any],
    template: str,
    verb: str,
    document_name: str | None = None,
) -> OperationMetadata:
    """Build OperationMetadata for one path template and HTTP method.

    The operation and path-item parameters are deep-copied so later edits
    to the metadata never reach the document.

    Raises:
        OperationNotFoundError: If the path or method is not declared.
    """
    paths = document.get("paths") or {}
    if template not in paths:
        raise OperationNotFoundError(f"Path '{template}' is not declared in the document")

    path_item = paths[template] or {}
    operation = path_item.get(verb.lower())
    if not isinstance(operation, Mapping):
        raise OperationNotFoundError(f"Operation {verb.upper()} {template} is not declared")

    return OperationMetadata(
        verb=verb,
        path_item=PathItemMetadata(
            template=template,
            parameters=copy.deepcopy(list(path_item.get("parameters") or [])),
        ),
        operation=copy.deepcopy(dict(operation)),
        document=document_name,
    )


def with_request_body(
    metadata: OperationMetadata,
    media_type: str,
    schema: Mapping[str, Any] | None = None,
    **attributes: Any,
) -> OperationMetadata:
    """Return a copy of metadata with an OpenAPI 3 requestBody.

    The body is marked required when the schema lists required properties.
    Extra attributes (description, ...) are copied onto the requestBody.
    """
    request_body = dict(attributes)
    if schema is not None:
        request_body["content"] = {media_type: {"schema": copy.deepcopy(dict(schema))}}
    request_body["required"] = bool(schema and schema.get("required"))

    operation = copy.deepcopy(metadata.operation)
    operation["requestBody"] = request_body
    return metadata.model_copy(update={"operation": operation})


def with_request_body_form(
    metadata: OperationMetadata, schema: Mapping[str, Any] | None = None, **attributes: Any
) -> OperationMetadata:
    return with_request_body(metadata, "application/x-www-form-urlencoded", schema, **attributes)


def with_request_body_json(
    metadata: OperationMetadata, schema: Mapping[str, Any] | None = None, **attributes: Any
) -> OperationMetadata:
    return with_request_body(metadata, "application/json", schema, **attributes)


def with_request_body_xml(
    metadata: OperationMetadata, schema: Mapping[str, Any] | None = None, **attributes: Any
) -> OperationMetadata:
    return with_request_body(metadata, "application/xml", schema, **attributes)


def with_request_body_plain(
    metadata: OperationMetadata, schema: Mapping[str, Any] | None = None, **attributes: Any
) -> OperationMetadata:
    return with_request_body(metadata, "text/plain", schema, **attributes)
