"""Request Factory - Builds a Request from operation metadata and an example.

The document's version field selects one of two factories:

- Swagger2RequestFactory: flat parameters, bodies declared as in: body or
  in: formData, basePath, consumes/produces.
- OpenAPI3RequestFactory: requestBody separate from parameters, servers,
  style/explode query serialization, components registries.

Both produce the same Request model. Neither mutates the document or the
metadata.

Usage:
    example = MappingExample({"id": 42})
    metadata = operation_metadata(document, "/pets/{id}", "get")
    request = build_request(metadata, example, document=document)
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Mapping

from oas_request.body_flattener import MAX_DEPTH, derive_request_body_params
from oas_request.errors import MissingRequiredValue, RequestBuildError
from oas_request.example import ExampleProvider
from oas_request.models import OperationMetadata, Request, SpecVersion
from oas_request.parameter_resolver import (
    OpenAPI3ParameterResolver,
    Swagger2ParameterResolver,
)
from oas_request.path_builder import build_path, openapi3_base_path, swagger2_base_path
from oas_request.query_serializer import serialize_swagger2_param, stringify

if TYPE_CHECKING:
    from oas_request.config_loader import DocumentRegistry

logger = logging.getLogger(__name__)

FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def detect_version(document: Mapping[str, Any]) -> SpecVersion:
    """Swagger 2 unless the document declares an openapi (or non-2 swagger) version."""
    version = str(document.get("openapi") or document.get("swagger") or "2")
    if version.startswith("2"):
        return SpecVersion.SWAGGER2
    return SpecVersion.OPENAPI3


def _first(values: Any) -> str | None:
    if not values:
        return None
    return values[0]


def _declared(operation: Mapping[str, Any], document: Mapping[str, Any], key: str) -> Any:
    """Operation-level list, falling back to the document only when absent."""
    if key in operation:
        return operation[key]
    return document.get(key)


def _is_form(content_type: str | None) -> bool:
    if content_type is None:
        return False
    return content_type.split(";")[0].strip().lower() in FORM_MEDIA_TYPES


def _read(example: ExampleProvider, param: Mapping[str, Any]) -> Any:
    name = param["name"]
    if not example.has(name):
        raise MissingRequiredValue(name, param.get("in", "body"))
    return example.get(name)


def build_headers(
    parameters: list[Mapping[str, Any]],
    example: ExampleProvider,
    accept: str | None = None,
    content_type: str | None = None,
) -> dict[str, str]:
    """Collect header and cookie parameters plus Accept/Content-Type.

    The example may override Accept and Content-Type by supplying values
    under those names.
    """
    headers: dict[str, str] = {}
    cookies: list[str] = []
    for param in parameters:
        location = param.get("in")
        if location == "header":
            headers[param["name"]] = stringify(_read(example, param))
        elif location == "cookie":
            cookies.append(f"{param['name']}={stringify(_read(example, param))}")

    if cookies:
        headers["Cookie"] = "; ".join(cookies)

    if accept is not None:
        headers["Accept"] = stringify(example.get("Accept")) if example.has("Accept") else accept
    if content_type is not None:
        headers["Content-Type"] = (
            stringify(example.get("Content-Type")) if example.has("Content-Type") else content_type
        )
    return headers


def build_json_payload(
    parameters: list[Mapping[str, Any]], example: ExampleProvider
) -> str | None:
    """Serialize the in: body parameter's value as JSON."""
    for param in parameters:
        if param.get("in") == "body":
            return json.dumps(_read(example, param))
    return None


class Swagger2RequestFactory:
    """Builds requests against Swagger 2.0 documents."""

    def __init__(self) -> None:
        self._resolver = Swagger2ParameterResolver()

    def build_request(
        self,
        metadata: OperationMetadata,
        document: Mapping[str, Any],
        example: ExampleProvider,
    ) -> Request:
        parameters = self._resolver.expand_parameters(metadata, document, example)
        path = build_path(
            swagger2_base_path(document),
            metadata.path_item.template,
            parameters,
            example,
            serialize_swagger2_param,
        )
        operation = metadata.operation
        headers = build_headers(
            parameters,
            example,
            accept=_first(_declared(operation, document, "produces")),
            content_type=_first(_declared(operation, document, "consumes")),
        )
        payload = self.build_payload(parameters, example, headers.get("Content-Type"))
        return Request(verb=metadata.verb, path=path, headers=headers, payload=payload)

    def build_payload(
        self,
        parameters: list[Mapping[str, Any]],
        example: ExampleProvider,
        content_type: str | None,
    ) -> dict[str, Any] | str | None:
        if content_type is None:
            return None
        if _is_form(content_type):
            return {
                param["name"]: _read(example, param)
                for param in parameters
                if param.get("in") == "formData"
            }
        return build_json_payload(parameters, example)


class OpenAPI3RequestFactory:
    """Builds requests against OpenAPI 3.x documents.

    Form bodies are built from the flattened requestBody schema: each
    required leaf must be supplied by the example under its flattened name.
    Optional leaves are left out of the payload.
    """

    def __init__(self, use_server: str = "default", max_depth: int = MAX_DEPTH) -> None:
        self._resolver = OpenAPI3ParameterResolver()
        self._use_server = use_server
        self._max_depth = max_depth

    def build_request(
        self,
        metadata: OperationMetadata,
        document: Mapping[str, Any],
        example: ExampleProvider,
    ) -> Request:
        parameters = self._resolver.expand_parameters(metadata, document, example)
        path = build_path(
            openapi3_base_path(document, self._use_server),
            metadata.path_item.template,
            parameters,
            example,
        )
        headers = build_headers(
            parameters,
            example,
            accept=_first(metadata.operation.get("produces")),
            content_type=self.main_media_type(metadata),
        )
        payload = self.build_payload(metadata, parameters, example, headers.get("Content-Type"))
        return Request(verb=metadata.verb, path=path, headers=headers, payload=payload)

    @staticmethod
    def main_media_type(metadata: OperationMetadata) -> str | None:
        """First media type declared under requestBody.content."""
        content = (metadata.operation.get("requestBody") or {}).get("content") or {}
        return next(iter(content), None)

    @staticmethod
    def content_key(metadata: OperationMetadata, content_type: str) -> str:
        """Declared requestBody.content key matching content_type, parameters ignored."""
        wanted = content_type.split(";")[0].strip().lower()
        content = (metadata.operation.get("requestBody") or {}).get("content") or {}
        for key in content:
            if key.split(";")[0].strip().lower() == wanted:
                return key
        return content_type

    def build_payload(
        self,
        metadata: OperationMetadata,
        parameters: list[Mapping[str, Any]],
        example: ExampleProvider,
        content_type: str | None,
    ) -> dict[str, Any] | str | None:
        if content_type is None:
            return None
        if _is_form(content_type):
            media_type = self.content_key(metadata, content_type)
            return self.build_form_payload(metadata, media_type, example)
        return build_json_payload(parameters, example)

    def build_form_payload(
        self,
        metadata: OperationMetadata,
        media_type: str,
        example: ExampleProvider,
    ) -> dict[str, Any]:
        fields = derive_request_body_params(metadata.operation, media_type, self._max_depth)
        payload: dict[str, Any] = {}
        for name, field in fields.items():
            if not field.required:
                continue
            if not example.has(name):
                raise MissingRequiredValue(name, "body")
            payload[name] = example.get(name)
        return payload


def build_request(
    metadata: OperationMetadata,
    example: ExampleProvider,
    document: Mapping[str, Any] | None = None,
    registry: DocumentRegistry | None = None,
    use_server: str | None = None,
) -> Request:
    """Build the request for one operation.

    Args:
        metadata: The operation to call.
        example: Supplies every parameter and body value.
        document: The OpenAPI document. Looked up in registry by
                  metadata.document when omitted.
        registry: Document registry used when document is omitted.
        use_server: Server variable key for the base path. Defaults to the
                    registry's configured server, then "default".

    Raises:
        ResolutionError: A parameter $ref is not defined in the document.
        MissingRequiredValue: A required value is not supplied by the example.
    """
    if document is None:
        if registry is None:
            raise RequestBuildError("A document or a document registry is required")
        document = registry.get(metadata.document)
    if use_server is None:
        use_server = registry.server if registry is not None else "default"

    version = detect_version(document)
    logger.debug(
        "Building %s %s against %s document",
        metadata.verb.upper(),
        metadata.path_item.template,
        version.value,
    )
    if version is SpecVersion.SWAGGER2:
        return Swagger2RequestFactory().build_request(metadata, document, example)
    return OpenAPI3RequestFactory(use_server=use_server).build_request(metadata, document, example)
