"""Schema Resolver - Produces the final parameter list for one operation.

Operation parameters, path-item parameters and parameters derived from
security requirements are merged, $ref pointers are resolved against the
document, duplicates are discarded by name, and optional parameters the
example does not supply are dropped.

Swagger 2 and OpenAPI 3 keep their reusable parameters and security schemes
in different places, so each version has its own resolver. Both return a
new list of plain parameter mappings and never modify the document.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from oas_request.errors import ResolutionError, warn_deprecated
from oas_request.example import ExampleProvider
from oas_request.models import OperationMetadata

logger = logging.getLogger(__name__)


def is_required(param: Mapping[str, Any]) -> bool:
    """Path parameters are always required; others only when declared so."""
    if param.get("in") == "path":
        return True
    return param.get("required") is True


def dedupe_by_name(params: list[Mapping[str, Any]]) -> list[Mapping[str, Any]]:
    """Keep the first parameter seen for each name."""
    seen: set[str] = set()
    result = []
    for param in params:
        name = param.get("name")
        if name in seen:
            continue
        seen.add(name)
        result.append(param)
    return result


def drop_unsupplied(
    params: list[Mapping[str, Any]], example: ExampleProvider
) -> list[Mapping[str, Any]]:
    """Remove optional parameters that have no example value.

    Required parameters stay even when unsupplied; whoever reads the value
    raises MissingRequiredValue.
    """
    kept = []
    for param in params:
        if not is_required(param) and not example.has(param["name"]):
            logger.debug("Dropping optional parameter '%s' (no example value)", param["name"])
            continue
        kept.append(param)
    return kept


def security_requirements(
    metadata: OperationMetadata, document: Mapping[str, Any]
) -> list[Mapping[str, Any]]:
    """Operation requirements override global ones, including an explicit empty list."""
    operation_security = metadata.operation.get("security")
    if operation_security is not None:
        return list(operation_security)
    return list(document.get("security") or [])


def synthesize_security_params(
    requirements: list[Mapping[str, Any]],
    schemes: Mapping[str, Any],
    string_shape: Mapping[str, Any],
) -> list[dict[str, Any]]:
    """Turn security requirements into header/query/cookie parameters.

    Only a single requirement marks its parameters required: several
    requirements are alternatives, and any one of them may be satisfied.

    Args:
        requirements: Security requirement objects (scheme name -> scopes).
        schemes: The document's security scheme registry.
        string_shape: Version-specific way of declaring a string parameter,
                      e.g. {"schema": {"type": "string"}} or {"type": "string"}.
    """
    scheme_names: list[str] = []
    for requirement in requirements:
        for name in requirement:
            if name not in scheme_names:
                scheme_names.append(name)

    required = len(requirements) == 1
    params = []
    for name in scheme_names:
        scheme = schemes.get(name)
        if scheme is None:
            logger.debug("Security scheme '%s' is not declared, skipping", name)
            continue
        if scheme.get("type") == "apiKey":
            param: dict[str, Any] = {"name": scheme["name"], "in": scheme["in"]}
        else:
            param = {"name": "Authorization", "in": "header"}
        param.update(string_shape)
        param["required"] = required
        params.append(param)
    return params


def _pointer_key(ref: str, prefix: str) -> str | None:
    """Return the registry key a JSON pointer names, or None if it points elsewhere."""
    if not ref.startswith(prefix):
        return None
    key = ref[len(prefix):]
    if not key or "/" in key:
        return None
    return key.replace("~1", "/").replace("~0", "~")


def _merge(
    metadata: OperationMetadata,
    security_params: list[dict[str, Any]],
) -> list[Mapping[str, Any]]:
    # New list: the metadata's own parameter lists must not grow.
    operation_params = metadata.operation.get("parameters") or []
    path_item_params = metadata.path_item.parameters
    return [*operation_params, *path_item_params, *security_params]


class OpenAPI3ParameterResolver:
    """Resolves parameters for OpenAPI 3.x documents.

    Swagger 2 registries (top-level parameters, securityDefinitions) and
    #/parameters/ refs are reported as deprecated and treated as absent.
    """

    REF_PREFIX = "#/components/parameters/"
    STRING_SHAPE = {"schema": {"type": "string"}}

    def expand_parameters(
        self,
        metadata: OperationMetadata,
        document: Mapping[str, Any],
        example: ExampleProvider,
    ) -> list[Mapping[str, Any]]:
        merged = _merge(metadata, self.derive_security_params(metadata, document))
        resolved = [
            self.resolve_parameter(p["$ref"], document) if "$ref" in p else p
            for p in merged
        ]
        return drop_unsupplied(dedupe_by_name(resolved), example)

    def derive_security_params(
        self, metadata: OperationMetadata, document: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        return synthesize_security_params(
            security_requirements(metadata, document),
            self.security_schemes(document),
            self.STRING_SHAPE,
        )

    def security_schemes(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        if "securityDefinitions" in document:
            warn_deprecated(
                "securityDefinitions is replaced in OpenAPI 3. "
                "Rename it to components/securitySchemes"
            )
        components = document.get("components") or {}
        return components.get("securitySchemes") or {}

    def resolve_parameter(self, ref: str, document: Mapping[str, Any]) -> Mapping[str, Any]:
        if ref.startswith("#/parameters/"):
            warn_deprecated(
                "#/parameters/ refs are replaced in OpenAPI 3. "
                "Rename them to #/components/parameters/"
            )
            raise ResolutionError(ref)

        key = _pointer_key(ref, self.REF_PREFIX)
        definitions = self.parameter_definitions(document)
        if key is None or key not in definitions:
            raise ResolutionError(ref)
        return definitions[key]

    def parameter_definitions(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        if "parameters" in document:
            warn_deprecated(
                "Top-level parameters are replaced in OpenAPI 3. "
                "Rename them to components/parameters"
            )
        components = document.get("components") or {}
        return components.get("parameters") or {}


class Swagger2ParameterResolver:
    """Resolves parameters for Swagger 2.0 documents.

    Reusable parameters live under the top-level parameters key and
    security schemes under securityDefinitions.
    """

    REF_PREFIX = "#/parameters/"
    STRING_SHAPE = {"type": "string"}

    def expand_parameters(
        self,
        metadata: OperationMetadata,
        document: Mapping[str, Any],
        example: ExampleProvider,
    ) -> list[Mapping[str, Any]]:
        merged = _merge(metadata, self.derive_security_params(metadata, document))
        resolved = [
            self.resolve_parameter(p["$ref"], document) if "$ref" in p else p
            for p in merged
        ]
        return drop_unsupplied(dedupe_by_name(resolved), example)

    def derive_security_params(
        self, metadata: OperationMetadata, document: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        return synthesize_security_params(
            security_requirements(metadata, document),
            document.get("securityDefinitions") or {},
            self.STRING_SHAPE,
        )

    def resolve_parameter(self, ref: str, document: Mapping[str, Any]) -> Mapping[str, Any]:
        key = _pointer_key(ref, self.REF_PREFIX)
        definitions = document.get("parameters") or {}
        if key is None or key not in definitions:
            raise ResolutionError(ref)
        return definitions[key]
