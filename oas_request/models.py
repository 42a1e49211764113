"""Internal data models for oas-request.

All models use Pydantic v2. OpenAPI document content (parameters, schemas,
security schemes) stays as plain mappings; only the values this package
produces or is configured with are modeled.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Spec Version
# =============================================================================


class SpecVersion(str, Enum):
    """Document shape a request is built against."""

    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"


# =============================================================================
# Operation Metadata
# =============================================================================


class PathItemMetadata(BaseModel):
    """The path item enclosing an operation."""

    model_config = ConfigDict(extra="forbid")

    template: str = Field(description="Path with placeholders, e.g., /pets/{id}")
    parameters: list[dict[str, Any]] = Field(
        default_factory=list, description="Parameters shared by every operation on the path"
    )


class OperationMetadata(BaseModel):
    """Everything needed to build one request for one operation.

    operation holds the raw OpenAPI operation object (parameters,
    requestBody, security, consumes, produces). document names an entry in
    the DocumentRegistry when the document is not passed explicitly.
    """

    model_config = ConfigDict(extra="forbid")

    verb: str = Field(description="HTTP method, lowercase")
    path_item: PathItemMetadata = Field(description="Enclosing path item")
    operation: dict[str, Any] = Field(default_factory=dict, description="Raw operation object")
    document: str | None = Field(default=None, description="Document name in the registry")

    @field_validator("verb")
    @classmethod
    def normalize_verb(cls, v: str) -> str:
        return v.lower()


# =============================================================================
# Built Request
# =============================================================================


class Request(BaseModel):
    """A request ready for submission by an HTTP client.

    payload is a mapping for form bodies, a JSON string for other bodies,
    or None when the operation sends no body.
    """

    model_config = ConfigDict(extra="forbid")

    verb: str = Field(description="HTTP method, lowercase")
    path: str = Field(description="Rendered path including the query string")
    headers: dict[str, str] = Field(default_factory=dict, description="Request headers")
    payload: dict[str, Any] | str | None = Field(default=None, description="Body or form data")


# =============================================================================
# Runtime Configuration Models
# =============================================================================


class BuilderConfig(BaseModel):
    """Top-level configuration file structure."""

    model_config = ConfigDict(extra="forbid")

    documents: dict[str, str] = Field(description="Document name -> file path mapping")
    default_document: str | None = Field(
        default=None, description="Document used when metadata names none"
    )
    server: str = Field(
        default="default", description="Server variable key used to derive the base path"
    )

    @field_validator("documents")
    @classmethod
    def check_documents(cls, v: dict[str, str]) -> dict[str, str]:
        if not v:
            raise ValueError("at least one document must be configured")
        return v
