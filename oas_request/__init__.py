"""Build executable HTTP requests from OpenAPI operations and example values."""

from oas_request.errors import (
    DeprecatedConstructWarning,
    MissingRequiredValue,
    RequestBuildError,
    ResolutionError,
)
from oas_request.example import ExampleProvider, MappingExample
from oas_request.models import OperationMetadata, PathItemMetadata, Request, SpecVersion
from oas_request.request_factory import build_request, detect_version

__version__ = "0.1.0"

__all__ = [
    "DeprecatedConstructWarning",
    "ExampleProvider",
    "MappingExample",
    "MissingRequiredValue",
    "OperationMetadata",
    "PathItemMetadata",
    "Request",
    "RequestBuildError",
    "ResolutionError",
    "SpecVersion",
    "build_request",
    "detect_version",
]
