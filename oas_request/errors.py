"""Errors and warnings raised while building requests.

ResolutionError and MissingRequiredValue abort request construction.
DeprecatedConstructWarning is emitted through the warnings module and never
aborts a build.
"""

from __future__ import annotations

import logging
import warnings

logger = logging.getLogger(__name__)


class RequestBuildError(Exception):
    """Base class for request construction errors."""


class ResolutionError(RequestBuildError):
    """Raised when a parameter $ref cannot be found in the document."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"Referenced parameter '{ref}' must be defined")


class MissingRequiredValue(RequestBuildError):
    """Raised when a required parameter or body field has no example value.

    Attributes:
        name: Parameter or flattened body field name.
        location: Where the value was needed (path, query, header, body, ...).
    """

    def __init__(self, name: str, location: str = "body") -> None:
        self.name = name
        self.location = location
        super().__init__(
            f"`{name}` {location} parameter key present, but not defined within the example "
            f"(expose a value named '{name}' in the calling test scope)"
        )


class OperationNotFoundError(RequestBuildError):
    """Raised when a path template or verb is not declared in the document."""


class DeprecatedConstructWarning(FutureWarning):
    """A Swagger 2 construct was found where OpenAPI 3 expects its replacement."""


def warn_deprecated(message: str) -> None:
    """Emit a DeprecatedConstructWarning attributed to the caller's caller."""
    logger.debug("Deprecated construct: %s", message)
    warnings.warn(message, DeprecatedConstructWarning, stacklevel=3)
