"""Example Provider - named values supplied by the calling test.

Request construction never infers values. Every path, query, header and
body value is read through the has/get protocol below.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class ExampleProvider(Protocol):
    """Name-indexed read access to example values."""

    def has(self, name: str) -> bool:
        ...

    def get(self, name: str) -> Any:
        ...


class MappingExample:
    """ExampleProvider backed by a mapping.

    A key present with a None value still counts as supplied.

    Usage:
        example = MappingExample({"id": 42, "tags": ["a", "b"]})
        request = build_request(metadata, example, document=doc)
    """

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self._values: dict[str, Any] = {**(values or {}), **kwargs}

    def has(self, name: str) -> bool:
        return name in self._values

    def get(self, name: str) -> Any:
        try:
            return self._values[name]
        except KeyError:
            raise KeyError(f"Example does not define '{name}'") from None

    def __repr__(self) -> str:
        return f"MappingExample({self._values!r})"
