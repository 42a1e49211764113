"""Config Loader - Loads configuration and OpenAPI documents.

Handles loading YAML config files with environment variable substitution,
loading OpenAPI documents from YAML or JSON, and serving documents by name
through DocumentRegistry.
"""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from oas_request.models import BuilderConfig


class ConfigError(Exception):
    """Raised when configuration or document loading fails."""


def load_config(config_path: Path) -> BuilderConfig:
    """Load configuration from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)

    try:
        return BuilderConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def load_document(document_path: Path) -> dict[str, Any]:
    """Load an OpenAPI document. .yaml/.yml files are YAML, anything else JSON."""
    if not document_path.exists():
        raise ConfigError(f"Document not found: {document_path}")

    try:
        with open(document_path, "r", encoding="utf-8") as f:
            if document_path.suffix.lower() in (".yaml", ".yml"):
                document = yaml.safe_load(f)
            else:
                document = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to parse document {document_path}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigError(f"Document must be a mapping: {document_path}")
    return document


def resolve_document_path(config_path: Path, document_ref: str) -> Path:
    """Resolve document_ref relative to config_path's directory. Absolute paths pass through."""
    document_path = Path(document_ref)
    if document_path.is_absolute():
        return document_path
    return (config_path.parent / document_path).resolve()


class DocumentRegistry:
    """Named OpenAPI documents, loaded on first use and cached.

    Usage:
        registry = DocumentRegistry.from_config_file(Path("oas-request.yaml"))
        document = registry.get("v1")
    """

    def __init__(
        self,
        documents: dict[str, Path],
        default_document: str | None = None,
        server: str = "default",
    ) -> None:
        if default_document is not None and default_document not in documents:
            raise ConfigError(f"Default document '{default_document}' is not configured")
        self._paths = dict(documents)
        self._default = default_document
        self._cache: dict[str, dict[str, Any]] = {}
        self.server = server

    @classmethod
    def from_config(cls, config: BuilderConfig, config_path: Path) -> "DocumentRegistry":
        return cls(
            {name: resolve_document_path(config_path, ref) for name, ref in config.documents.items()},
            default_document=config.default_document,
            server=config.server,
        )

    @classmethod
    def from_config_file(cls, config_path: Path) -> "DocumentRegistry":
        return cls.from_config(load_config(config_path), config_path)

    @property
    def names(self) -> list[str]:
        return list(self._paths)

    def get(self, name: str | None = None) -> dict[str, Any]:
        """Return the named document, else the default, else the first configured one."""
        if name is None:
            name = self._default or next(iter(self._paths), None)
        if name is None or name not in self._paths:
            available = ", ".join(self._paths) or "none"
            raise ConfigError(f"Unknown document '{name}'. Available: {available}")

        if name not in self._cache:
            self._cache[name] = load_document(self._paths[name])
        return self._cache[name]


def _substitute_env_vars(data: Any) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item) for item in data]
    return data


def _substitute_string(s: str) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return pattern.sub(replacer, s)
