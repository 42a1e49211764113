"""CLI entry point for oas-request.

Handles argument parsing and dispatches to list-operations, build or send.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from oas_request.config_loader import ConfigError, DocumentRegistry, load_document
from oas_request.errors import RequestBuildError
from oas_request.example import MappingExample
from oas_request.executor import Executor, ExecutorError
from oas_request.metadata import list_operations, operation_metadata
from oas_request.models import Request
from oas_request.request_factory import build_request

DEFAULT_TIMEOUT = 30.0


def positive_float(value: str) -> float:
    """Parse and validate a positive float value.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.
    """
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


@dataclass
class ListOperationsArgs:
    """Parsed arguments for list-operations mode."""

    spec: Path | None
    config: Path | None
    document: str | None


@dataclass
class BuildArgs:
    """Parsed arguments for build mode."""

    spec: Path | None
    config: Path | None
    document: str | None
    path: str
    method: str
    values: Path | None
    server: str | None
    verbose: bool


@dataclass
class SendArgs(BuildArgs):
    """Parsed arguments for send mode."""

    base_url: str = ""
    timeout: float = DEFAULT_TIMEOUT


def _add_document_arguments(parser: argparse.ArgumentParser) -> None:
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--spec",
        type=Path,
        help="Path to an OpenAPI document (YAML or JSON)",
    )
    source.add_argument(
        "--config",
        type=Path,
        help="Path to a config file listing named documents",
    )
    parser.add_argument(
        "--document",
        help="Document name from --config (defaults to the configured default)",
    )


def _add_build_arguments(parser: argparse.ArgumentParser) -> None:
    _add_document_arguments(parser)
    parser.add_argument(
        "--path",
        required=True,
        help="Path template as declared in the document, e.g. /pets/{id}",
    )
    parser.add_argument(
        "--method",
        required=True,
        help="HTTP method of the operation",
    )
    parser.add_argument(
        "--values",
        type=Path,
        help="YAML or JSON file mapping parameter names to example values",
    )
    parser.add_argument(
        "--server",
        help="Server variable key used to derive the base path (default: 'default')",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Log debug output to stderr",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with list-operations, build and send subcommands."""
    parser = argparse.ArgumentParser(
        prog="oas-request",
        description="Build concrete HTTP requests from OpenAPI operations and example values.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Execution mode")

    list_ops_parser = subparsers.add_parser(
        "list-operations",
        help="List all operations declared in a document",
    )
    _add_document_arguments(list_ops_parser)

    build_cmd = subparsers.add_parser(
        "build",
        help="Build a request and print it as JSON",
    )
    _add_build_arguments(build_cmd)

    send_cmd = subparsers.add_parser(
        "send",
        help="Build a request and send it to a target",
    )
    _add_build_arguments(send_cmd)
    send_cmd.add_argument(
        "--base-url",
        required=True,
        help="Scheme and host of the target, e.g. http://localhost:8000",
    )
    send_cmd.add_argument(
        "--timeout",
        type=positive_float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )

    return parser


def parse_args(args: list[str] | None = None) -> ListOperationsArgs | BuildArgs | SendArgs:
    """Parse command-line arguments and return typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "list-operations":
        return ListOperationsArgs(
            spec=namespace.spec, config=namespace.config, document=namespace.document
        )

    build_kwargs: dict[str, Any] = dict(
        spec=namespace.spec,
        config=namespace.config,
        document=namespace.document,
        path=namespace.path,
        method=namespace.method.lower(),
        values=namespace.values,
        server=namespace.server,
        verbose=namespace.verbose,
    )
    if namespace.command == "build":
        return BuildArgs(**build_kwargs)
    return SendArgs(**build_kwargs, base_url=namespace.base_url, timeout=namespace.timeout)


def configure_logging(verbose: bool) -> None:
    """Log to stderr; deprecation warnings are routed through logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    logging.captureWarnings(True)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        parsed = parse_args(argv)
        configure_logging(getattr(parsed, "verbose", False))

        if isinstance(parsed, ListOperationsArgs):
            return run_list_operations(parsed)
        elif isinstance(parsed, SendArgs):
            return run_send(parsed)
        else:
            return run_build(parsed)

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def _load(args: ListOperationsArgs | BuildArgs) -> tuple[dict[str, Any], DocumentRegistry | None]:
    if args.spec is not None:
        return load_document(args.spec), None
    registry = DocumentRegistry.from_config_file(args.config)
    return registry.get(args.document), registry


def load_values(values_path: Path | None) -> dict[str, Any]:
    """Load example values from a YAML or JSON mapping."""
    if values_path is None:
        return {}
    if not values_path.exists():
        raise ConfigError(f"Values file not found: {values_path}")
    try:
        with open(values_path, "r", encoding="utf-8") as f:
            if values_path.suffix.lower() in (".yaml", ".yml"):
                values = yaml.safe_load(f)
            else:
                values = json.load(f)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to parse values file: {e}") from e
    if values is None:
        return {}
    if not isinstance(values, dict):
        raise ConfigError("Values file must contain a mapping")
    return values


def run_list_operations(args: ListOperationsArgs) -> int:
    """Print every operation as METHOD TEMPLATE (operationId)."""
    try:
        document, _ = _load(args)
    except ConfigError as e:
        print(f"Error loading document: {e}", file=sys.stderr)
        return 1

    operations = sorted(list_operations(document), key=lambda op: (op[1], op[0]))
    for verb, template, operation_id in operations:
        suffix = f" ({operation_id})" if operation_id else ""
        print(f"{verb.upper()} {template}{suffix}")
    print(f"Total: {len(operations)} operations")
    return 0


def _build(args: BuildArgs) -> Request:
    document, registry = _load(args)
    metadata = operation_metadata(document, args.path, args.method, args.document)
    example = MappingExample(load_values(args.values))
    return build_request(
        metadata,
        example,
        document=document,
        registry=registry,
        use_server=args.server,
    )


def run_build(args: BuildArgs) -> int:
    """Build the request and print it as JSON."""
    try:
        request = _build(args)
    except (ConfigError, RequestBuildError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(request.model_dump_json(indent=2))
    return 0


def run_send(args: SendArgs) -> int:
    """Build the request, send it, and print the status line and body."""
    try:
        request = _build(args)
        with Executor(args.base_url, timeout=args.timeout) as executor:
            response = executor.submit(request)
    except (ConfigError, RequestBuildError, ExecutorError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"{request.verb.upper()} {request.path} -> {response.status_code}")
    if response.text:
        print(response.text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
