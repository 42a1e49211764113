"""Pytest configuration and fixtures for oas-request tests.

This file provides:
- make_metadata: Builds OperationMetadata with sensible defaults
- Fixtures: Swagger 2 and OpenAPI 3 documents shared across test modules
"""

from __future__ import annotations

import copy
from typing import Any

import pytest

from oas_request.models import OperationMetadata, PathItemMetadata


def make_metadata(
    template: str = "/pets",
    verb: str = "get",
    operation: dict[str, Any] | None = None,
    path_parameters: list[dict[str, Any]] | None = None,
    document: str | None = None,
) -> OperationMetadata:
    """Create OperationMetadata for testing.

    Prefer this over constructing OperationMetadata directly - it documents
    which fields tests typically vary.
    """
    return OperationMetadata(
        verb=verb,
        path_item=PathItemMetadata(template=template, parameters=path_parameters or []),
        operation=operation or {},
        document=document,
    )


OPENAPI3_DOCUMENT: dict[str, Any] = {
    "openapi": "3.0.3",
    "info": {"title": "Petstore", "version": "1.0"},
    "servers": [
        {
            "url": "https://{host}/{version}",
            "variables": {
                "host": {"default": "api.example.com"},
                "version": {"default": "v1", "staging": "v1-beta"},
            },
        }
    ],
    "security": [{"api_key": []}],
    "components": {
        "securitySchemes": {
            "api_key": {"type": "apiKey", "name": "api_key", "in": "header"},
            "bearer": {"type": "http", "scheme": "bearer"},
        },
        "parameters": {
            "limit": {
                "name": "limit",
                "in": "query",
                "required": False,
                "schema": {"type": "integer"},
            },
            "trace": {
                "name": "X-Trace-Id",
                "in": "header",
                "required": False,
                "schema": {"type": "string"},
            },
        },
    },
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "parameters": [
                    {"$ref": "#/components/parameters/limit"},
                    {
                        "name": "tags",
                        "in": "query",
                        "required": False,
                        "schema": {"type": "array", "items": {"type": "string"}},
                        "style": "form",
                        "explode": False,
                    },
                ],
            },
            "post": {
                "operationId": "createPet",
                "requestBody": {
                    "content": {
                        "application/x-www-form-urlencoded": {
                            "schema": {
                                "type": "object",
                                "required": ["name", "address"],
                                "properties": {
                                    "name": {"type": "string"},
                                    "nickname": {"type": "string"},
                                    "address": {
                                        "type": "object",
                                        "required": ["city"],
                                        "properties": {
                                            "city": {"type": "string"},
                                            "zip": {"type": "string"},
                                        },
                                    },
                                },
                            }
                        }
                    }
                },
            },
        },
        "/pets/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
            ],
            "get": {"operationId": "getPet", "produces": ["application/json"]},
            "put": {
                "operationId": "updatePet",
                "parameters": [
                    {"name": "pet", "in": "body", "required": True, "schema": {"type": "object"}},
                ],
                "requestBody": {
                    "content": {"application/json": {"schema": {"type": "object"}}}
                },
            },
        },
    },
}


SWAGGER2_DOCUMENT: dict[str, Any] = {
    "swagger": "2.0",
    "info": {"title": "Petstore", "version": "1.0"},
    "basePath": "/api",
    "consumes": ["application/json"],
    "produces": ["application/json"],
    "securityDefinitions": {
        "api_key": {"type": "apiKey", "name": "key", "in": "query"},
    },
    "parameters": {
        "ids": {
            "name": "ids",
            "in": "query",
            "required": True,
            "type": "array",
            "items": {"type": "integer"},
            "collectionFormat": "pipes",
        },
    },
    "paths": {
        "/pets": {
            "get": {
                "operationId": "listPets",
                "parameters": [{"$ref": "#/parameters/ids"}],
            },
            "post": {
                "operationId": "createPet",
                "consumes": ["application/x-www-form-urlencoded"],
                "parameters": [
                    {"name": "name", "in": "formData", "required": True, "type": "string"},
                    {"name": "age", "in": "formData", "required": False, "type": "integer"},
                ],
            },
        },
        "/pets/{id}": {
            "put": {
                "operationId": "updatePet",
                "parameters": [
                    {"name": "id", "in": "path", "required": True, "type": "string"},
                    {"name": "pet", "in": "body", "required": True, "schema": {"type": "object"}},
                ],
            },
        },
    },
}


@pytest.fixture
def openapi3_document() -> dict[str, Any]:
    return copy.deepcopy(OPENAPI3_DOCUMENT)


@pytest.fixture
def swagger2_document() -> dict[str, Any]:
    return copy.deepcopy(SWAGGER2_DOCUMENT)
