"""Detect the dialect of an API description."""

from enum import Enum
from typing import Any

from api_lint.errors import DocumentError


class Dialect(str, Enum):
    SWAGGER2 = "swagger2"
    OPENAPI3 = "openapi3"


def detect_dialect(doc: Any) -> Dialect:
    """Detect the dialect of a parsed document.

    Swagger documents carry a top-level ``swagger: "2.0"``, OpenAPI
    documents an ``openapi: 3.x.y`` version field.
    """
    if not isinstance(doc, dict):
        raise DocumentError("API description must be a mapping at the top level")

    if "openapi" in doc and str(doc["openapi"]).startswith("3"):
        return Dialect.OPENAPI3
    if "swagger" in doc and str(doc["swagger"]).startswith("2"):
        return Dialect.SWAGGER2

    version = doc.get("openapi", doc.get("swagger"))
    if version is None:
        raise DocumentError("Not an API description: missing 'swagger' or 'openapi' version field")
    raise DocumentError(f"Unsupported API description version: {version}")
