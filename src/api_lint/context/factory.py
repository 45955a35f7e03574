"""Build a Context from text, files or an already parsed mapping."""

import logging
from pathlib import Path
from typing import Any

from api_lint.errors import DocumentError
from api_lint.parser.detect import Dialect, detect_dialect
from api_lint.parser.loader import LineIndex, load_file, load_text

from .base import Context
from .openapi import OpenApiContext
from .swagger import SwaggerContext

logger = logging.getLogger(__name__)

_ADAPTERS: dict[Dialect, type[Context]] = {
    Dialect.SWAGGER2: SwaggerContext,
    Dialect.OPENAPI3: OpenApiContext,
}


def context_from_mapping(doc: Any, lines: LineIndex | None = None) -> Context:
    """Wrap a parsed document, detecting its dialect."""
    dialect = detect_dialect(doc)
    logger.debug("Detected dialect %s", dialect.value)
    return _ADAPTERS[dialect](doc, lines)


def create_context(text: str) -> Context:
    """Parse YAML/JSON text and wrap it in the matching adapter."""
    loaded = load_text(text)
    return context_from_mapping(loaded.data, loaded.lines)


def context_from_file(file_path: Path) -> Context:
    loaded = load_file(file_path)
    return context_from_mapping(loaded.data, loaded.lines)


def swagger_context(text: str) -> SwaggerContext:
    """Parse text as Swagger 2.0 without dialect detection."""
    return SwaggerContext(*_load_mapping(text))


def openapi_context(text: str) -> OpenApiContext:
    """Parse text as OpenAPI 3.x without dialect detection."""
    return OpenApiContext(*_load_mapping(text))


def _load_mapping(text: str) -> tuple[dict, LineIndex]:
    loaded = load_text(text)
    if not isinstance(loaded.data, dict):
        raise DocumentError("API description must be a mapping at the top level")
    return loaded.data, loaded.lines
