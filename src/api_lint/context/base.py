"""Dialect-agnostic view of one parsed API description.

Rules only ever talk to a ``Context``; the Swagger 2.0 and OpenAPI 3.x
adapters differ in where they find security schemes and how a response
declares a body. A context never mutates the document it wraps.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from enum import Enum
from typing import Any, NamedTuple

from pydantic import BaseModel, ConfigDict

from api_lint.core.pointer import ROOT, JsonPointer
from api_lint.parser.detect import Dialect
from api_lint.parser.loader import LineIndex

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

PATHS = ROOT.plus("paths")


class SchemeKind(str, Enum):
    OAUTH2 = "oauth2"
    API_KEY = "apiKey"
    HTTP = "http"
    BASIC = "basic"
    OPEN_ID_CONNECT = "openIdConnect"
    MUTUAL_TLS = "mutualTLS"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, value: Any) -> "SchemeKind":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class ScopeBlock(BaseModel):
    """A ``scopes`` map declared by a scheme (one per OAuth2 flow in OpenAPI 3)."""

    model_config = ConfigDict(frozen=True)

    pointer: JsonPointer
    names: tuple[str, ...]


class SecurityScheme(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    kind: SchemeKind
    pointer: JsonPointer
    scope_blocks: tuple[ScopeBlock, ...] = ()

    @property
    def scopes(self) -> frozenset[str]:
        """All scope names declared by this scheme; empty unless oauth2."""
        return frozenset(name for block in self.scope_blocks for name in block.names)


class SecurityRequirement(BaseModel):
    """Alternatives of scheme name -> required scopes.

    Any alternative secures the operation (OR); within an alternative every
    scheme must be satisfied (AND).
    """

    model_config = ConfigDict(frozen=True)

    pointer: JsonPointer
    alternatives: tuple[dict[str, tuple[str, ...]], ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.alternatives


class Operation(NamedTuple):
    path: str
    method: str
    node: dict
    pointer: JsonPointer

    @property
    def path_pointer(self) -> JsonPointer:
        return self.pointer.parent


class Response(NamedTuple):
    code: str
    node: Any
    pointer: JsonPointer


class Context(ABC):
    """Read-only query surface over one API description."""

    dialect: Dialect

    def __init__(self, doc: dict, lines: LineIndex | None = None):
        self.doc = doc
        self._lines = lines or {}

    @property
    @abstractmethod
    def security_schemes_pointer(self) -> JsonPointer:
        """Location of the scheme name -> scheme mapping."""

    @abstractmethod
    def _scope_blocks(self, scheme: dict, pointer: JsonPointer) -> Iterator[ScopeBlock]:
        """Yield the scope maps declared by an oauth2 scheme node."""

    @abstractmethod
    def response_has_content(self, response: Response) -> bool:
        """Whether a response declares a body."""

    def operations(self) -> Iterator[Operation]:
        """Yield every operation in declaration order.

        Path items or operations that are not mappings are skipped so one
        broken node does not block checks on the rest of the document.
        """
        paths = self.doc.get("paths")
        if paths is None:
            return
        if not isinstance(paths, dict):
            logger.warning("Ignoring %s: expected a mapping", PATHS)
            return
        for path, item in paths.items():
            path = str(path)
            path_pointer = PATHS.plus(path)
            if not isinstance(item, dict):
                logger.warning("Skipping path item %s: expected a mapping", path_pointer)
                continue
            for method, node in item.items():
                if method not in HTTP_METHODS:
                    continue
                pointer = path_pointer.plus(method)
                if not isinstance(node, dict):
                    logger.warning("Skipping operation %s: expected a mapping", pointer)
                    continue
                yield Operation(path=path, method=method, node=node, pointer=pointer)

    def responses(self, operation: Operation) -> Iterator[Response]:
        """Yield the declared responses of an operation, codes as strings."""
        responses = operation.node.get("responses")
        if not isinstance(responses, dict):
            return
        for code, node in responses.items():
            code = str(code)
            yield Response(code=code, node=node, pointer=operation.pointer.plus("responses", code))

    def security_schemes(self) -> dict[str, SecurityScheme]:
        container = self.resolve_or_none(self.security_schemes_pointer)
        if not isinstance(container, dict):
            return {}

        schemes = {}
        for name, node in container.items():
            name = str(name)
            pointer = self.security_schemes_pointer.plus(name)
            if not isinstance(node, dict):
                logger.warning("Skipping security scheme %s: expected a mapping", pointer)
                continue
            kind = SchemeKind.of(node.get("type"))
            blocks = tuple(self._scope_blocks(node, pointer)) if kind is SchemeKind.OAUTH2 else ()
            schemes[name] = SecurityScheme(name=name, kind=kind, pointer=pointer, scope_blocks=blocks)
        return schemes

    def default_security(self) -> SecurityRequirement | None:
        return self._read_security(self.doc, ROOT)

    def operation_security(self, operation: Operation) -> SecurityRequirement | None:
        """The operation's own requirement, or None when it inherits the default.

        An explicit ``security: []`` yields an empty requirement, not None.
        """
        return self._read_security(operation.node, operation.pointer)

    def line_for(self, pointer: JsonPointer) -> int | None:
        return self._lines.get(pointer.tokens)

    def resolve(self, pointer: JsonPointer) -> Any:
        """Return the node at ``pointer``; raises KeyError if there is none."""
        node: Any = self.doc
        for token in pointer.tokens:
            if isinstance(node, dict):
                if token in node:
                    node = node[token]
                    continue
                # YAML keys such as response codes load as ints
                matches = [value for key, value in node.items() if str(key) == token]
                if not matches:
                    raise KeyError(str(pointer))
                node = matches[0]
            elif isinstance(node, list) and token.isdigit() and int(token) < len(node):
                node = node[int(token)]
            else:
                raise KeyError(str(pointer))
        return node

    def resolve_or_none(self, pointer: JsonPointer) -> Any:
        try:
            return self.resolve(pointer)
        except KeyError:
            return None

    def follow_ref(self, node: Any) -> Any:
        """Follow in-document ``$ref`` chains (``#/...``) to their target.

        External or dangling refs and ref cycles yield None.
        """
        seen = set()
        while isinstance(node, dict) and isinstance(node.get("$ref"), str):
            ref = node["$ref"]
            if not ref.startswith("#") or ref in seen:
                logger.debug("Not following $ref %r", ref)
                return None
            seen.add(ref)
            try:
                pointer = JsonPointer.parse(ref[1:])
            except ValueError:
                return None
            node = self.resolve_or_none(pointer)
        return node

    def exists(self, pointer: JsonPointer) -> bool:
        try:
            self.resolve(pointer)
        except KeyError:
            return False
        return True

    def _read_security(self, node: dict, pointer: JsonPointer) -> SecurityRequirement | None:
        if "security" not in node:
            return None
        pointer = pointer.plus("security")
        value = node["security"]
        if not isinstance(value, list):
            logger.warning("Ignoring %s: expected a list of requirements", pointer)
            return None

        alternatives = []
        for index, alternative in enumerate(value):
            if not isinstance(alternative, dict):
                logger.warning("Ignoring %s: expected a mapping", pointer.plus(index))
                continue
            alternatives.append({
                str(scheme): tuple(str(s) for s in scopes) if isinstance(scopes, list) else ()
                for scheme, scopes in alternative.items()
            })
        return SecurityRequirement(pointer=pointer, alternatives=tuple(alternatives))
