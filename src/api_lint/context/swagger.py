"""Swagger 2.0 adapter."""

from collections.abc import Iterator

from api_lint.core.pointer import ROOT, JsonPointer
from api_lint.parser.detect import Dialect

from .base import Context, Response, ScopeBlock


class SwaggerContext(Context):
    dialect = Dialect.SWAGGER2

    @property
    def security_schemes_pointer(self) -> JsonPointer:
        return ROOT.plus("securityDefinitions")

    def _scope_blocks(self, scheme: dict, pointer: JsonPointer) -> Iterator[ScopeBlock]:
        scopes = scheme.get("scopes")
        if isinstance(scopes, dict):
            yield ScopeBlock(pointer=pointer.plus("scopes"), names=tuple(str(s) for s in scopes))

    def response_has_content(self, response: Response) -> bool:
        node = self.follow_ref(response.node)
        return isinstance(node, dict) and bool(node.get("schema"))
