"""OpenAPI 3.x adapter.

OAuth2 scopes live per flow (``flows/<flow>/scopes``), so one scheme can
carry several scope blocks.
"""

from collections.abc import Iterator

from api_lint.core.pointer import ROOT, JsonPointer
from api_lint.parser.detect import Dialect

from .base import Context, Response, ScopeBlock


class OpenApiContext(Context):
    dialect = Dialect.OPENAPI3

    @property
    def security_schemes_pointer(self) -> JsonPointer:
        return ROOT.plus("components", "securitySchemes")

    def _scope_blocks(self, scheme: dict, pointer: JsonPointer) -> Iterator[ScopeBlock]:
        flows = scheme.get("flows")
        if not isinstance(flows, dict):
            return
        for flow_name, flow in flows.items():
            if not isinstance(flow, dict) or not isinstance(flow.get("scopes"), dict):
                continue
            yield ScopeBlock(
                pointer=pointer.plus("flows", flow_name, "scopes"),
                names=tuple(str(s) for s in flow["scopes"]),
            )

    def response_has_content(self, response: Response) -> bool:
        node = self.follow_ref(response.node)
        return isinstance(node, dict) and bool(node.get("content"))
