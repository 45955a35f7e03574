import copy
import textwrap

import pytest

from api_lint.context.base import SchemeKind
from api_lint.context.factory import context_from_mapping, create_context, openapi_context, swagger_context
from api_lint.context.openapi import OpenApiContext
from api_lint.context.swagger import SwaggerContext
from api_lint.core.pointer import ROOT, JsonPointer
from api_lint.engine import RulesEngine, default_rules
from api_lint.errors import DocumentError
from api_lint.parser.detect import Dialect

SWAGGER_DOC = textwrap.dedent("""\
    swagger: "2.0"
    securityDefinitions:
      oauth2:
        type: oauth2
        flow: password
        scopes:
          pet.read: Read pets
          pet.write: Write pets
      key:
        type: apiKey
        in: header
        name: X-Key
      legacy:
        type: basic
        scopes:
          indexer: Not a real scope
    security:
      - oauth2: [pet.read]
    paths:
      /pets:
        parameters:
          - name: limit
            in: query
        get:
          responses:
            200:
              description: OK
              schema:
                type: array
            204:
              description: Nothing
        post:
          security: []
          responses:
            201:
              description: Created
      /broken: oops
      /half-broken:
        get: [not, an, operation]
        delete:
          security:
            - key: []
          responses:
            default:
              description: Error
""")

OPENAPI_DOC = textwrap.dedent("""\
    openapi: 3.0.1
    paths:
      /things:
        put:
          responses:
            "204":
              description: Updated
              content:
                application/json:
                  schema:
                    type: object
            "200":
              description: OK
    components:
      securitySchemes:
        oauth2:
          type: oauth2
          flows:
            clientCredentials:
              tokenUrl: https://example.com/token
              scopes:
                things.read: Read
            authorizationCode:
              authorizationUrl: https://example.com/auth
              tokenUrl: https://example.com/token
              scopes:
                things.write: Write
        BearerAuth:
          type: http
          scheme: bearer
        oidc:
          type: openIdConnect
          openIdConnectUrl: https://example.com/.well-known/openid-configuration
""")


class TestContextFactory:
    def test_create_context_detects_swagger(self):
        context = create_context(SWAGGER_DOC)
        assert isinstance(context, SwaggerContext)
        assert context.dialect is Dialect.SWAGGER2

    def test_create_context_detects_openapi(self):
        context = create_context(OPENAPI_DOC)
        assert isinstance(context, OpenApiContext)
        assert context.dialect.value == "openapi3"

    def test_unknown_document(self):
        with pytest.raises(DocumentError):
            create_context("title: not an api\n")

    def test_forced_dialect_requires_mapping(self):
        with pytest.raises(DocumentError):
            swagger_context("- a\n- b\n")

    def test_mapping_has_no_lines(self):
        context = context_from_mapping({"openapi": "3.0.0", "paths": {"/a": {"get": {}}}})
        assert context.line_for(ROOT.plus("paths", "/a", "get")) is None


class TestOperations:
    def test_declaration_order_and_methods_only(self):
        context = swagger_context(SWAGGER_DOC)
        ops = [(op.path, op.method) for op in context.operations()]
        assert ops == [("/pets", "get"), ("/pets", "post"), ("/half-broken", "delete")]

    def test_pointers(self):
        op = next(swagger_context(SWAGGER_DOC).operations())
        assert str(op.pointer) == "/paths/~1pets/get"
        assert str(op.path_pointer) == "/paths/~1pets"

    def test_restartable(self):
        context = swagger_context(SWAGGER_DOC)
        assert list(context.operations()) == list(context.operations())

    def test_no_paths(self):
        assert list(swagger_context("swagger: 2.0").operations()) == []

    def test_paths_not_a_mapping(self):
        assert list(openapi_context("openapi: 3.0.0\npaths: [a]\n").operations()) == []


class TestSecuritySchemes:
    def test_swagger_schemes(self):
        schemes = swagger_context(SWAGGER_DOC).security_schemes()
        assert list(schemes) == ["oauth2", "key", "legacy"]
        assert schemes["oauth2"].kind is SchemeKind.OAUTH2
        assert schemes["oauth2"].scopes == {"pet.read", "pet.write"}
        assert str(schemes["oauth2"].scope_blocks[0].pointer) == "/securityDefinitions/oauth2/scopes"
        assert schemes["key"].kind is SchemeKind.API_KEY
        assert schemes["key"].scopes == frozenset()

    def test_non_oauth2_schemes_declare_no_scopes(self):
        schemes = swagger_context(SWAGGER_DOC).security_schemes()
        assert schemes["legacy"].kind is SchemeKind.BASIC
        assert schemes["legacy"].scope_blocks == ()

    def test_openapi_scope_block_per_flow(self):
        schemes = openapi_context(OPENAPI_DOC).security_schemes()
        oauth2 = schemes["oauth2"]
        assert oauth2.scopes == {"things.read", "things.write"}
        assert [str(b.pointer) for b in oauth2.scope_blocks] == [
            "/components/securitySchemes/oauth2/flows/clientCredentials/scopes",
            "/components/securitySchemes/oauth2/flows/authorizationCode/scopes",
        ]
        assert schemes["BearerAuth"].kind is SchemeKind.HTTP
        assert schemes["oidc"].kind is SchemeKind.OPEN_ID_CONNECT

    def test_no_schemes(self):
        assert openapi_context("openapi: 3.0.0").security_schemes() == {}

    def test_unknown_kind(self):
        context = openapi_context("openapi: 3.0.0\ncomponents:\n  securitySchemes:\n    x:\n      type: magic\n")
        assert context.security_schemes()["x"].kind is SchemeKind.UNKNOWN


class TestSecurityRequirements:
    def test_default_security(self):
        requirement = swagger_context(SWAGGER_DOC).default_security()
        assert requirement.alternatives == ({"oauth2": ("pet.read",)},)
        assert requirement.pointer == ROOT.plus("security")

    def test_absent_default_security(self):
        assert openapi_context(OPENAPI_DOC).default_security() is None

    def test_operation_security_absent_means_inherit(self):
        context = swagger_context(SWAGGER_DOC)
        get, post, delete = context.operations()
        assert context.operation_security(get) is None

    def test_explicit_empty_security_is_not_absent(self):
        context = swagger_context(SWAGGER_DOC)
        _, post, _ = context.operations()
        requirement = context.operation_security(post)
        assert requirement is not None
        assert requirement.is_empty
        assert str(requirement.pointer) == "/paths/~1pets/post/security"

    def test_empty_scope_list(self):
        context = swagger_context(SWAGGER_DOC)
        *_, delete = context.operations()
        assert context.operation_security(delete).alternatives == ({"key": ()},)

    def test_malformed_security_is_treated_as_absent(self):
        context = openapi_context("openapi: 3.0.0\nsecurity: yes-please\n")
        assert context.default_security() is None


class TestResponses:
    def test_codes_are_strings(self):
        context = swagger_context(SWAGGER_DOC)
        get = next(context.operations())
        responses = list(context.responses(get))
        assert [r.code for r in responses] == ["200", "204"]
        assert str(responses[0].pointer) == "/paths/~1pets/get/responses/200"

    def test_swagger_body_is_schema(self):
        context = swagger_context(SWAGGER_DOC)
        get = next(context.operations())
        ok, no_content = context.responses(get)
        assert context.response_has_content(ok)
        assert not context.response_has_content(no_content)

    def test_openapi_body_is_content(self):
        context = openapi_context(OPENAPI_DOC)
        put = next(context.operations())
        no_content, ok = context.responses(put)
        assert context.response_has_content(no_content)
        assert not context.response_has_content(ok)


class TestNavigation:
    def test_follow_ref(self):
        context = context_from_mapping({
            "openapi": "3.0.0",
            "components": {"responses": {
                "A": {"$ref": "#/components/responses/B"},
                "B": {"description": "Target"},
                "Self": {"$ref": "#/components/responses/Self"},
            }},
        })
        assert context.follow_ref({"$ref": "#/components/responses/A"}) == {"description": "Target"}
        assert context.follow_ref({"description": "inline"}) == {"description": "inline"}
        assert context.follow_ref({"$ref": "#/components/responses/Self"}) is None
        assert context.follow_ref({"$ref": "#/components/responses/Missing"}) is None
        assert context.follow_ref({"$ref": "other.yaml#/B"}) is None

    def test_resolve_integer_keys(self):
        context = swagger_context(SWAGGER_DOC)
        node = context.resolve(JsonPointer.parse("/paths/~1pets/get/responses/200"))
        assert node["description"] == "OK"

    def test_resolve_sequence_index(self):
        context = swagger_context(SWAGGER_DOC)
        assert context.resolve(JsonPointer.parse("/paths/~1pets/parameters/0/name")) == "limit"

    def test_missing_node(self):
        context = swagger_context(SWAGGER_DOC)
        assert not context.exists(JsonPointer.parse("/paths/~1nope"))
        with pytest.raises(KeyError):
            context.resolve(JsonPointer.parse("/paths/~1pets/parameters/7"))

    def test_line_for(self):
        context = swagger_context(SWAGGER_DOC)
        assert context.line_for(JsonPointer.parse("/paths/~1pets/post/security")) == 33

    def test_rules_do_not_mutate_document(self):
        context = swagger_context(SWAGGER_DOC)
        before = copy.deepcopy(context.doc)
        RulesEngine(default_rules()).evaluate(context)
        assert context.doc == before

    def test_every_violation_pointer_resolves(self):
        for text in (SWAGGER_DOC, OPENAPI_DOC):
            context = create_context(text)
            for result in RulesEngine(default_rules()).evaluate(context):
                assert context.exists(JsonPointer.parse(result.pointer)), result
