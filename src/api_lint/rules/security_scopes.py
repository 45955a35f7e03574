"""Secure endpoints with OAuth2 scopes.

Every operation must be protected by a declared security scheme, and any
OAuth2 scope it requires must be one the scheme declares.
"""

import logging

from api_lint.config import ScopeRuleConfig
from api_lint.context.base import Context, Operation, SchemeKind, SecurityRequirement, SecurityScheme
from api_lint.core.violation import Violation

from .base import Rule

logger = logging.getLogger(__name__)

NOT_SECURED_MESSAGE = "Endpoint is not secured by scope(s)"


class SecureAllEndpointsWithScopesRule(Rule):
    rule_id = "secure-all-endpoints-with-scopes"
    title = "Secure Endpoints with OAuth 2.0 Scopes"

    def __init__(self, config: ScopeRuleConfig | None = None):
        self.config = config or ScopeRuleConfig()

    def check(self, context: Context) -> list[Violation]:
        return self.check_defined_scope_formats(context) + self.check_operations_are_scoped(context)

    def check_defined_scope_formats(self, context: Context) -> list[Violation]:
        """Every scope declared by an oauth2 scheme must match ``scope_regex``."""
        pattern = self.config.scope_regex
        violations = []
        for scheme in context.security_schemes().values():
            if scheme.kind is not SchemeKind.OAUTH2:
                continue
            for block in scheme.scope_blocks:
                for name in block.names:
                    if not pattern.fullmatch(name):
                        violations.append(Violation(
                            description=f"scope '{name}' does not match regex '{pattern.pattern}'",
                            pointer=block.pointer,
                        ))
        return violations

    def check_operations_are_scoped(self, context: Context) -> list[Violation]:
        """Every operation outside the whitelist must be secured by declared scopes."""
        schemes = context.security_schemes()
        default = context.default_security()
        violations = []
        for operation in context.operations():
            if self.config.is_whitelisted(operation.path):
                logger.debug("Skipping whitelisted path %s", operation.path)
                continue
            violation = self._check_operation(context, operation, schemes, default)
            if violation is not None:
                violations.append(violation)
        return violations

    def _check_operation(
        self,
        context: Context,
        operation: Operation,
        schemes: dict[str, SecurityScheme],
        default: SecurityRequirement | None,
    ) -> Violation | None:
        own = context.operation_security(operation)
        requirement = own if own is not None else default
        if requirement is None:
            return Violation(description=NOT_SECURED_MESSAGE, pointer=operation.pointer)

        declared = [a for a in requirement.alternatives if _is_declared(a, schemes)]
        if not declared:
            return Violation(description=NOT_SECURED_MESSAGE, pointer=operation.pointer)
        # Alternatives are OR-ed: one fully satisfied alternative secures the operation.
        if any(not _undefined_scopes(alternative, schemes) for alternative in declared):
            return None

        undefined = []
        for alternative in requirement.alternatives:
            for pair in _undefined_scopes(alternative, schemes):
                if pair not in undefined:
                    undefined.append(pair)
        pointer = own.pointer if own is not None else operation.pointer
        return Violation(
            description="Endpoint is secured by undefined OAuth2 scope(s): " + ", ".join(undefined),
            pointer=pointer,
        )


def _is_declared(alternative: dict[str, tuple[str, ...]], schemes: dict[str, SecurityScheme]) -> bool:
    # An empty alternative ({}) means anonymous access, which secures nothing.
    return bool(alternative) and all(name in schemes for name in alternative)


def _undefined_scopes(alternative: dict[str, tuple[str, ...]], schemes: dict[str, SecurityScheme]) -> list[str]:
    """``scheme:scope`` pairs required from oauth2 schemes that do not declare them."""
    undefined = []
    for name, scopes in alternative.items():
        scheme = schemes.get(name)
        # Unknown schemes and non-oauth2 kinds authenticate without scopes.
        if scheme is None or scheme.kind is not SchemeKind.OAUTH2:
            continue
        for scope in scopes:
            pair = f"{name}:{scope}"
            if scope not in scheme.scopes and pair not in undefined:
                undefined.append(pair)
    return undefined
