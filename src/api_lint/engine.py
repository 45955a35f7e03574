"""Run a list of rules against one document context."""

import logging
from collections.abc import Iterable

from api_lint.config import RulesConfig
from api_lint.context.base import Context
from api_lint.core.violation import Result
from api_lint.rules.base import Rule
from api_lint.rules.security_scopes import SecureAllEndpointsWithScopesRule
from api_lint.rules.status_codes import UseStandardHttpStatusCodesRule

logger = logging.getLogger(__name__)


def default_rules(config: RulesConfig | None = None) -> list[Rule]:
    """Build the built-in rules from a rules configuration."""
    config = config or RulesConfig()
    return [
        SecureAllEndpointsWithScopesRule(config.secure_all_endpoints_with_scopes),
        UseStandardHttpStatusCodesRule(),
    ]


class RulesEngine:
    """Evaluates rules in order and tags each violation with its rule and source line."""

    def __init__(self, rules: Iterable[Rule]):
        self.rules = list(rules)

    def evaluate(self, context: Context) -> list[Result]:
        results = []
        for rule in self.rules:
            try:
                violations = rule.check(context)
            except Exception:
                logger.exception("Rule %s failed on %s document", rule.rule_id, context.dialect.value)
                raise
            logger.debug("Rule %s reported %d violation(s)", rule.rule_id, len(violations))
            results.extend(
                Result(
                    rule_id=rule.rule_id,
                    rule_title=rule.title,
                    description=violation.description,
                    pointer=str(violation.pointer),
                    line=context.line_for(violation.pointer),
                )
                for violation in violations
            )
        return results
