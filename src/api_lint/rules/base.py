"""The contract every rule implements."""

from abc import ABC, abstractmethod

from api_lint.context.base import Context
from api_lint.core.violation import Violation


class Rule(ABC):
    """A guideline rule: ``check(context)`` returns the violations found.

    Rules hold configuration only; they keep no state between documents.
    """

    rule_id: str
    title: str

    @abstractmethod
    def check(self, context: Context) -> list[Violation]:
        """Run every check of this rule, in a fixed order."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule_id!r})"
