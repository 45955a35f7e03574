"""Violation values produced by rules, and how they are aggregated."""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from .pointer import JsonPointer


class Violation(BaseModel):
    """A single guideline deviation at one location of the document."""

    model_config = ConfigDict(frozen=True)

    description: str
    pointer: JsonPointer


class Result(BaseModel):
    """A violation tagged with the rule that produced it, ready for reporting."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_title: str
    description: str
    pointer: str  # escaped JSON pointer
    line: int | None = None


def sort_violations(violations: Iterable[Violation]) -> list[Violation]:
    """Sort by pointer tokens, then description. Ties keep their input order."""
    return sorted(violations, key=lambda v: (v.pointer.tokens, v.description))


def group_by_pointer(violations: Iterable[Violation]) -> dict[JsonPointer, list[Violation]]:
    """Group violations by pointer, keeping first-seen order of pointers.

    Violations sharing a pointer are kept individually, never merged.
    """
    groups: dict[JsonPointer, list[Violation]] = {}
    for violation in violations:
        groups.setdefault(violation.pointer, []).append(violation)
    return groups
