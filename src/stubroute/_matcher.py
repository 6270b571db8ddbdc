"""Matcher — first-match-wins rule selection.

- Rules evaluated in registration order (first full match wins)
- A rule with no conditions matches every request
- No match is reported as None; the caller picks the failure policy
- closest_match ranks partial matches for debug explanations only
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stubroute._request import RequestView
    from stubroute._rule import Rule


class MockError(Exception):
    """Base class for stubroute errors."""


class ConditionError(MockError):
    """A rule or condition was declared with invalid input."""


class NoMatchingRuleError(MockError):
    """No registered rule fully matches the executed request."""

    def __init__(self, request: RequestView) -> None:
        self.request = request
        super().__init__(f"no rule matches request {request.method} {request.uri}")


def find_match(rules: Sequence[Rule], view: RequestView) -> Rule | None:
    """Return the first rule whose every condition holds, or None.

    INV: first match wins; later rules are never consulted.
    """
    for rule in rules:
        if rule.matches(view):
            return rule
    return None


def closest_match(rules: Sequence[Rule], view: RequestView) -> Rule | None:
    """Return the rule with the most individually satisfied conditions.

    Ties go to the earliest registered rule. Returns None only for an
    empty sequence.
    """
    best: Rule | None = None
    best_score = -1
    for rule in rules:
        score = rule.score(view)
        if score > best_score:  # strict: earlier rule keeps a tie
            best, best_score = rule, score
    return best
