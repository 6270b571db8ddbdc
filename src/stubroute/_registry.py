"""Rule registry — the append-only, registration-ordered rule store.

One registry lives for a whole mock session. Rules are never reordered or
removed. Reads work on an immutable snapshot, so a registration racing a
lookup can never expose a half-updated sequence.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import TYPE_CHECKING

from stubroute._matcher import find_match

if TYPE_CHECKING:
    from stubroute._request import RequestView
    from stubroute._rule import Rule


class Registry:
    """Ordered, append-only sequence of rules."""

    def __init__(self) -> None:
        self._rules: tuple[Rule, ...] = ()
        self._lock = threading.Lock()

    def register(self, rule: Rule) -> None:
        """Append a rule. Never fails."""
        with self._lock:
            self._rules = (*self._rules, rule)

    def rules(self) -> tuple[Rule, ...]:
        """Snapshot of the registered rules in registration order."""
        with self._lock:
            return self._rules

    def find_match(self, view: RequestView) -> Rule | None:
        """First rule (by registration) that fully matches, or None."""
        return find_match(self.rules(), view)

    def __len__(self) -> int:
        return len(self.rules())

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules())
