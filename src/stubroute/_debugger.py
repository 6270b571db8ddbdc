"""Debugger — condition-by-condition explanation of rule selection.

When enabled, every executed request is explained against one target rule:
the rule that actually matched, or, when nothing matched, the rule with the
most satisfied conditions. Each condition yields one ``message(matching,
description)`` call, followed by messages for request fields the rule does
not mention.

Subclass and override ``message`` / ``record_request`` (see
``stubroute.testing.RecordingDebugger``) or pass a ``sink`` callable to
capture output; by default it goes to this module's logger.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from stubroute._conditions import ParameterCondition
from stubroute._matcher import closest_match, find_match
from stubroute._value_matchers import quote

if TYPE_CHECKING:
    from stubroute._conditions import Condition
    from stubroute._request import RequestView
    from stubroute._rule import Rule

logger = logging.getLogger(__name__)

type MessageSink = Callable[[bool, str], None]


class Debugger:
    """Session-scoped explanation engine. Disabled until ``on()`` is called."""

    def __init__(self, sink: MessageSink | None = None) -> None:
        self._enabled = threading.Event()
        self._sink = sink
        # one request's explanation is emitted without interleaving
        self._emit_lock = threading.RLock()

    def on(self) -> None:
        self._enabled.set()

    def off(self) -> None:
        self._enabled.clear()

    @property
    def enabled(self) -> bool:
        return self._enabled.is_set()

    def debug(self, rules: Sequence[Rule], view: RequestView) -> Rule | None:
        """Explain one request and return the rule that really matched.

        The explained rule is the real match when there is one, otherwise
        the closest candidate (see ``closest_match``). The return value is
        always the real match, or None.
        """
        matched = find_match(rules, view)
        target = matched if matched is not None else closest_match(rules, view)
        with self._emit_lock:
            self.record_request(_uri(view))
            if target is not None:
                self._explain(target, view)
        return matched

    def record_request(self, uri: str) -> None:
        """Hook: called once per explained request with its URI."""
        logger.info("request %s", uri)

    def message(self, matching: bool, description: str) -> None:
        """Hook: called once per explained condition or redundant field."""
        if self._sink is not None:
            self._sink(matching, description)
            return
        logger.info("%s: %s", "MATCHES" if matching else "DOES NOT MATCH", description)

    def _explain(self, rule: Rule, view: RequestView) -> None:
        for condition in rule.explained_conditions():
            if isinstance(condition, ParameterCondition):
                self.message(
                    condition.occurs_in(view),
                    f"parameter {condition.name} occurs in request",
                )
            self.message(_evaluate(condition, view), _describe(condition))

        fragment = getattr(view, "fragment", None)
        if not rule.declares_fragment and fragment is not None:
            self.message(False, f"reference is {quote(fragment)}")

        for name in _names(view, "param_names"):
            if name not in rule.parameter_names:
                self.message(False, f"parameter {name} is redundant")
        for name in _names(view, "header_names"):
            if name.casefold() not in rule.header_names:
                self.message(False, f"header {name} is redundant")


def _evaluate(condition: Condition, view: RequestView) -> bool:
    try:
        return condition.evaluate(view)
    except Exception:
        logger.debug("condition evaluation raised", exc_info=True)
        return False


def _describe(condition: Condition) -> str:
    try:
        return condition.describe()
    except Exception:
        logger.debug("condition description raised", exc_info=True)
        return type(condition).__name__


def _names(view: RequestView, accessor: str) -> tuple[str, ...]:
    get = getattr(view, accessor, None)
    return tuple(get()) if get is not None else ()


def _uri(view: RequestView) -> str:
    try:
        return view.uri
    except Exception:
        logger.debug("request uri unavailable", exc_info=True)
        return "<unknown>"
