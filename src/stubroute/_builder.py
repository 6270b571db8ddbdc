"""RuleBuilder — fluent declaration of a rule's conditions and action.

    session.on_get("/login").with_parameter("foo", "bar").do_return("login")

Plain values become equality matchers; any ValueMatcher is used as-is.
Declaring the same header, parameter or URL part twice merges the matchers
into one condition, so it is explained as a single ``... and ...`` line.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import TYPE_CHECKING, Any
from urllib.parse import parse_qsl, urlsplit

from stubroute._conditions import (
    BodyCondition,
    CustomCondition,
    FragmentCondition,
    HeaderCondition,
    HostCondition,
    MethodCondition,
    ParameterCondition,
    PathCondition,
    PortCondition,
    SchemeCondition,
)
from stubroute._matcher import ConditionError
from stubroute._rule import Rule
from stubroute._value_matchers import EqualTo, as_matcher

if TYPE_CHECKING:
    from stubroute._conditions import Condition
    from stubroute._request import RequestView
    from stubroute._types import Action, ValueMatcher


class RuleBuilder:
    """Collects conditions for one rule, then registers it via a ``do_*`` call.

    A builder finishes exactly one rule. ``on_register`` receives the
    finished Rule; MockSession uses it to place the rule in its registry in
    declaration order.
    """

    def __init__(
        self,
        method: str,
        url: str,
        on_register: Callable[[Rule], None],
        *,
        base_url: str = "",
    ) -> None:
        self._conditions: list[Condition] = [MethodCondition(method.upper())]
        self._on_register = on_register
        self._rule: Rule | None = None
        self._add_url(url, base_url)

    # ── URL parts ──────────────────────────────────────────────────────────

    def with_scheme(self, scheme: Any) -> RuleBuilder:
        return self._merge(SchemeCondition, _lowered(scheme))

    def with_host(self, host: Any) -> RuleBuilder:
        return self._merge(HostCondition, _lowered(host))

    def with_port(self, port: Any) -> RuleBuilder:
        if isinstance(port, bool | str | bytes | float):
            msg = f"port must be an int or a value matcher, got {port!r}"
            raise ConditionError(msg)
        return self._merge(PortCondition, as_matcher(port))

    def with_path(self, path: Any) -> RuleBuilder:
        return self._merge(PathCondition, as_matcher(path))

    def with_reference(self, fragment: Any) -> RuleBuilder:
        return self._merge(FragmentCondition, as_matcher(fragment))

    # ── Request contents ───────────────────────────────────────────────────

    def with_header(self, name: str, value: Any) -> RuleBuilder:
        return self._merge_named(HeaderCondition, name, as_matcher(value))

    def with_parameter(self, name: str, value: Any) -> RuleBuilder:
        return self._merge_named(ParameterCondition, name, as_matcher(value))

    def with_body(self, body: Any) -> RuleBuilder:
        return self._merge(BodyCondition, as_matcher(body))

    def with_condition(
        self, predicate: Callable[[RequestView], bool], description: str
    ) -> RuleBuilder:
        self._check_open()
        self._conditions.append(CustomCondition(predicate, description))
        return self

    # ── Terminal actions ───────────────────────────────────────────────────

    def do_action(self, action: Action) -> Rule:
        """Register the rule with ``action`` called as ``action(request)``."""
        self._check_open()
        self._rule = Rule(tuple(self._conditions), action)
        self._on_register(self._rule)
        return self._rule

    def do_return(self, value: Any) -> Rule:
        return self.do_action(lambda _request: value)

    def do_throw(self, exc: BaseException) -> Rule:
        def _throw(_request: RequestView) -> Any:
            raise exc

        return self.do_action(_throw)

    @property
    def rule(self) -> Rule | None:
        """The finished rule, or None while conditions are still being added."""
        return self._rule

    @property
    def registered(self) -> bool:
        return self._rule is not None

    # ── Private ────────────────────────────────────────────────────────────

    def _add_url(self, url: str, base_url: str) -> None:
        parts = urlsplit(url)
        if parts.scheme and parts.netloc:
            origin = parts
        else:
            origin = urlsplit(base_url) if base_url else None

        if origin is not None and origin.scheme:
            self.with_scheme(origin.scheme)
        if origin is not None and origin.hostname:
            self.with_host(origin.hostname)
        if origin is not None:
            try:
                port = origin.port
            except ValueError as e:
                msg = f"invalid port in {url or base_url!r}: {e}"
                raise ConditionError(msg) from e
            if port is not None:
                self.with_port(port)
        if parts.path:
            self.with_path(parts.path)
        for name, value in parse_qsl(parts.query, keep_blank_values=True):
            self.with_parameter(name, value)
        if "#" in url:
            self.with_reference(parts.fragment)

    def _merge(self, kind: type, matcher: ValueMatcher) -> RuleBuilder:
        self._check_open()
        for i, condition in enumerate(self._conditions):
            if type(condition) is kind:
                self._conditions[i] = replace(condition, matchers=(*condition.matchers, matcher))
                return self
        self._conditions.append(kind((matcher,)))
        return self

    def _merge_named(self, kind: type, name: str, matcher: ValueMatcher) -> RuleBuilder:
        self._check_open()
        fold = kind is HeaderCondition
        key = name.casefold() if fold else name
        for i, condition in enumerate(self._conditions):
            if type(condition) is not kind:
                continue
            existing = condition.name.casefold() if fold else condition.name
            if existing == key:
                self._conditions[i] = replace(condition, matchers=(*condition.matchers, matcher))
                return self
        self._conditions.append(kind(name, (matcher,)))
        return self

    def _check_open(self) -> None:
        if self._rule is not None:
            msg = "rule already has an action; start a new one with on()"
            raise ConditionError(msg)


def _lowered(value: Any) -> ValueMatcher:
    if isinstance(value, str):
        return EqualTo(value.lower())
    return as_matcher(value)
