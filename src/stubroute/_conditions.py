"""Conditions — single named predicates over a RequestView.

Each condition extracts one field from the request and tests it with one or
more value matchers (all must hold). Every condition also describes itself
in the fixed wording used by debug output, e.g. ``port is <8080>``.

The Condition union type is pattern-matchable via match/case. Evaluation is
pure and never raises: a missing field evaluates to False.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stubroute._request import RequestView
    from stubroute._types import MatchingData, ValueMatcher

logger = logging.getLogger(__name__)


def _test_all(matchers: tuple[ValueMatcher, ...], value: MatchingData) -> bool:
    if value is None:
        return False  # absent field never matches
    try:
        return all(m.test(value) for m in matchers)
    except Exception:
        logger.debug("value matcher raised on %r", value, exc_info=True)
        return False


def _test_any_value(matchers: tuple[ValueMatcher, ...], values: tuple[str, ...]) -> bool:
    return any(_test_all(matchers, v) for v in values)


def _joined(matchers: tuple[ValueMatcher, ...]) -> str:
    return " and ".join(m.describe() for m in matchers)


def _field(view: Any, name: str) -> Any:
    return getattr(view, name, None)


def _multi(view: Any, accessor: str, name: str) -> tuple[str, ...]:
    get = getattr(view, accessor, None)
    if get is None:
        return ()
    return tuple(get(name))


@dataclass(frozen=True, slots=True)
class MethodCondition:
    """HTTP method equality (case-insensitive)."""

    method: str

    def evaluate(self, view: RequestView) -> bool:
        actual = _field(view, "method")
        return isinstance(actual, str) and actual.upper() == self.method.upper()

    def describe(self) -> str:
        return f"HTTP method is {self.method.upper()}"


@dataclass(frozen=True, slots=True)
class SchemeCondition:
    """URL scheme. The request value is lowercased before testing."""

    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        actual = _field(view, "scheme")
        return _test_all(self.matchers, actual.lower() if isinstance(actual, str) else actual)

    def describe(self) -> str:
        return f"schema is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class HostCondition:
    """URL host. The request value is lowercased before testing."""

    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        actual = _field(view, "host")
        return _test_all(self.matchers, actual.lower() if isinstance(actual, str) else actual)

    def describe(self) -> str:
        return f"host is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class PortCondition:
    """URL port. A request without an explicit port never matches."""

    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        return _test_all(self.matchers, _field(view, "port"))

    def describe(self) -> str:
        return f"port is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class PathCondition:
    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        return _test_all(self.matchers, _field(view, "path"))

    def describe(self) -> str:
        return f"path is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class FragmentCondition:
    """URL fragment (the ``#reference`` part)."""

    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        return _test_all(self.matchers, _field(view, "fragment"))

    def describe(self) -> str:
        return f"reference is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class HeaderCondition:
    """Header by name (case-insensitive).

    Holds when some value of the header satisfies every matcher.
    """

    name: str
    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        return _test_any_value(self.matchers, _multi(view, "header_values", self.name))

    def describe(self) -> str:
        return f"header {self.name} is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class ParameterCondition:
    """Query parameter by name.

    Holds when some value of the parameter satisfies every matcher.
    """

    name: str
    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        return _test_any_value(self.matchers, _multi(view, "param_values", self.name))

    def occurs_in(self, view: RequestView) -> bool:
        """Whether the request carries this parameter at all."""
        return bool(_multi(view, "param_values", self.name))

    def describe(self) -> str:
        return f"parameter {self.name} is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class BodyCondition:
    matchers: tuple[ValueMatcher, ...]

    def evaluate(self, view: RequestView) -> bool:
        return _test_all(self.matchers, _field(view, "body"))

    def describe(self) -> str:
        return f"body is {_joined(self.matchers)}"


@dataclass(frozen=True, slots=True)
class CustomCondition:
    """Arbitrary predicate over the whole request.

    A predicate that raises is treated as not matching.
    """

    predicate: Callable[[RequestView], bool]
    description: str

    def evaluate(self, view: RequestView) -> bool:
        try:
            return bool(self.predicate(view))
        except Exception:
            logger.debug("custom condition %r raised", self.description, exc_info=True)
            return False

    def describe(self) -> str:
        return self.description


# Closed set of condition kinds.
type Condition = (
    MethodCondition
    | SchemeCondition
    | HostCondition
    | PortCondition
    | PathCondition
    | FragmentCondition
    | HeaderCondition
    | ParameterCondition
    | BodyCondition
    | CustomCondition
)


def url_component_rank(condition: Condition) -> int | None:
    """Canonical position of a URL-component condition, or None for others."""
    match condition:
        case SchemeCondition():
            return 0
        case HostCondition():
            return 1
        case PortCondition():
            return 2
        case PathCondition():
            return 3
        case _:
            return None
