"""Concrete value matchers implementing the ValueMatcher protocol.

Each matcher is a frozen dataclass — immutable after construction.
String matchers decode bytes as UTF-8 and return False for other
non-string or None input values.

Descriptions follow the familiar assertion-library wording so debug output
reads as a sentence: ``parameter foo is a string starting with "a"``.

Regex uses ``google-re2`` for guaranteed linear-time matching. RE2 does not
support backreferences or lookahead/lookbehind because they require
backtracking — patterns using them are rejected at construction time.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import re2

from stubroute._matcher import ConditionError
from stubroute._types import MatchingData, ValueMatcher

logger = logging.getLogger(__name__)


def quote(value: Any) -> str:
    """Render an expected value: strings in double quotes, others in <>."""
    if isinstance(value, str):
        return f'"{value}"'
    if isinstance(value, bytes):
        return f'"{value.decode("utf-8", errors="replace")}"'
    return f"<{value}>"


@dataclass(frozen=True, slots=True)
class EqualTo:
    """Equality match.

    When ignore_case is True, string comparison is case-insensitive and the
    expected value is pre-folded at construction time.
    """

    value: Any
    ignore_case: bool = False
    _cmp_value: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        cmp = self.value
        if self.ignore_case and isinstance(cmp, str):
            cmp = cmp.casefold()
        object.__setattr__(self, "_cmp_value", cmp)

    def test(self, value: MatchingData, /) -> bool:
        if value is None:
            return False
        if isinstance(self._cmp_value, str):
            value = _text(value)
            if self.ignore_case and isinstance(value, str):
                value = value.casefold()
        return value == self._cmp_value

    def describe(self) -> str:
        if self.ignore_case:
            return f"a string equal to {quote(self.value)} ignoring case"
        return quote(self.value)


@dataclass(frozen=True, slots=True)
class StartsWith:
    """String prefix match (startswith)."""

    prefix: str
    ignore_case: bool = False
    _cmp_prefix: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_cmp_prefix", self.prefix.casefold() if self.ignore_case else self.prefix
        )

    def test(self, value: MatchingData, /) -> bool:
        value = _text(value)
        if not isinstance(value, str):
            return False
        input_val = value.casefold() if self.ignore_case else value
        return input_val.startswith(self._cmp_prefix)

    def describe(self) -> str:
        return _with_case(f"a string starting with {quote(self.prefix)}", self.ignore_case)


@dataclass(frozen=True, slots=True)
class EndsWith:
    """String suffix match (endswith)."""

    suffix: str
    ignore_case: bool = False
    _cmp_suffix: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "_cmp_suffix", self.suffix.casefold() if self.ignore_case else self.suffix
        )

    def test(self, value: MatchingData, /) -> bool:
        value = _text(value)
        if not isinstance(value, str):
            return False
        input_val = value.casefold() if self.ignore_case else value
        return input_val.endswith(self._cmp_suffix)

    def describe(self) -> str:
        return _with_case(f"a string ending with {quote(self.suffix)}", self.ignore_case)


@dataclass(frozen=True, slots=True)
class Contains:
    """Substring search match."""

    substring: str
    ignore_case: bool = False
    _cmp_substring: str = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "_cmp_substring",
            self.substring.casefold() if self.ignore_case else self.substring,
        )

    def test(self, value: MatchingData, /) -> bool:
        value = _text(value)
        if not isinstance(value, str):
            return False
        input_val = value.casefold() if self.ignore_case else value
        return self._cmp_substring in input_val

    def describe(self) -> str:
        return _with_case(f"a string containing {quote(self.substring)}", self.ignore_case)


@dataclass(frozen=True, slots=True)
class Regex:
    """Regular expression match.

    The pattern is compiled at construction time via ``google-re2``. Uses
    search (not fullmatch), so anchor the pattern to match the whole value.

    Raises:
        ConditionError: If the pattern is not valid RE2 syntax.
    """

    pattern: str
    _compiled: re2.Pattern[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        try:
            compiled = re2.compile(self.pattern)
        except re2.error as e:
            msg = f'invalid regex pattern "{self.pattern}": {e}'
            raise ConditionError(msg) from e
        object.__setattr__(self, "_compiled", compiled)

    def test(self, value: MatchingData, /) -> bool:
        value = _text(value)
        if not isinstance(value, str):
            return False
        return self._compiled.search(value) is not None

    def describe(self) -> str:
        return f"a string matching pattern {quote(self.pattern)}"


@dataclass(frozen=True, slots=True)
class AnyValue:
    """Matches any present value."""

    def test(self, value: MatchingData, /) -> bool:
        return value is not None

    def describe(self) -> str:
        return "ANYTHING"


@dataclass(frozen=True, slots=True)
class Satisfies:
    """Wrap an arbitrary predicate with a caller-supplied description.

    A predicate that raises is treated as not matching.
    """

    predicate: Callable[[Any], bool]
    description: str

    def test(self, value: MatchingData, /) -> bool:
        if value is None:
            return False
        try:
            return bool(self.predicate(value))
        except Exception:
            logger.debug("predicate for %s raised", self.description, exc_info=True)
            return False

    def describe(self) -> str:
        return self.description


def as_matcher(value: Any) -> ValueMatcher:
    """Use a ValueMatcher as-is; wrap anything else in EqualTo."""
    if isinstance(value, ValueMatcher):
        return value
    return EqualTo(value)


def _with_case(text: str, ignore_case: bool) -> str:
    return f"{text} ignoring case" if ignore_case else text


def _text(value: MatchingData) -> MatchingData:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
