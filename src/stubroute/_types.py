"""Core protocols and type aliases for stubroute.

The type system splits matching into two ports:
- MatchingData is the erased value a condition extracts from a request
- ValueMatcher is the domain-agnostic test-and-describe port
- Action is the opaque response producer bound to a rule
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from stubroute._request import RequestView

# The erased value type. None means "not present in the request" and always
# makes a condition evaluate to False.
MatchingData = str | int | bool | bytes | None

# Actions receive the request that selected them and return whatever the
# action layer uses as a response (or raise to signal a fault).
type Action = Callable[[RequestView], Any]


@runtime_checkable
class ValueMatcher(Protocol):
    """Test a single extracted value and describe the expectation.

    Any object with these two methods can be used wherever stubroute accepts
    a matcher, so callers can plug in their own predicates.
    """

    def test(self, value: MatchingData, /) -> bool: ...

    def describe(self) -> str: ...
