"""Rule — an ordered AND-group of conditions bound to one action."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stubroute._conditions import (
    FragmentCondition,
    HeaderCondition,
    ParameterCondition,
    url_component_rank,
)

if TYPE_CHECKING:
    from stubroute._conditions import Condition
    from stubroute._request import RequestView
    from stubroute._types import Action


@dataclass(eq=False, slots=True)
class Rule:
    """Conditions (logical AND, declaration order) plus an opaque action.

    The request fields a rule cares about (parameter names, header names,
    whether it declares a fragment) are derived once at construction so the
    debugger can flag redundant request fields without inspecting conditions.

    The invocation counter is the only mutable state and is lock-guarded.
    """

    conditions: tuple[Condition, ...]
    action: Action
    parameter_names: frozenset[str] = field(init=False)
    header_names: frozenset[str] = field(init=False)
    declares_fragment: bool = field(init=False)
    _invocations: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        params: set[str] = set()
        headers: set[str] = set()
        fragment = False
        for condition in self.conditions:
            match condition:
                case ParameterCondition(name=name):
                    params.add(name)
                case HeaderCondition(name=name):
                    headers.add(name.casefold())
                case FragmentCondition():
                    fragment = True
        self.parameter_names = frozenset(params)
        self.header_names = frozenset(headers)
        self.declares_fragment = fragment

    def matches(self, view: RequestView) -> bool:
        """True when every condition holds. No conditions matches everything."""
        return all(c.evaluate(view) for c in self.conditions)

    def score(self, view: RequestView) -> int:
        """Number of individually satisfied conditions (no short-circuit)."""
        return sum(1 for c in self.conditions if c.evaluate(view))

    def invoke(self, view: RequestView) -> Any:
        """Count the call, then run the action.

        Exceptions raised by the action propagate unchanged.
        """
        with self._lock:
            self._invocations += 1
        return self.action(view)

    @property
    def invocations(self) -> int:
        with self._lock:
            return self._invocations

    def explained_conditions(self) -> tuple[Condition, ...]:
        """Conditions in explanation order.

        Declaration order, except URL components (scheme, host, port, path)
        are grouped at the first one's position in that canonical order.
        """
        url_parts = sorted(
            (c for c in self.conditions if url_component_rank(c) is not None),
            key=url_component_rank,
        )
        ordered: list[Condition] = []
        placed = False
        for condition in self.conditions:
            if url_component_rank(condition) is None:
                ordered.append(condition)
            elif not placed:
                ordered.extend(url_parts)
                placed = True
        return tuple(ordered)
