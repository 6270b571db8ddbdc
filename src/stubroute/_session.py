"""MockSession — one registry, one debugger, and the execute path.

    session = MockSession("http://localhost")
    session.on_get("/admin").do_return("admin")
    session.debug_on()
    session.request("GET", "/admin")  # -> "admin", explained by the debugger

The session never talks to a network. Adapters for concrete HTTP clients
build a RequestView and call ``execute``; whatever the matched rule's action
returns is handed back unchanged.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any
from urllib.parse import urljoin

from stubroute._builder import RuleBuilder
from stubroute._debugger import Debugger
from stubroute._matcher import NoMatchingRuleError, find_match
from stubroute._registry import Registry
from stubroute._request import RequestView

if TYPE_CHECKING:
    from stubroute._request import MultiMapInput
    from stubroute._rule import Rule
    from stubroute._types import Action

logger = logging.getLogger(__name__)


class MockSession:
    """Declares rules and answers requests against them.

    ``base_url`` supplies scheme, host and port to rules and requests given
    with a relative URL. When no rule matches, ``on_no_match`` (if set) is
    called with the request; otherwise NoMatchingRuleError is raised.

    Rules join the registry in declaration order. A finished rule waits
    behind any rule declared before it that has no action yet; the next
    execute gives such rules an action answering None.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        debugger: Debugger | None = None,
        on_no_match: Action | None = None,
    ) -> None:
        self.base_url = base_url
        self.debugger = debugger if debugger is not None else Debugger()
        self.registry = Registry()
        self.on_no_match = on_no_match
        self._pending: list[RuleBuilder] = []
        self._pending_lock = threading.RLock()

    # ── Declaration ────────────────────────────────────────────────────────

    def on(self, method: str, url: str = "") -> RuleBuilder:
        builder = RuleBuilder(method, url, self._finished, base_url=self.base_url)
        with self._pending_lock:
            self._pending.append(builder)
        return builder

    def on_get(self, url: str = "") -> RuleBuilder:
        return self.on("GET", url)

    def on_post(self, url: str = "") -> RuleBuilder:
        return self.on("POST", url)

    def on_put(self, url: str = "") -> RuleBuilder:
        return self.on("PUT", url)

    def on_delete(self, url: str = "") -> RuleBuilder:
        return self.on("DELETE", url)

    def on_patch(self, url: str = "") -> RuleBuilder:
        return self.on("PATCH", url)

    def on_head(self, url: str = "") -> RuleBuilder:
        return self.on("HEAD", url)

    def on_options(self, url: str = "") -> RuleBuilder:
        return self.on("OPTIONS", url)

    # ── Debugging ──────────────────────────────────────────────────────────

    def debug_on(self) -> None:
        self.debugger.on()

    def debug_off(self) -> None:
        self.debugger.off()

    # ── Execution ──────────────────────────────────────────────────────────

    def execute(self, view: RequestView) -> Any:
        """Select a rule for ``view`` and run its action.

        Raises:
            NoMatchingRuleError: nothing matched and no on_no_match is set.
        """
        self._flush_pending()
        rules = self.registry.rules()
        if self.debugger.enabled:
            rule = self.debugger.debug(rules, view)
        else:
            rule = find_match(rules, view)

        if rule is None:
            logger.debug("no rule matches %s %s", view.method, view.uri)
            if self.on_no_match is not None:
                return self.on_no_match(view)
            raise NoMatchingRuleError(view)
        return rule.invoke(view)

    def request(
        self,
        method: str,
        url: str,
        *,
        headers: MultiMapInput = None,
        body: str | bytes | None = None,
    ) -> Any:
        """Build a RequestView from ``url`` (relative to base_url) and execute it."""
        absolute = urljoin(self.base_url, url) if self.base_url else url
        return self.execute(RequestView.from_url(method, absolute, headers=headers, body=body))

    # ── Private ────────────────────────────────────────────────────────────

    def _register(self, rule: Rule) -> None:
        self.registry.register(rule)
        logger.debug(
            "registered rule #%d: %d condition(s)", len(self.registry), len(rule.conditions)
        )

    def _finished(self, _rule: Rule) -> None:
        with self._pending_lock:
            self._register_ready()

    def _register_ready(self) -> None:
        # Caller holds _pending_lock. Moves the finished prefix of _pending
        # into the registry.
        while self._pending and (rule := self._pending[0].rule) is not None:
            del self._pending[0]
            self._register(rule)

    def _flush_pending(self) -> None:
        with self._pending_lock:
            for builder in list(self._pending):
                if not builder.registered:
                    builder.do_return(None)  # re-enters _finished
            self._register_ready()
