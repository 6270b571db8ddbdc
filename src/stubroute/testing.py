"""Test utilities for stubroute.

Provides a Debugger that records its output instead of logging it, so test
suites can assert on explanations:

>>> from stubroute import MockSession
>>> from stubroute.testing import RecordingDebugger
>>> debugger = RecordingDebugger()
>>> session = MockSession("http://localhost", debugger=debugger)
>>> _ = session.on_get("/login").do_return("login")
>>> session.debug_on()
>>> session.request("GET", "/login")
'login'
>>> "HTTP method is GET" in debugger.matching
True
"""

from __future__ import annotations

from stubroute._debugger import Debugger


class RecordingDebugger(Debugger):
    """Collects requested URIs and matching / not-matching descriptions."""

    def __init__(self) -> None:
        super().__init__()
        self.requests: list[str] = []
        self.matching: list[str] = []
        self.not_matching: list[str] = []

    def record_request(self, uri: str) -> None:
        self.requests.append(uri)

    def message(self, matching: bool, description: str) -> None:
        if matching:
            self.matching.append(description)
        else:
            self.not_matching.append(description)

    def clear(self) -> None:
        self.requests.clear()
        self.matching.clear()
        self.not_matching.clear()
