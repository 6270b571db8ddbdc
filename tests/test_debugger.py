"""Tests for the debugger's request recording and condition explanations."""

from __future__ import annotations

import logging

import pytest

from stubroute import (
    Debugger,
    EndsWith,
    EqualTo,
    MethodCondition,
    MockSession,
    PathCondition,
    RequestView,
    Rule,
    StartsWith,
)
from stubroute.testing import RecordingDebugger


class TestToggle:
    def test_disabled_initially(self) -> None:
        assert Debugger().enabled is False

    def test_on_off(self) -> None:
        d = Debugger()
        d.on()
        assert d.enabled is True
        d.off()
        assert d.enabled is False

    def test_disabled_records_nothing(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/admin").do_return("admin")
        session.request("GET", "/login")
        session.request("GET", "/admin")
        assert debugger.requests == []
        assert debugger.matching == []
        assert debugger.not_matching == []

    def test_only_requests_while_enabled_are_recorded(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login").do_return("login")
        session.on_get("/user").do_return("user")
        session.on_get("/admin").do_return("admin")

        session.debug_on()
        session.request("GET", "/login")
        session.request("GET", "/user")
        session.debug_off()
        session.request("GET", "/admin")

        assert "http://localhost/login" in debugger.requests
        assert "http://localhost/user" in debugger.requests
        assert "http://localhost/admin" not in debugger.requests

    def test_no_messages_after_turning_off(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/admin").do_return("admin")
        session.debug_on()
        session.request("GET", "/login")
        session.request("GET", "/admin")
        session.debug_off()
        before = (list(debugger.matching), list(debugger.not_matching))

        session.request("GET", "/login")
        session.request("GET", "/admin")

        assert (debugger.matching, debugger.not_matching) == before
        assert len(debugger.requests) == 2


class TestHeaders:
    def test_header_condition(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login").with_header("User-Agent", "Mozilla").do_return("mozilla")

        session.debug_on()
        session.request("GET", "/login", headers={"User-Agent": "Mozilla"})
        session.request("GET", "/login", headers={"User-Agent": "Chrome"})

        assert 'header User-Agent is "Mozilla"' in debugger.matching
        assert 'header User-Agent is "Mozilla"' in debugger.not_matching
        assert 'header User-Agent is "Chrome"' not in debugger.not_matching

    def test_missing_header(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login").with_header("User-Agent", "Mozilla").do_return("mozilla")
        session.debug_on()
        session.request("GET", "/login")

        assert 'header User-Agent is "Mozilla"' in debugger.not_matching
        assert 'header User-Agent is "Mozilla"' not in debugger.matching

    def test_redundant_header(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login").with_header("User-Agent", "Mozilla").do_return("login")
        session.debug_on()
        session.request("GET", "/login", headers={"user-agent": "Mozilla", "Accept": "*/*"})

        assert "header Accept is redundant" in debugger.not_matching
        assert not any("user-agent" in m for m in debugger.not_matching)


class TestParameters:
    def test_missing_parameter(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login").with_parameter("foo", "bar")
        session.debug_on()
        session.request("GET", "/login")

        assert "parameter foo occurs in request" in debugger.not_matching
        assert 'parameter foo is "bar"' in debugger.not_matching

    def test_matching_parameter(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login").with_parameter("foo", "bar").do_return("login")
        session.debug_on()
        assert session.request("GET", "/login?foo=bar") == "login"

        assert "parameter foo occurs in request" in debugger.matching
        assert 'parameter foo is "bar"' in debugger.matching

    def test_not_matching_parameter_shows_expected_value(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login").with_parameter("foo", "bar").do_return("login")
        session.debug_on()
        session.request("GET", "/login?foo=bbb")

        assert 'parameter foo is "bar"' in debugger.not_matching
        assert not any("bbb" in m for m in debugger.not_matching)

    def test_redundant_parameter(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login").do_return("login")
        session.debug_on()
        session.request("GET", "/login?foo=bbb&foo=ccc")

        assert debugger.not_matching.count("parameter foo is redundant") == 1
        assert not any(m.startswith("parameter foo") for m in debugger.matching)

    def test_all_parameter_matchers_in_one_message(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        (
            session.on_get("/login")
            .with_parameter("foo", StartsWith("a"))
            .with_parameter("foo", EndsWith("b"))
            .do_return("login")
        )
        session.debug_on()
        session.request("GET", "/login?foo=aabb")

        assert (
            'parameter foo is a string starting with "a" and a string ending with "b"'
            in debugger.matching
        )


class TestReference:
    def test_not_matching_reference(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login#foo").do_return("login")
        session.debug_on()
        session.request("GET", "/login")

        assert 'reference is "foo"' in debugger.not_matching

    def test_matching_reference(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("/login#foo").do_return("login")
        session.debug_on()
        assert session.request("GET", "/login#foo") == "login"

        assert 'reference is "foo"' in debugger.matching

    def test_no_reference_message_when_unused(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login").do_return("login")
        session.debug_on()
        session.request("GET", "/login")

        assert not any(m.startswith("reference") for m in debugger.matching)
        assert not any(m.startswith("reference") for m in debugger.not_matching)

    def test_undeclared_request_reference(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login").do_return("login")
        session.debug_on()
        assert session.request("GET", "/login#bar") == "login"

        assert 'reference is "bar"' in debugger.not_matching


class TestMethodAndUrl:
    def test_matching_http_method(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login").do_return("login")
        session.debug_on()
        session.request("GET", "/login")
        assert "HTTP method is GET" in debugger.matching

    def test_not_matching_http_method(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/login").do_return("login")
        session.debug_on()
        session.request("POST", "/login")
        assert "HTTP method is GET" in debugger.not_matching

    def test_not_matching_url(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("http://localhost:8080/login").do_return("login")
        session.debug_on()
        session.request("POST", "https://www.google.com")

        assert 'schema is "http"' in debugger.not_matching
        assert 'host is "localhost"' in debugger.not_matching
        assert 'path is "/login"' in debugger.not_matching
        assert "port is <8080>" in debugger.not_matching

    def test_matching_url(self, session: MockSession, debugger: RecordingDebugger) -> None:
        session.on_get("http://localhost:8080/login").do_return("login")
        session.debug_on()
        session.request("POST", "http://localhost:8080/login")

        assert 'schema is "http"' in debugger.matching
        assert 'host is "localhost"' in debugger.matching
        assert 'path is "/login"' in debugger.matching
        assert "port is <8080>" in debugger.matching
        assert "HTTP method is GET" in debugger.not_matching

    def test_url_parts_reported_in_canonical_order(self, debugger: RecordingDebugger) -> None:
        session = MockSession(debugger=debugger)
        (
            session.on_get()
            .with_port(8080)
            .with_host("example.com")
            .with_scheme("https")
            .do_return("ok")
        )
        session.debug_on()
        session.request("GET", "https://example.com:8080/")

        assert debugger.matching == [
            "HTTP method is GET",
            'schema is "https"',
            'host is "example.com"',
            "port is <8080>",
        ]
        assert debugger.not_matching == []


class TestTargetSelection:
    def test_explains_closest_rule_when_nothing_matches(
        self, session: MockSession, debugger: RecordingDebugger
    ) -> None:
        session.on_get("/admin").do_return("admin")
        session.on_post("/login").with_parameter("x", "1").do_return("login")
        session.debug_on()
        session.request("POST", "/login")

        assert 'parameter x is "1"' in debugger.not_matching
        assert 'path is "/login"' in debugger.matching
        assert 'path is "/admin"' not in debugger.not_matching

    def test_explains_real_match_over_higher_scoring_rule(self) -> None:
        recorder = RecordingDebugger()
        catch_all = Rule((), lambda _r: "default")
        partial = Rule(
            (MethodCondition("GET"), PathCondition((EqualTo("/other"),))), lambda _r: None
        )
        view = RequestView.from_url("GET", "http://localhost/login")

        assert recorder.debug([catch_all, partial], view) is catch_all
        assert recorder.matching == []
        assert recorder.not_matching == []

    def test_returns_real_match_not_explained_rule(self) -> None:
        recorder = RecordingDebugger()
        rule = Rule((MethodCondition("POST"),), lambda _r: None)
        view = RequestView.from_url("GET", "http://localhost/login")

        assert recorder.debug([rule], view) is None
        assert recorder.not_matching == ["HTTP method is POST"]

    def test_empty_registry_records_request_only(self) -> None:
        recorder = RecordingDebugger()
        view = RequestView.from_url("GET", "http://localhost/login")

        assert recorder.debug([], view) is None
        assert recorder.requests == ["http://localhost/login"]
        assert recorder.matching == []
        assert recorder.not_matching == []


class TestOutput:
    def test_custom_sink(self) -> None:
        messages: list[tuple[bool, str]] = []
        d = Debugger(sink=lambda matching, text: messages.append((matching, text)))
        rule = Rule((MethodCondition("GET"),), lambda _r: None)

        d.debug([rule], RequestView.from_url("GET", "http://localhost/"))

        assert messages == [(True, "HTTP method is GET")]

    def test_default_sink_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        rule = Rule((MethodCondition("GET"),), lambda _r: None)
        with caplog.at_level(logging.INFO, logger="stubroute._debugger"):
            Debugger().debug([rule], RequestView.from_url("POST", "http://localhost/"))

        assert "request http://localhost/" in caplog.text
        assert "DOES NOT MATCH: HTTP method is GET" in caplog.text

    def test_broken_description_does_not_raise(self) -> None:
        class Broken:
            def test(self, value: object, /) -> bool:
                return True

            def describe(self) -> str:
                raise RuntimeError("boom")

        recorder = RecordingDebugger()
        rule = Rule((PathCondition((Broken(),)),), lambda _r: None)
        recorder.debug([rule], RequestView.from_url("GET", "http://localhost/"))

        assert recorder.matching == ["PathCondition"]
