"""Config types for declaring rules from plain data.

The same dict shape loads from JSON or YAML. Config-driven rule path:
  dict → parse_rules_config() → RulesConfig → load_rules(session) → Rules

Example::

    rules:
      - method: GET
        url: /login#foo
        headers: {User-Agent: Mozilla}
        params: {foo: {Prefix: a}}
        body: {Contains: token}
        respond: login

Plain scalars mean exact equality; a single-key dict picks a built-in
match variant.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from stubroute._matcher import MockError
from stubroute._session import MockSession
from stubroute._value_matchers import Contains, EndsWith, EqualTo, Regex, StartsWith

if TYPE_CHECKING:
    from stubroute._rule import Rule
    from stubroute._types import ValueMatcher

# ═══════════════════════════════════════════════════════════════════════════════
# Config types (frozen dataclasses)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ValueMatchConfig:
    """Built-in value matching (Exact, Prefix, Suffix, Contains, Regex).

    { "Exact": "hello" }, { "Prefix": "/api" }, { "Regex": "^foo" }
    """

    variant: str
    value: Any


@dataclass(frozen=True, slots=True)
class RuleConfig:
    """Config for one rule. ``respond`` is what the rule's action returns."""

    method: str
    url: str = ""
    headers: tuple[tuple[str, ValueMatchConfig], ...] = ()
    params: tuple[tuple[str, ValueMatchConfig], ...] = ()
    body: ValueMatchConfig | None = None
    respond: Any = None


@dataclass(frozen=True, slots=True)
class RulesConfig:
    rules: tuple[RuleConfig, ...] = field(default_factory=tuple)
    base_url: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════

_VALUE_MATCH_VARIANTS = frozenset({"Exact", "Prefix", "Suffix", "Contains", "Regex"})


class ConfigParseError(MockError):
    """Error parsing a config dict into config types."""


def parse_rules_config(data: dict[str, Any]) -> RulesConfig:
    """Parse a dict into a RulesConfig.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if not isinstance(data, dict):
        msg = f"expected dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    raw_rules = data.get("rules")
    if raw_rules is None:
        msg = "missing required field 'rules'"
        raise ConfigParseError(msg)
    if not isinstance(raw_rules, list):
        msg = f"'rules' must be a list, got {type(raw_rules).__name__}"
        raise ConfigParseError(msg)

    base_url = data.get("base_url", "")
    if not isinstance(base_url, str):
        msg = f"'base_url' must be a string, got {type(base_url).__name__}"
        raise ConfigParseError(msg)

    return RulesConfig(rules=tuple(_parse_rule(r) for r in raw_rules), base_url=base_url)


def _parse_rule(data: dict[str, Any]) -> RuleConfig:
    if not isinstance(data, dict):
        msg = f"rule must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)

    method = data.get("method")
    if not isinstance(method, str) or not method:
        msg = "rule missing required field 'method'"
        raise ConfigParseError(msg)

    url = data.get("url", "")
    if not isinstance(url, str):
        msg = f"rule 'url' must be a string, got {type(url).__name__}"
        raise ConfigParseError(msg)

    body = data.get("body")
    return RuleConfig(
        method=method.upper(),
        url=url,
        headers=_parse_named(data.get("headers", {}), "headers"),
        params=_parse_named(data.get("params", {}), "params"),
        body=_parse_value_match(body) if body is not None else None,
        respond=data.get("respond"),
    )


def _parse_named(data: Any, where: str) -> tuple[tuple[str, ValueMatchConfig], ...]:
    if not isinstance(data, dict):
        msg = f"rule '{where}' must be a dict, got {type(data).__name__}"
        raise ConfigParseError(msg)
    return tuple((str(name), _parse_value_match(spec)) for name, spec in data.items())


def _parse_value_match(data: Any) -> ValueMatchConfig:
    """Parse a scalar (Exact) or a single-variant dict into a ValueMatchConfig."""
    if not isinstance(data, dict):
        if isinstance(data, list):
            msg = "value match must be a scalar or a dict, got list"
            raise ConfigParseError(msg)
        return ValueMatchConfig(variant="Exact", value=data)

    if len(data) != 1:
        msg = f"value match must contain exactly one variant, got keys: {sorted(data)}"
        raise ConfigParseError(msg)

    [(variant, value)] = data.items()
    if variant not in _VALUE_MATCH_VARIANTS:
        expected = sorted(_VALUE_MATCH_VARIANTS)
        msg = f"value match must be one of {expected}, got {variant!r}"
        raise ConfigParseError(msg)
    if variant != "Exact" and not isinstance(value, str):
        msg = f"value match {variant} value must be a string, got {type(value).__name__}"
        raise ConfigParseError(msg)
    return ValueMatchConfig(variant=variant, value=value)


# ═══════════════════════════════════════════════════════════════════════════════
# Loading (config types → registered rules)
# ═══════════════════════════════════════════════════════════════════════════════


def compile_value_match(config: ValueMatchConfig) -> ValueMatcher:
    """Compile a ValueMatchConfig into a concrete value matcher."""
    match config.variant:
        case "Exact":
            return EqualTo(config.value)
        case "Prefix":
            return StartsWith(config.value)
        case "Suffix":
            return EndsWith(config.value)
        case "Contains":
            return Contains(config.value)
        case "Regex":
            return Regex(config.value)
        case _:
            msg = f"unknown value match variant: {config.variant!r}"
            raise ConfigParseError(msg)


def load_rules(session: MockSession, config: RulesConfig) -> list[Rule]:
    """Register every configured rule on ``session``, in order."""
    rules: list[Rule] = []
    for rule_config in config.rules:
        builder = session.on(rule_config.method, rule_config.url)
        for name, header in rule_config.headers:
            builder.with_header(name, compile_value_match(header))
        for name, param in rule_config.params:
            builder.with_parameter(name, compile_value_match(param))
        if rule_config.body is not None:
            builder.with_body(compile_value_match(rule_config.body))
        rules.append(builder.do_return(rule_config.respond))
    return rules


def session_from_config(data: dict[str, Any], **kwargs: Any) -> MockSession:
    """Parse ``data`` and return a new MockSession holding its rules.

    Extra keyword arguments go to the MockSession constructor.
    """
    config = parse_rules_config(data)
    session = MockSession(config.base_url, **kwargs)
    load_rules(session, config)
    return session
