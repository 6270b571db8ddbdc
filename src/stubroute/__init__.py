"""stubroute — rule-based HTTP request stubbing with match explanations.

All public types are exported from this module for flat imports:

    from stubroute import MockSession, RequestView, StartsWith
"""

__version__ = "0.1.0"

# Builder
from stubroute._builder import RuleBuilder

# Conditions
from stubroute._conditions import (
    BodyCondition,
    Condition,
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

# Config types — see stubroute._config for details
from stubroute._config import (
    ConfigParseError,
    RuleConfig,
    RulesConfig,
    ValueMatchConfig,
    compile_value_match,
    load_rules,
    parse_rules_config,
    session_from_config,
)
from stubroute._debugger import Debugger, MessageSink

# Matcher
from stubroute._matcher import (
    ConditionError,
    MockError,
    NoMatchingRuleError,
    closest_match,
    find_match,
)
from stubroute._registry import Registry
from stubroute._request import RequestView
from stubroute._rule import Rule
from stubroute._session import MockSession
from stubroute._types import Action, MatchingData, ValueMatcher

# Concrete value matchers
from stubroute._value_matchers import (
    AnyValue,
    Contains,
    EndsWith,
    EqualTo,
    Regex,
    Satisfies,
    StartsWith,
    as_matcher,
)

__all__ = [
    # Protocols
    "Action",
    "MatchingData",
    "ValueMatcher",
    # Request context
    "RequestView",
    # Conditions
    "Condition",
    "MethodCondition",
    "SchemeCondition",
    "HostCondition",
    "PortCondition",
    "PathCondition",
    "FragmentCondition",
    "HeaderCondition",
    "ParameterCondition",
    "BodyCondition",
    "CustomCondition",
    # Rules and selection
    "Rule",
    "Registry",
    "find_match",
    "closest_match",
    "Debugger",
    "MessageSink",
    # Session
    "MockSession",
    "RuleBuilder",
    # Concrete value matchers
    "EqualTo",
    "StartsWith",
    "EndsWith",
    "Contains",
    "Regex",
    "AnyValue",
    "Satisfies",
    "as_matcher",
    # Errors
    "MockError",
    "ConditionError",
    "NoMatchingRuleError",
    "ConfigParseError",
    # Config
    "ValueMatchConfig",
    "RuleConfig",
    "RulesConfig",
    "parse_rules_config",
    "compile_value_match",
    "load_rules",
    "session_from_config",
]
