"""Shared fixtures: a recording debugger and a session bound to it."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from stubroute import MockSession
from stubroute.testing import RecordingDebugger

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture
def debugger() -> RecordingDebugger:
    return RecordingDebugger()


@pytest.fixture
def session(debugger: RecordingDebugger) -> MockSession:
    return MockSession("http://localhost", debugger=debugger, on_no_match=lambda _r: None)


def load_yaml_fixture(name: str) -> list[dict[str, Any]]:
    """Load every document of a YAML fixture file."""
    with (FIXTURES_DIR / name).open() as f:
        return [doc for doc in yaml.safe_load_all(f) if doc is not None]


@pytest.fixture
def yaml_fixture() -> Any:
    return load_yaml_fixture
