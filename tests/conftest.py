"""Shared fixtures: machine descriptions on disk and ready engines."""

from pathlib import Path

import pytest

from engine import Engine
from loader import load_spec
from wheels import legacy_spec

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def small_path():
    return FIXTURES / "sanity-small.json"


@pytest.fixture
def small_xml_path():
    return FIXTURES / "sanity-small.xml"


@pytest.fixture
def abcd_path():
    return FIXTURES / "abcd.json"


@pytest.fixture
def small_spec(small_path):
    return load_spec(small_path)


@pytest.fixture
def abcd_spec(abcd_path):
    return load_spec(abcd_path)


@pytest.fixture
def legacy():
    return legacy_spec()


@pytest.fixture
def small_engine(small_spec):
    """Engine on the six-symbol machine, configured at <3,2,1><CCC><I>."""
    engine = Engine()
    engine.load_spec(small_spec)
    engine.config_manual("<3,2,1><CCC><I>")
    return engine


@pytest.fixture
def legacy_engine(legacy):
    engine = Engine()
    engine.load_spec(legacy)
    engine.config_manual("<1,2,3><ODX><I><ABCDEF>")
    return engine
