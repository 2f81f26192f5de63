"""Tests for the component-gated logger."""

import logging

import pytest

from debug import LOGGER_NAME, Debug


@pytest.fixture
def dbg():
    d = Debug()
    d.disable(*d.status())
    d.toggle_global(True)
    yield d
    d.disable(*d.status())
    d.toggle_global(True)


class TestDebug:
    """Switches decide which components log."""

    def test_disabled_component_is_silent(self, dbg, caplog):
        """Nothing is emitted while a component is off."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        dbg.log("rotor", "hidden %d", 1)
        assert caplog.records == []

    def test_enabled_component_logs(self, dbg, caplog):
        """An enabled component is prefixed with its name."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        dbg.enable("stepping")
        dbg.log("stepping", "window %s", "ABC")
        assert caplog.messages == ["[STEPPING] window ABC"]

    def test_switches_are_shared(self, dbg):
        """Every Debug instance sees the same switch map."""
        dbg.toggle("engine")
        assert Debug().status()["engine"] is True

    def test_global_switch(self, dbg, caplog):
        """The global switch silences everything."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        dbg.enable("engine")
        dbg.toggle_global(False)
        dbg.log("engine", "hidden")
        assert caplog.records == []

    def test_unknown_component(self, dbg):
        """Only known components can be switched."""
        with pytest.raises(ValueError):
            dbg.enable("flux-capacitor")

    def test_engine_logs_through_debug(self, dbg, caplog, small_engine):
        """Engine processing reports through the engine component."""
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        dbg.enable("engine")
        small_engine.process("AB")
        assert any(m.startswith("[ENGINE] 'AB' -> 'FC'") for m in caplog.messages)
