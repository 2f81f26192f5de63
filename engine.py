# engine.py
from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

import snapshot as snapshots
from code_factory import CodeConfig, CodeState, build_code, build_rng, random_config
from debug import Debug
from enigma import Enigma, SignalTrace
from errors import ConfigurationError, PersistenceError, StateError
from history import MachineHistory
from loader import load_spec as read_spec
from machine_spec import MachineSpec
from snapshot import EngineSnapshot, MachineState
from validator import normalize_case, raise_for, validate_code_config, validate_message

debug = Debug()


# ────────────────────────────────────────────────────────────────────────
#  0. Configuration
# ────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class EngineConfig:
    """Runtime switches for one engine instance."""

    fold_case: bool = False                     # upper-case input the alphabet only knows in upper case
    max_plugs: int = 5                          # upper bound for random plug pairs
    seed: int | None = None                     # deterministic config_random when set
    snapshot_suffix: str = snapshots.SNAPSHOT_SUFFIX


@dataclass(frozen=True, slots=True)
class ProcessTrace:
    output: str
    traces: Tuple[SignalTrace, ...]

    def __str__(self) -> str:
        return "\n".join(str(t) for t in self.traces)


# ────────────────────────────────────────────────────────────────────────
#  1. Engine – the caller-facing operations
# ────────────────────────────────────────────────────────────────────────


class Engine:
    """
    One machine session: the loaded description, the configured machine, the
    history of processed messages and the message counter. Every mutating
    operation validates first and only then touches state.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self._rng = build_rng(self.config.seed)
        self._spec: MachineSpec | None = None
        self._machine = Enigma()
        self._history = MachineHistory()
        self._original: CodeState | None = None
        self._processed = 0

    # ── loading ─────────────────────────────────────────────────

    def load_machine(self, path: str | Path) -> MachineSpec:
        spec = read_spec(path)
        self.load_spec(spec)
        return spec

    def load_spec(self, spec: MachineSpec) -> None:
        """Install *spec* and forget the previous session entirely."""
        self._spec = spec
        self._machine = Enigma()
        self._history = MachineHistory()
        self._original = None
        self._processed = 0
        debug.log("engine", "machine %r installed", spec.name)

    # ── configuration ───────────────────────────────────────────

    def config_manual(self, config: CodeConfig | str) -> CodeState:
        spec = self._require_spec()
        if isinstance(config, str):
            config = CodeConfig.parse(config)

        raise_for(validate_code_config(spec, config))
        code = build_code(spec, config)

        self._machine.set_code(code)
        self._original = code.state()
        self._history.record_config(self._original)
        debug.log("engine", "configured %s", self._original)
        return self._original

    def config_random(self) -> CodeState:
        spec = self._require_spec()
        config = random_config(spec, self._rng, self.config.max_plugs)
        debug.log("engine", "random code %s", config)
        return self.config_manual(config)

    # ── processing ──────────────────────────────────────────────

    def process(self, text: str) -> ProcessTrace:
        self._require_configured()
        alphabet = self._spec.alphabet
        if self.config.fold_case:
            text = normalize_case(alphabet, text)

        # reject the whole message before any rotor moves
        raise_for(validate_message(alphabet, text))

        start = time.perf_counter_ns()
        traces = tuple(self._machine.process(ch) for ch in text)
        duration = time.perf_counter_ns() - start

        output = "".join(t.output_char for t in traces)
        self._history.record_message(text, output, duration)
        self._processed += 1
        debug.log("engine", "%r -> %r in %d ns", text, output, duration)
        return ProcessTrace(output, traces)

    def reset(self) -> None:
        """Back to the original positions; history and counter stay."""
        self._require_configured()
        self._machine.reset()

    # ── read-only views ─────────────────────────────────────────

    @property
    def spec(self) -> MachineSpec | None:
        return self._spec

    @property
    def is_configured(self) -> bool:
        return self._machine.is_configured

    @property
    def processed_count(self) -> int:
        return self._processed

    @property
    def current_config(self) -> CodeState | None:
        return self._machine.code_state() if self._machine.is_configured else None

    @property
    def original_config(self) -> CodeState | None:
        return self._original

    def machine_state(self) -> MachineState:
        spec = self._require_spec()
        return MachineState(
            rotors_defined=len(spec.rotors),
            reflectors_defined=len(spec.reflectors),
            processed=self._processed,
            original=self._original,
            current=self.current_config,
        )

    def machine_details(self) -> str:
        text = f"{self._require_spec()}\n{self.machine_state()}"
        if self._machine.is_configured:
            text += "\n" + self._machine.describe()
        return text

    def history(self) -> str:
        return str(self._history)

    # ── snapshots ───────────────────────────────────────────────

    def save_snapshot(self, path: str | Path) -> Path:
        spec = self._require_spec()
        snap = EngineSnapshot(spec, self.machine_state(), self._history)
        return snapshots.save(snap, path, self.config.snapshot_suffix)

    def load_snapshot(self, path: str | Path) -> None:
        snap = snapshots.load(path, self.config.snapshot_suffix)
        state = snap.state

        # assemble everything before touching the session
        machine = Enigma()
        if state.original is not None:
            original, current = state.original, state.current
            if (current.rotor_ids, current.reflector_id, current.plugboard) != (
                original.rotor_ids, original.reflector_id, original.plugboard
            ):
                raise PersistenceError("Snapshot current code does not match its original code")

            config = original.to_config()
            violations = validate_code_config(snap.spec, config)
            if violations:
                raise PersistenceError(
                    "Snapshot code is invalid: " + "; ".join(v.message for v in violations)
                )
            code = build_code(snap.spec, config)
            try:
                code.set_positions(current.positions)
            except (ValueError, ConfigurationError) as exc:
                raise PersistenceError(f"Snapshot positions are invalid: {exc}") from exc
            machine.set_code(code)
            snap.history.record_config(original)

        self._spec = snap.spec
        self._machine = machine
        self._history = snap.history
        self._original = state.original
        self._processed = state.processed
        debug.log("engine", "snapshot restored, processed=%d", self._processed)

    def terminate(self) -> None:
        """Drop the machine and everything recorded with it."""
        self._spec = None
        self._machine = Enigma()
        self._history = MachineHistory()
        self._original = None
        self._processed = 0
        debug.log("engine", "terminated")

    # ── helpers ─────────────────────────────────────────────────

    def _require_spec(self) -> MachineSpec:
        if self._spec is None:
            raise StateError("No machine loaded; load a machine description first.")
        return self._spec

    def _require_configured(self) -> None:
        self._require_spec()
        if not self._machine.is_configured:
            raise StateError("Machine is not configured; set a code first.")

    def __repr__(self) -> str:
        name = self._spec.name if self._spec else None
        return f"<Engine machine={name!r} configured={self.is_configured} processed={self._processed}>"
