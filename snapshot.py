# snapshot.py
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from code_factory import CodeState
from debug import Debug
from errors import PersistenceError, StructuralError
from history import MachineHistory
from loader import spec_from_dict, spec_to_dict
from machine_spec import MachineSpec

debug = Debug()

SNAPSHOT_SUFFIX = ".enigma.json"
FORMAT_VERSION = 1


@dataclass(frozen=True, slots=True)
class MachineState:
    rotors_defined: int
    reflectors_defined: int
    processed: int
    original: CodeState | None
    current: CodeState | None

    def __str__(self) -> str:
        return "\n".join([
            f"Rotors defined: {self.rotors_defined}",
            f"Reflectors defined: {self.reflectors_defined}",
            f"Messages processed: {self.processed}",
            f"Original code: {self.original if self.original else '-'}",
            f"Current code:  {self.current if self.current else '-'}",
        ])


@dataclass(slots=True)
class EngineSnapshot:
    spec: MachineSpec
    state: MachineState
    history: MachineHistory


def snapshot_path(path: str | Path, suffix: str = SNAPSHOT_SUFFIX) -> Path:
    """Append *suffix* to *path* unless it is already there."""
    path = Path(path)
    if path.name.endswith(suffix):
        return path
    return path.with_name(path.name + suffix)


# ── to / from document ───────────────────────────────────────────


def to_document(snapshot: EngineSnapshot) -> dict:
    state = snapshot.state
    return {
        "format": FORMAT_VERSION,
        "spec": spec_to_dict(snapshot.spec),
        "state": {
            "processed": state.processed,
            "original": state.original.to_dict() if state.original else None,
            "current": state.current.to_dict() if state.current else None,
        },
        "history": snapshot.history.to_dict(),
    }


def from_document(doc: dict) -> EngineSnapshot:
    if not isinstance(doc, dict) or "spec" not in doc:
        raise PersistenceError("Snapshot document has no machine description")
    if doc.get("format", FORMAT_VERSION) != FORMAT_VERSION:
        raise PersistenceError(f"Unsupported snapshot format {doc.get('format')!r}")

    try:
        spec = spec_from_dict(doc["spec"])
    except StructuralError as exc:
        raise PersistenceError(f"Snapshot machine description is invalid: {exc}") from exc

    try:
        raw_state = doc["state"]
        original = raw_state.get("original")
        current = raw_state.get("current")
        state = MachineState(
            rotors_defined=len(spec.rotors),
            reflectors_defined=len(spec.reflectors),
            processed=int(raw_state.get("processed", 0)),
            original=CodeState.from_dict(original) if original else None,
            current=CodeState.from_dict(current) if current else None,
        )
        history = MachineHistory.from_dict(doc.get("history") or {"groups": []})
    except (KeyError, TypeError, ValueError, IndexError, AttributeError) as exc:
        raise PersistenceError(f"Snapshot document is malformed: {exc}") from exc

    if (state.original is None) != (state.current is None):
        raise PersistenceError("Snapshot has only one of original/current code")
    if state.processed < 0:
        raise PersistenceError(f"Snapshot message count {state.processed} is negative")
    recorded = sum(len(records) for records in history.groups().values())
    if state.processed < recorded:
        raise PersistenceError(
            f"Snapshot message count {state.processed} is below the {recorded} messages in its history"
        )
    return EngineSnapshot(spec, state, history)


# ── file I/O ─────────────────────────────────────────────────────


def save(snapshot: EngineSnapshot, path: str | Path, suffix: str = SNAPSHOT_SUFFIX) -> Path:
    target = snapshot_path(path, suffix)
    if not target.parent.is_dir():
        raise PersistenceError(f"Folder {str(target.parent)!r} does not exist")
    try:
        target.write_text(json.dumps(to_document(snapshot), indent=2), encoding="utf-8")
    except OSError as exc:
        raise PersistenceError(f"Cannot write snapshot {str(target)!r}: {exc}") from exc
    debug.log("snapshot", "saved %s", target)
    return target


def load(path: str | Path, suffix: str = SNAPSHOT_SUFFIX) -> EngineSnapshot:
    source = snapshot_path(path, suffix)
    try:
        doc = json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PersistenceError(f"Cannot read snapshot {str(source)!r}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PersistenceError(f"Snapshot {str(source)!r} is not valid JSON: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise PersistenceError(f"Snapshot {str(source)!r} is not valid UTF-8 text: {exc}") from exc

    snapshot = from_document(doc)
    debug.log("snapshot", "loaded %s (processed=%d)", source, snapshot.state.processed)
    return snapshot
