# history.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from code_factory import CodeState
from errors import StateError


@dataclass(frozen=True, slots=True)
class MessageRecord:
    input: str
    output: str
    duration_ns: int

    def to_dict(self) -> dict:
        return {"input": self.input, "output": self.output, "duration_ns": self.duration_ns}

    @classmethod
    def from_dict(cls, data: dict) -> "MessageRecord":
        return cls(str(data["input"]), str(data["output"]), int(data["duration_ns"]))

    def __str__(self) -> str:
        return f"<{self.input}> --> <{self.output}> ({self.duration_ns} nano-seconds)"


class MachineHistory:
    """Processed messages grouped under the original code they were sent with."""

    def __init__(self) -> None:
        self._groups: Dict[CodeState, List[MessageRecord]] = {}
        self.current: CodeState | None = None

    def record_config(self, state: CodeState) -> None:
        self._groups.setdefault(state, [])
        self.current = state

    def record_message(self, input_text: str, output_text: str, duration_ns: int) -> MessageRecord:
        if self.current is None:
            raise StateError("No code recorded yet; configure the machine before processing.")
        record = MessageRecord(input_text, output_text, duration_ns)
        self._groups[self.current].append(record)
        return record

    def groups(self) -> Dict[CodeState, List[MessageRecord]]:
        return {state: list(records) for state, records in self._groups.items()}

    def clear(self) -> None:
        self._groups.clear()
        self.current = None

    def __len__(self) -> int:
        return len(self._groups)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MachineHistory):
            return NotImplemented
        return self._groups == other._groups and self.current == other.current

    def __str__(self) -> str:
        if not self._groups:
            return "No history available. No messages were processed."
        lines: List[str] = []
        for state, records in self._groups.items():
            lines.append(f"=== Original Code: {state} ===")
            if not records:
                lines.append("  (no messages)")
            lines += [f"  • {r}" for r in records]
        return "\n".join(lines)

    # ── persistence helpers ──────────────────────────────────────
    def to_dict(self) -> dict:
        keys = list(self._groups)
        return {
            "current": keys.index(self.current) if self.current is not None else None,
            "groups": [
                {"code": s.to_dict(), "messages": [r.to_dict() for r in recs]}
                for s, recs in self._groups.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "MachineHistory":
        hist = cls()
        keys: List[CodeState] = []
        for group in data["groups"]:
            state = CodeState.from_dict(group["code"])
            hist._groups[state] = [MessageRecord.from_dict(m) for m in group["messages"]]
            keys.append(state)
        current = data.get("current")
        hist.current = keys[current] if current is not None else None
        return hist
