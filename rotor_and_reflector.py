# rotor_and_reflector.py
from __future__ import annotations

from collections import deque
from enum import Enum
from typing import NamedTuple, Sequence

from debug import Debug

debug = Debug()


class Direction(Enum):
    FORWARD = "forward"      # keyboard → reflector
    BACKWARD = "backward"    # reflector → keyboard


class Wire(NamedTuple):
    right: str
    left: str


class Rotor:
    """
    Mechanical wheel: an ordered list of (right, left) contacts that physically
    rotates. Row 0 is the window; advancing moves the top wire to the bottom.
    """

    def __init__(self, right: str, left: str, notch: int, rotor_id: int = 0) -> None:
        if len(right) != len(left):
            raise ValueError("right and left columns must have the same length")
        if not (0 <= notch < len(right)):
            raise ValueError(f"notch {notch} outside 0–{len(right) - 1}")

        self.id = rotor_id
        self.size = len(right)
        self._wires: deque[Wire] = deque(Wire(r, l) for r, l in zip(right, left))
        self.notch: str = right[notch]      # fixed symbol, travels with its wire

    # ── stepping --------------------------------------------------
    def _rotate(self) -> None:
        self._wires.rotate(-1)

    def advance(self) -> bool:
        """Step once and return True when the notch reaches the window."""
        self._rotate()
        hit = self.position == self.notch
        debug.log("stepping", "rotor %d -> %s, notch_hit=%s", self.id, self.position, hit)
        return hit

    @property
    def position(self) -> str:
        return self._wires[0].right

    def set_position(self, target: str) -> None:
        for _ in range(self.size):
            if self.position == target:
                return
            self._rotate()
        if self.position != target:
            raise ValueError(f"Unable to reach position {target!r} in rotor {self.id}")

    def notch_distance(self) -> int:
        """Steps needed before the notch shows in the window."""
        for row, wire in enumerate(self._wires):
            if wire.right == self.notch:
                return row
        raise RuntimeError(f"Notch {self.notch!r} missing from rotor {self.id}")

    # ── signal paths ---------------------------------------------
    def process(self, signal: int, direction: Direction) -> int:
        if not (0 <= signal < self.size):
            raise ValueError(f"Entry index {signal} out of range for rotor {self.id}")

        entry = self._wires[signal]
        if direction is Direction.FORWARD:
            symbol = entry.right
            exit_row = next(i for i, w in enumerate(self._wires) if w.left == symbol)
        else:
            symbol = entry.left
            exit_row = next(i for i, w in enumerate(self._wires) if w.right == symbol)

        debug.log("rotor", "rotor %d %s %d->%d via %r",
                  self.id, direction.value, signal, exit_row, symbol)
        return exit_row

    def wires(self) -> list[Wire]:
        """Current rows, window first."""
        return list(self._wires)

    # ── niceties --------------------------------------------------
    def __repr__(self) -> str:
        return f"<Rotor {self.id} pos={self.position} notch={self.notch}>"


class Reflector:
    def __init__(self, mapping: Sequence[int], reflector_id: str = "") -> None:
        self.id = reflector_id
        self.size = len(mapping)
        self._map: tuple[int, ...] = tuple(mapping)

    def process(self, signal: int) -> int:
        mapped = self._map[signal]
        debug.log("reflector", "%s: %d->%d", self.id, signal, mapped)
        return mapped

    def __repr__(self) -> str:
        return f"<Reflector {self.id}>"
