# keyboard_and_plugboard.py
from __future__ import annotations

from debug import Debug
from errors import ConfigurationError
from machine_spec import Alphabet

debug = Debug()


# ── Keyboard ──────────────────────────────────────────────────────
class Keyboard:
    """The only place where symbols become signals and back again."""

    def __init__(self, alphabet: Alphabet) -> None:
        self.alphabet: Alphabet = alphabet

    @property
    def size(self) -> int:
        return self.alphabet.size

    # letter → integer signal
    def forward(self, letter: str) -> int:
        signal = self.alphabet.index_of(letter)
        debug.log("keyboard", "%r -> %d", letter, signal)
        return signal

    # integer signal → letter
    def backward(self, signal: int) -> str:
        return self.alphabet.char_at(signal)


# ── Plugboard ─────────────────────────────────────────────────────
class Plugboard:
    def __init__(self, size: int) -> None:
        self.mapping: list[int] = list(range(size))

    @classmethod
    def from_string(cls, plugs: str, keyboard: Keyboard) -> "Plugboard":
        """Plug every consecutive symbol pair, e.g. ``"ABCD"`` → A↔B, C↔D."""
        if len(plugs) % 2:
            raise ConfigurationError(
                f"Plugboard {plugs!r} has odd length {len(plugs)}; "
                "give symbols in pairs such as 'ABCD'."
            )
        board = cls(keyboard.size)
        for a, b in zip(plugs[::2], plugs[1::2]):
            board.plug(keyboard.forward(a), keyboard.forward(b))
        return board

    def plug(self, a: int, b: int) -> None:
        if a == b:
            raise ConfigurationError(f"Cannot plug signal {a} to itself")
        for idx in (a, b):
            if self.mapping[idx] != idx:
                raise ConfigurationError(
                    f"Signal {idx} is already plugged to {self.mapping[idx]}"
                )

        # passed validation → commit swap
        self.mapping[a], self.mapping[b] = b, a
        debug.log("plugboard", "plugged %d<->%d", a, b)

    def swap(self, signal: int) -> int:
        return self.mapping[signal]

    def pairs(self) -> list[tuple[int, int]]:
        return [(a, b) for a, b in enumerate(self.mapping) if a < b]

    def __repr__(self) -> str:
        swaps = [f"{a}-{b}" for a, b in self.pairs()]
        return f"<Plugboard {' '.join(swaps) or 'identity'}>"
