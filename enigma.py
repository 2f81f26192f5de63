# enigma.py  ─────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from code_factory import Code, CodeState
from debug import Debug
from errors import StateError
from rotor_and_reflector import Direction

debug = Debug()


# ── traces ──────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RotorTrace:
    rotor_id: int
    index: int              # 0 = leftmost
    entry_index: int
    exit_index: int
    entry_char: str
    exit_char: str

    def __str__(self) -> str:
        return (f"rotor {self.index}: {self.entry_char}({self.entry_index})"
                f" -> {self.exit_char}({self.exit_index})")


@dataclass(frozen=True, slots=True)
class ReflectorTrace:
    entry_index: int
    exit_index: int
    entry_char: str
    exit_char: str

    def __str__(self) -> str:
        return (f"{self.entry_char}({self.entry_index})"
                f" -> {self.exit_char}({self.exit_index})")


@dataclass(frozen=True, slots=True)
class SignalTrace:
    """Everything one key press did, kept for display and tests."""

    input_char: str
    output_char: str
    window_before: str
    window_after: str
    advanced: Tuple[int, ...]                   # list indices, in advance order
    forward: Tuple[RotorTrace, ...]             # right → left
    reflector: ReflectorTrace
    backward: Tuple[RotorTrace, ...]            # left → right

    def __str__(self) -> str:
        lines = [
            f"Input:  {self.input_char}",
            f"Output: {self.output_char}",
            f"Window: before={self.window_before} after={self.window_after}",
            f"Stepped: {list(self.advanced)}",
            "",
            "Forward path (right → left):",
            *(f"  {t}" for t in self.forward),
            "",
            "Reflector:",
            f"  {self.reflector}",
            "",
            "Backward path (left → right):",
            *(f"  {t}" for t in self.backward),
        ]
        return "\n".join(lines) + "\n"


# ── machine ─────────────────────────────────────────────────────────


class Enigma:
    def __init__(self, code: Code | None = None) -> None:
        self.code: Code | None = code

    def set_code(self, code: Code) -> None:
        self.code = code
        debug.log("machine", "code set, window=%s", code.window())

    @property
    def is_configured(self) -> bool:
        return self.code is not None

    def _require_code(self) -> Code:
        if self.code is None:
            raise StateError("Machine has no code configured; configure it first.")
        return self.code

    # ── stepping logic  ─────────────────────────────────────────

    def _step_rotors(self, code: Code) -> List[int]:
        """Advance the rightmost rotor and carry notch hits leftwards."""
        advanced: List[int] = []
        idx = len(code.rotors) - 1
        while idx >= 0:
            carry = code.rotors[idx].advance()
            advanced.append(idx)
            if not carry:
                break
            idx -= 1
        return advanced

    # ── encipher one symbol  ────────────────────────────────────

    def process(self, letter: str) -> SignalTrace:
        code = self._require_code()
        kb, alpha = code.keyboard, code.alphabet

        # resolve the symbol before any rotor moves
        entry = kb.forward(letter)

        window_before = code.window()
        advanced = self._step_rotors(code)
        debug.log("stepping", "window %s -> %s advanced=%s",
                  window_before, code.window(), advanced)

        signal = code.plugboard.swap(entry)

        forward: List[RotorTrace] = []
        for idx in reversed(range(len(code.rotors))):
            rotor = code.rotors[idx]
            out = rotor.process(signal, Direction.FORWARD)
            forward.append(RotorTrace(rotor.id, idx, signal, out,
                                      alpha.char_at(signal), alpha.char_at(out)))
            signal = out

        reflected = code.reflector.process(signal)
        refl = ReflectorTrace(signal, reflected, alpha.char_at(signal), alpha.char_at(reflected))
        signal = reflected

        backward: List[RotorTrace] = []
        for idx, rotor in enumerate(code.rotors):
            out = rotor.process(signal, Direction.BACKWARD)
            backward.append(RotorTrace(rotor.id, idx, signal, out,
                                       alpha.char_at(signal), alpha.char_at(out)))
            signal = out

        signal = code.plugboard.swap(signal)
        out_ch = kb.backward(signal)

        return SignalTrace(
            input_char=letter,
            output_char=out_ch,
            window_before=window_before,
            window_after=code.window(),
            advanced=tuple(advanced),
            forward=tuple(forward),
            reflector=refl,
            backward=tuple(backward),
        )

    # ── key helpers ─────────────────────────────────────────────

    def reset(self) -> None:
        """Rotate every rotor back to the code's original window."""
        self._require_code().rewind()

    def set_positions(self, positions: str) -> None:
        self._require_code().set_positions(positions)

    @property
    def window(self) -> str:
        return self._require_code().window()

    def code_state(self) -> CodeState:
        return self._require_code().state()

    def describe(self) -> str:
        """Column view of every rotor's wires, window row first."""
        code = self._require_code()
        lines = [f"Window: {code.window()}  Reflector: {code.reflector_id}"]
        for idx, rotor in enumerate(code.rotors):
            rights = "".join(w.right for w in rotor.wires())
            lefts = "".join(w.left for w in rotor.wires())
            lines.append(f"  [{idx}] rotor {rotor.id} notch={rotor.notch} "
                         f"(+{rotor.notch_distance()})  R:{rights}  L:{lefts}")
        if code.plug_pairs:
            lines.append(f"  plugboard: {repr(code.plugboard)}")
        return "\n".join(lines)

    def __repr__(self) -> str:
        if self.code is None:
            return "<Enigma unconfigured>"
        return f"<Enigma window={self.code.window()} reflector={self.code.reflector_id}>"
