# machine_spec.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple

from errors import AlphabetViolation, Reason


# ── Alphabet ──────────────────────────────────────────────────────
class Alphabet:
    """Ordered set of distinct symbols with a char <-> index bijection."""

    __slots__ = ("letters", "_index")

    def __init__(self, letters: str) -> None:
        if not letters:
            raise ValueError("Alphabet letters cannot be empty")
        if len(set(letters)) != len(letters):
            dup = next(ch for ch in letters if letters.count(ch) > 1)
            raise ValueError(f"Alphabet contains duplicate character {dup!r}")
        self.letters: str = letters
        self._index: dict[str, int] = {ch: i for i, ch in enumerate(letters)}

    @property
    def size(self) -> int:
        return len(self.letters)

    def index_of(self, ch: str) -> int:
        try:
            return self._index[ch]
        except KeyError:
            raise AlphabetViolation(
                f"Character {ch!r} is not in the machine alphabet {self.letters!r}.",
                reason=Reason.NOT_IN_ALPHABET,
            ) from None

    def char_at(self, index: int) -> str:
        if not (0 <= index < len(self.letters)):
            hi = len(self.letters) - 1
            raise AlphabetViolation(
                f"Signal {index} out of range 0-{hi} for alphabet {self.letters!r}.",
                reason=Reason.INDEX_OUT_OF_RANGE,
            )
        return self.letters[index]

    def __contains__(self, ch: object) -> bool:
        return ch in self._index

    def __len__(self) -> int:
        return len(self.letters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.letters)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Alphabet):
            return NotImplemented
        return self.letters == other.letters

    def __hash__(self) -> int:
        return hash(self.letters)

    def __repr__(self) -> str:
        return f"<Alphabet {self.letters!r}>"


# ── wheel definitions ─────────────────────────────────────────────
@dataclass(frozen=True, slots=True)
class RotorSpec:
    """Immutable wiring of one rotor, columns kept in row order."""

    id: int
    notch: int          # 0-based row index
    right: str
    left: str

    def __str__(self) -> str:
        return f"Rotor {self.id} (notch {self.notch + 1}): {self.right} / {self.left}"


@dataclass(frozen=True, slots=True)
class ReflectorSpec:
    id: str
    mapping: Tuple[int, ...]

    def pairs(self) -> list[tuple[int, int]]:
        """Each pairing once, lower index first."""
        return [(i, j) for i, j in enumerate(self.mapping) if i < j]

    def __str__(self) -> str:
        shown = " ".join(f"{i + 1}<->{j + 1}" for i, j in self.pairs())
        return f"Reflector {self.id}: {shown}"


@dataclass(frozen=True)
class MachineSpec:
    """A fully validated machine description as produced by the loader."""

    alphabet: Alphabet
    rotors: Dict[int, RotorSpec]
    reflectors: Dict[str, ReflectorSpec]
    rotors_in_use: int
    name: str = field(default="")

    def rotor(self, rotor_id: int) -> RotorSpec | None:
        return self.rotors.get(rotor_id)

    def reflector(self, reflector_id: str) -> ReflectorSpec | None:
        return self.reflectors.get(reflector_id)

    def __str__(self) -> str:
        lines = [
            f"Machine: {self.name or '<unnamed>'}",
            f"  Alphabet: {self.alphabet.letters} (size {self.alphabet.size})",
            f"  Rotors-in-use: {self.rotors_in_use}",
            f"  Rotors (count={len(self.rotors)}):",
        ]
        lines += [f"    {self.rotors[k]}" for k in sorted(self.rotors)]
        lines.append(f"  Reflectors (count={len(self.reflectors)}):")
        lines += [f"    {r}" for r in self.reflectors.values()]
        return "\n".join(lines)
