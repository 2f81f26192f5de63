# validator.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from code_factory import CodeConfig
from errors import ConfigurationError, ErrorKind, MessageError, Reason
from machine_spec import Alphabet, MachineSpec

_CONTROL_NAMES = {
    0: "NUL",
    9: "TAB",
    10: "NEWLINE (\\n)",
    13: "CARRIAGE RETURN (\\r)",
    27: "ESC",
}


@dataclass(frozen=True, slots=True)
class Violation:
    reason: Reason
    message: str
    position: int | None = None     # 0-based index into the checked text

    def __str__(self) -> str:
        return self.message


# ── helpers ───────────────────────────────────────────────────────


def is_forbidden_control(ch: str) -> bool:
    code = ord(ch)
    return code < 32 or code == 127


def describe_char(ch: str) -> str:
    if is_forbidden_control(ch):
        return _CONTROL_NAMES.get(ord(ch), "CONTROL") + f" (code {ord(ch)})"
    return repr(ch)


def _check_pair(a: str, b: str, seen: set[str], alphabet: Alphabet) -> Violation | None:
    for ch in (a, b):
        if ch not in alphabet:
            return Violation(
                Reason.PLUGBOARD_NOT_IN_ALPHABET,
                f"Plugboard symbol {describe_char(ch)} is not in the alphabet "
                f"{alphabet.letters!r}.",
            )
    if a == b:
        return Violation(
            Reason.PLUGBOARD_SELF_PAIR,
            f"Plugboard pair {a}{b} maps {a!r} to itself; pair two different symbols.",
        )
    for ch in (a, b):
        if ch in seen:
            return Violation(
                Reason.PLUGBOARD_REPEAT,
                f"Plugboard symbol {ch!r} appears in more than one pair; "
                "each symbol may be plugged once.",
            )
    return None


# ── configuration ────────────────────────────────────────────────


def validate_code_config(spec: MachineSpec, config: CodeConfig) -> List[Violation]:
    """Collect everything wrong with *config*; an empty list means it is usable."""
    out: List[Violation] = []
    need = spec.rotors_in_use
    ids = list(config.rotor_ids)

    if not ids:
        out.append(Violation(Reason.MISSING_FIELD, "No rotor ids given."))
    elif len(ids) != need:
        out.append(Violation(
            Reason.ROTOR_COUNT,
            f"Exactly {need} rotors are required, got {len(ids)} ({ids}).",
        ))

    dupes = sorted({i for i in ids if ids.count(i) > 1})
    if dupes:
        out.append(Violation(
            Reason.DUPLICATE_ROTOR,
            f"Rotor id(s) {dupes} used more than once; every rotor may appear once.",
        ))

    unknown = [i for i in ids if spec.rotor(i) is None]
    if unknown:
        out.append(Violation(
            Reason.UNKNOWN_ROTOR,
            f"Unknown rotor id(s) {unknown}; defined ids are {sorted(spec.rotors)}.",
        ))

    if not config.positions:
        out.append(Violation(Reason.MISSING_FIELD, "No starting positions given."))
    elif len(config.positions) != need:
        out.append(Violation(
            Reason.POSITION_COUNT,
            f"Exactly {need} positions are required, got {len(config.positions)} "
            f"({config.positions!r}).",
        ))
    for idx, ch in enumerate(config.positions):
        if ch not in spec.alphabet:
            out.append(Violation(
                Reason.POSITION_NOT_IN_ALPHABET,
                f"Position {describe_char(ch)} at index {idx} is not in the alphabet "
                f"{spec.alphabet.letters!r}.",
                idx,
            ))

    if not config.reflector_id:
        out.append(Violation(Reason.MISSING_FIELD, "No reflector id given."))
    elif spec.reflector(config.reflector_id) is None:
        out.append(Violation(
            Reason.UNKNOWN_REFLECTOR,
            f"Unknown reflector {config.reflector_id!r}; "
            f"defined reflectors are {', '.join(spec.reflectors)}.",
        ))

    out.extend(validate_plugboard(spec.alphabet, config.plugboard))
    return out


def validate_plugboard(alphabet: Alphabet, plugs: str) -> List[Violation]:
    if len(plugs) % 2:
        return [Violation(
            Reason.PLUGBOARD_ODD_LENGTH,
            f"Plugboard {plugs!r} has odd length {len(plugs)}; give symbols in pairs.",
        )]

    out: List[Violation] = []
    seen: set[str] = set()
    for a, b in zip(plugs[::2], plugs[1::2]):
        bad = _check_pair(a, b, seen, alphabet)
        if bad is not None:
            out.append(bad)
        seen.update((a, b))
    return out


# ── messages ─────────────────────────────────────────────────────


def validate_message(alphabet: Alphabet, text: str) -> List[Violation]:
    out: List[Violation] = []
    for pos, ch in enumerate(text):
        if is_forbidden_control(ch):
            out.append(Violation(
                Reason.FORBIDDEN_CONTROL,
                f"Control character {describe_char(ch)} at position {pos} is not allowed; "
                "remove it from the message.",
                pos,
            ))
        elif ch not in alphabet:
            out.append(Violation(
                Reason.NOT_IN_ALPHABET,
                f"Character {ch!r} at position {pos} is not in the alphabet "
                f"{alphabet.letters!r}; use only those symbols.",
                pos,
            ))
    return out


def normalize_case(alphabet: Alphabet, text: str) -> str:
    """Upper-case a symbol only when that is the form the alphabet knows."""
    folded = []
    for ch in text:
        if ch not in alphabet and ch.upper() in alphabet:
            folded.append(ch.upper())
        else:
            folded.append(ch)
    return "".join(folded)


# ── boundary ─────────────────────────────────────────────────────


def raise_for(violations: Sequence[Violation]) -> None:
    """Turn collected violations into one exception; no-op when empty."""
    if not violations:
        return
    first = violations[0]
    text = "; ".join(v.message for v in violations)
    if first.reason.kind is ErrorKind.MESSAGE:
        raise MessageError(text, reason=first.reason, position=first.position)
    raise ConfigurationError(text)


__all__ = [
    "Reason",
    "Violation",
    "describe_char",
    "is_forbidden_control",
    "normalize_case",
    "raise_for",
    "validate_code_config",
    "validate_message",
    "validate_plugboard",
]
