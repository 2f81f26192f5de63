# wheels.py
from __future__ import annotations

import string
from typing import Dict, Tuple

from machine_spec import Alphabet, MachineSpec, ReflectorSpec, RotorSpec

# ── alphabets ─────────────────────────────────────────────────────
ALPHA26 = string.ascii_uppercase

# ────────────────────────────────────────────────────────────────────────
#  Wheel database (Legacy set)
# ────────────────────────────────────────────────────────────────────────

# id → (left column, notch symbol); the right column is the plain alphabet
LEGACY_ROTORS: Dict[int, Tuple[str, str]] = {
    1: ("EKMFLGDQVZNTOWYHXUSPAIBRCJ", "Q"),
    2: ("AJDKSIRUXBLHWTMCQGZNPYFVOE", "E"),
    3: ("BDFHJLCPRTXVZNYEIWGAKMUSQO", "V"),
    4: ("ESOVPZJAYQUIRHXLNFTGKDCMWB", "J"),
    5: ("VZBRGITYUPSDNHLXAWMJQOFECK", "Z"),
}

LEGACY_REFLECTORS: Dict[str, str] = {
    "I": "EJMZALYXVBWFCRQUONTSPIKHGD",
    "II": "YRUHQSLDPXNGOKMIEBFZCWVJAT",
    "III": "FVPJIAOYEDRZXWGCTKUQSBNMHL",
}


def legacy_spec() -> MachineSpec:
    """Five rotors, three reflectors, three rotors in use, 26 letters."""
    rotors = {
        rid: RotorSpec(rid, ALPHA26.index(notch), ALPHA26, left)
        for rid, (left, notch) in LEGACY_ROTORS.items()
    }
    reflectors = {
        rid: ReflectorSpec(rid, tuple(ALPHA26.index(ch) for ch in wiring))
        for rid, wiring in LEGACY_REFLECTORS.items()
    }
    return MachineSpec(
        alphabet=Alphabet(ALPHA26),
        rotors=rotors,
        reflectors=reflectors,
        rotors_in_use=3,
        name="Legacy",
    )
