# code_factory.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from random import Random, SystemRandom
from typing import List, Tuple

from debug import Debug
from errors import ConfigurationError
from keyboard_and_plugboard import Keyboard, Plugboard
from machine_spec import Alphabet, MachineSpec
from rotor_and_reflector import Reflector, Rotor

debug = Debug()

_SECTION = re.compile(r"<([^<>]*)>")


# ────────────────────────────────────────────────────────────────────────
#  1. Requested configuration
# ────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CodeConfig:
    """What the caller asks for; everything is kept left → right."""

    rotor_ids: Tuple[int, ...]
    positions: str
    reflector_id: str
    plugboard: str = ""             # "ABCD" plugs A↔B and C↔D; empty = none

    @classmethod
    def parse(cls, text: str) -> "CodeConfig":
        """
        Read the compact notation ``<3,2,1><CCC><I>`` with an optional fourth
        section for the plugboard, e.g. ``<3,2,1><CCC><I><ABCD>``.
        """
        compact = text.strip()
        sections = _SECTION.findall(compact)
        if "".join(f"<{s}>" for s in sections) != compact or len(sections) not in (3, 4):
            raise ConfigurationError(
                f"Code {text!r} is not in the form <ids><positions><reflector>[<plugs>], "
                "e.g. <3,2,1><CCC><I>."
            )

        ids_part, positions, reflector_id, *rest = sections
        try:
            rotor_ids = tuple(int(tok) for tok in ids_part.split(","))
        except ValueError:
            raise ConfigurationError(
                f"Rotor ids {ids_part!r} must be comma-separated integers, e.g. 3,2,1."
            ) from None

        return cls(rotor_ids, positions, reflector_id.strip(), rest[0] if rest else "")

    def __str__(self) -> str:
        ids = ",".join(str(i) for i in self.rotor_ids)
        text = f"<{ids}><{self.positions}><{self.reflector_id}>"
        return text + (f"<{self.plugboard}>" if self.plugboard else "")


# ────────────────────────────────────────────────────────────────────────
#  2. Machine code snapshot (value object)
# ────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class CodeState:
    rotor_ids: Tuple[int, ...]
    positions: str
    notch_distances: Tuple[int, ...]
    reflector_id: str
    plugboard: str = ""

    def to_config(self) -> CodeConfig:
        return CodeConfig(self.rotor_ids, self.positions, self.reflector_id, self.plugboard)

    def to_dict(self) -> dict:
        return {
            "rotor_ids": list(self.rotor_ids),
            "positions": self.positions,
            "notch_distances": list(self.notch_distances),
            "reflector_id": self.reflector_id,
            "plugboard": self.plugboard,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CodeState":
        return cls(
            tuple(int(i) for i in data["rotor_ids"]),
            str(data["positions"]),
            tuple(int(d) for d in data["notch_distances"]),
            str(data["reflector_id"]),
            str(data.get("plugboard", "")),
        )

    def __str__(self) -> str:
        ids = ",".join(str(i) for i in self.rotor_ids)
        windows = ",".join(f"{p}({d})" for p, d in zip(self.positions, self.notch_distances))
        text = f"<{ids}><{windows}><{self.reflector_id}>"
        if self.plugboard:
            plugs = self.plugboard
            text += "<" + ",".join(f"{a}|{b}" for a, b in zip(plugs[::2], plugs[1::2])) + ">"
        return text


# ────────────────────────────────────────────────────────────────────────
#  3. Runtime code bundle
# ────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class Code:
    """The assembled runtime parts. Only the rotors mutate (in place)."""

    alphabet: Alphabet
    keyboard: Keyboard
    rotors: List[Rotor]             # left → right
    reflector: Reflector
    plugboard: Plugboard
    rotor_ids: Tuple[int, ...]
    positions: str                  # original window, left → right
    reflector_id: str
    plug_pairs: str = field(default="")

    def window(self) -> str:
        return "".join(r.position for r in self.rotors)

    def state(self) -> CodeState:
        return CodeState(
            self.rotor_ids,
            self.window(),
            tuple(r.notch_distance() for r in self.rotors),
            self.reflector_id,
            self.plug_pairs,
        )

    def rewind(self) -> None:
        """Turn every rotor back to the original positions."""
        self.set_positions(self.positions)

    def set_positions(self, positions: str) -> None:
        if len(positions) != len(self.rotors):
            raise ConfigurationError(
                f"Expected {len(self.rotors)} positions, got {len(positions)} in {positions!r}"
            )
        for rotor, target in zip(self.rotors, positions):
            rotor.set_position(target)


def build_code(spec: MachineSpec, config: CodeConfig) -> Code:
    """Assemble fresh runtime objects for an already validated *config*."""
    alphabet = spec.alphabet
    keyboard = Keyboard(alphabet)

    rotors: List[Rotor] = []
    for rotor_id in config.rotor_ids:
        rspec = spec.rotor(rotor_id)
        if rspec is None:
            raise ConfigurationError(f"Unknown rotor id {rotor_id!r}")
        rotors.append(Rotor(rspec.right, rspec.left, rspec.notch, rotor_id=rspec.id))

    refl_spec = spec.reflector(config.reflector_id)
    if refl_spec is None:
        raise ConfigurationError(f"Unknown reflector id {config.reflector_id!r}")

    code = Code(
        alphabet=alphabet,
        keyboard=keyboard,
        rotors=rotors,
        reflector=Reflector(refl_spec.mapping, refl_spec.id),
        plugboard=Plugboard.from_string(config.plugboard, keyboard),
        rotor_ids=tuple(config.rotor_ids),
        positions=config.positions,
        reflector_id=config.reflector_id,
        plug_pairs=config.plugboard,
    )
    try:
        code.rewind()
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    debug.log("machine", "built code %s", config)
    return code


# ────────────────────────────────────────────────────────────────────────
#  4. Random configuration
# ────────────────────────────────────────────────────────────────────────


def build_rng(seed: int | None) -> Random | SystemRandom:
    """Deterministic RNG when *seed* given; CSPRNG otherwise."""
    return Random(seed) if seed is not None else SystemRandom()


def choose_pairs(alpha: str, k: int, rng: Random | SystemRandom) -> List[str]:
    """Return *k* disjoint plug pairs."""
    k = min(k, len(alpha) // 2)
    pool = list(alpha)
    rng.shuffle(pool)
    return [a + b for a, b in zip(pool[::2], pool[1::2])][:k]


def random_config(
    spec: MachineSpec,
    rng: Random | SystemRandom,
    max_plugs: int = 5,
) -> CodeConfig:
    letters = spec.alphabet.letters
    rotor_ids = tuple(rng.sample(sorted(spec.rotors), spec.rotors_in_use))
    positions = "".join(rng.choice(letters) for _ in rotor_ids)
    reflector_id = rng.choice(sorted(spec.reflectors))
    plugs = choose_pairs(letters, rng.randint(0, max(0, max_plugs)), rng)
    return CodeConfig(rotor_ids, positions, reflector_id, "".join(plugs))
