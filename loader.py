# loader.py
from __future__ import annotations

import json
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List

from debug import Debug
from errors import StructuralError
from machine_spec import Alphabet, MachineSpec, ReflectorSpec, RotorSpec

debug = Debug()

ROMAN_ORDER = ("I", "II", "III", "IV", "V")
SUFFIXES = (".json", ".xml")


# ────────────────────────────────────────────────────────────────────────
#  1. Entry point
# ────────────────────────────────────────────────────────────────────────


def load_spec(path: str | Path) -> MachineSpec:
    """Read a machine description (``.json`` or BTE ``.xml``) and check it."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUFFIXES:
        raise StructuralError(
            f"File {str(path)!r} must have one of the extensions {', '.join(SUFFIXES)}"
        )
    if not path.is_file():
        raise StructuralError(f"File {str(path)!r} not found")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise StructuralError(f"Cannot read {str(path)!r}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise StructuralError(f"File {str(path)!r} is not valid UTF-8 text: {exc}") from exc

    if suffix == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StructuralError(f"Parsing failed for file {str(path)!r}: {exc}") from exc
    else:
        data = _xml_to_dict(text, path)

    spec = spec_from_dict(data)
    debug.log("loader", "loaded %r: %d rotors, %d reflectors",
              spec.name, len(spec.rotors), len(spec.reflectors))
    return spec


# ────────────────────────────────────────────────────────────────────────
#  2. Dictionary shape  <->  MachineSpec
# ────────────────────────────────────────────────────────────────────────


def spec_from_dict(data: dict) -> MachineSpec:
    if not isinstance(data, dict):
        raise StructuralError("Machine description must be a JSON object")
    missing = {"alphabet", "rotors_in_use", "rotors", "reflectors"} - data.keys()
    if missing:
        raise StructuralError(f"Missing keys in machine description: {', '.join(sorted(missing))}")

    try:
        alphabet = Alphabet(_clean_alphabet(data["alphabet"]))
        rotors = _build_rotors(data["rotors"], alphabet)
        reflectors = _build_reflectors(data["reflectors"], alphabet)
        rotors_in_use = int(data["rotors_in_use"])
    except (KeyError, TypeError, ValueError) as exc:
        if isinstance(exc, StructuralError):
            raise
        raise StructuralError(f"Malformed machine description: {exc}") from exc

    if rotors_in_use <= 0:
        raise StructuralError(f"rotors_in_use must be positive, got {rotors_in_use}")
    if rotors_in_use > len(rotors):
        raise StructuralError(
            f"rotors_in_use is {rotors_in_use} but only {len(rotors)} rotors are defined"
        )

    return MachineSpec(alphabet, rotors, reflectors, rotors_in_use, str(data.get("name", "")))


def spec_to_dict(spec: MachineSpec) -> dict:
    return {
        "name": spec.name,
        "alphabet": spec.alphabet.letters,
        "rotors_in_use": spec.rotors_in_use,
        "rotors": [
            {"id": r.id, "notch": r.notch + 1, "right": r.right, "left": r.left}
            for r in (spec.rotors[k] for k in sorted(spec.rotors))
        ],
        "reflectors": [
            {"id": r.id, "pairs": [[i + 1, j + 1] for i, j in r.pairs()]}
            for r in spec.reflectors.values()
        ],
    }


# ── alphabet ─────────────────────────────────────────────────────


def _clean_alphabet(raw: object) -> str:
    if raw is None:
        raise StructuralError("Alphabet section is missing")
    clean = "".join(str(raw).split())
    if not clean:
        raise StructuralError("Alphabet is empty after removing whitespace")
    if len(clean) % 2:
        raise StructuralError(
            f"Alphabet must have even length, but got {len(clean)} characters ({clean!r})"
        )
    for ch in clean:
        if clean.count(ch) > 1:
            raise StructuralError(f"Character {ch!r} appears more than once in the alphabet")
    return clean


# ── rotors ───────────────────────────────────────────────────────


def _build_rotors(items: List[dict], alphabet: Alphabet) -> Dict[int, RotorSpec]:
    if not items:
        raise StructuralError("No rotors defined")

    size = alphabet.size
    result: Dict[int, RotorSpec] = {}
    for item in items:
        rid = int(item["id"])
        if rid in result:
            raise StructuralError(f"Rotor ID {rid} appears more than once")

        notch = int(item["notch"])
        if not (1 <= notch <= size):
            raise StructuralError(f"Rotor {rid} notch {notch} is out of bounds 1-{size}")

        right, left = str(item["right"]), str(item["left"])
        for label, column in (("right", right), ("left", left)):
            _check_column(rid, label, column, alphabet)

        result[rid] = RotorSpec(rid, notch - 1, right, left)

    ids = sorted(result)
    if ids != list(range(1, len(ids) + 1)):
        raise StructuralError(
            f"Rotor IDs must form a contiguous sequence starting from 1, got {ids}"
        )
    return result


def _check_column(rid: int, label: str, column: str, alphabet: Alphabet) -> None:
    for ch in column:
        if ch not in alphabet:
            raise StructuralError(f"Rotor {rid} uses {ch!r} ({label}) which is not in the alphabet")
    if len(column) != alphabet.size or len(set(column)) != alphabet.size:
        raise StructuralError(
            f"Rotor {rid} {label} column does not define a full permutation of the alphabet"
        )


# ── reflectors ───────────────────────────────────────────────────


def _build_reflectors(items: List[dict], alphabet: Alphabet) -> Dict[str, ReflectorSpec]:
    if not items:
        raise StructuralError("No reflectors defined")

    size = alphabet.size
    result: Dict[str, ReflectorSpec] = {}
    for item in items:
        rid = str(item["id"]).strip()
        if rid in result:
            raise StructuralError(f"Duplicate reflector id ({rid})")
        if rid not in ROMAN_ORDER:
            raise StructuralError(
                f"Reflector ID {rid!r} is not a valid Roman numeral "
                f"(valid reflector IDs: {', '.join(ROMAN_ORDER)})"
            )

        mapping: List[int] = [-1] * size
        for a, b in item["pairs"]:
            i, j = int(a) - 1, int(b) - 1
            if not (0 <= i < size and 0 <= j < size):
                raise StructuralError(f"Reflector {rid} mapping out of range ({a} <-> {b})")
            if i == j:
                raise StructuralError(f"Reflector {rid} maps letter to itself at position {a}")
            for idx in (i, j):
                if mapping[idx] != -1:
                    raise StructuralError(f"Reflector {rid} reuses index {idx + 1}")
            mapping[i], mapping[j] = j, i

        if -1 in mapping:
            raise StructuralError(f"Reflector {rid} does not cover index {mapping.index(-1) + 1}")
        result[rid] = ReflectorSpec(rid, tuple(mapping))

    for required in ROMAN_ORDER[: len(result)]:
        if required not in result:
            raise StructuralError(
                "Reflector IDs must form a contiguous Roman sequence starting from I, "
                f"got {sorted(result)}, missing {required}"
            )
    return result


# ────────────────────────────────────────────────────────────────────────
#  3. BTE XML reader
# ────────────────────────────────────────────────────────────────────────


def _xml_to_dict(text: str, path: Path) -> dict:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise StructuralError(f"Parsing failed for file {str(path)!r}: {exc}") from exc

    if root.tag != "BTE-Enigma":
        raise StructuralError(f"Root element must be <BTE-Enigma>, got <{root.tag}>")

    abc = root.find("ABC")
    rotors_el = root.find("BTE-Rotors")
    reflectors_el = root.find("BTE-Reflectors")
    if rotors_el is None or not len(rotors_el):
        raise StructuralError("<BTE-Rotors> section is missing")
    if reflectors_el is None or not len(reflectors_el):
        raise StructuralError("<BTE-Reflectors> section is missing")

    try:
        rotors = []
        for rotor in rotors_el.iter("BTE-Rotor"):
            rows = rotor.findall("BTE-Positioning")
            for row in rows:
                right, left = row.get("right") or "", row.get("left") or ""
                if len(right) != 1 or len(left) != 1:
                    raise StructuralError(
                        f"Rotor {rotor.get('id')} has illegal positioning values: "
                        f"right={right!r} left={left!r}"
                    )
            rotors.append({
                "id": int(rotor.attrib["id"]),
                "notch": int(rotor.attrib["notch"]),
                "right": "".join(row.attrib["right"] for row in rows),
                "left": "".join(row.attrib["left"] for row in rows),
            })

        reflectors = [
            {
                "id": refl.attrib["id"],
                "pairs": [
                    [int(p.attrib["input"]), int(p.attrib["output"])]
                    for p in refl.findall("BTE-Reflect")
                ],
            }
            for refl in reflectors_el.iter("BTE-Reflector")
        ]
        rotors_in_use = int(root.attrib["rotors-count"])
    except (KeyError, ValueError) as exc:
        if isinstance(exc, StructuralError):
            raise
        raise StructuralError(f"Malformed BTE element in {str(path)!r}: {exc}") from exc

    return {
        "name": root.get("name", path.stem),
        "alphabet": abc.text if abc is not None else None,
        "rotors_in_use": rotors_in_use,
        "rotors": rotors,
        "reflectors": reflectors,
    }
