"""Tests for machine description loading and structural checks."""

import copy
import json

import pytest

from errors import ErrorKind, StructuralError
from loader import load_spec, spec_from_dict, spec_to_dict

VALID = {
    "name": "abcd",
    "alphabet": "ABCD",
    "rotors_in_use": 2,
    "rotors": [
        {"id": 1, "notch": 1, "right": "ABCD", "left": "BADC"},
        {"id": 2, "notch": 4, "right": "ABCD", "left": "CDAB"},
    ],
    "reflectors": [{"id": "I", "pairs": [[1, 2], [3, 4]]}],
}


def broken(**changes):
    data = copy.deepcopy(VALID)
    data.update(changes)
    return data


class TestLoadFiles:
    """Reading descriptions from disk."""

    def test_json(self, small_path):
        """The JSON fixture loads with 0-based notches."""
        spec = load_spec(small_path)
        assert spec.alphabet.letters == "ABCDEF"
        assert spec.rotors_in_use == 3
        assert spec.rotor(1).notch == 3
        assert spec.reflector("I").mapping == (5, 4, 3, 2, 1, 0)

    def test_xml_matches_json(self, small_path, small_xml_path):
        """The BTE XML fixture describes the same machine."""
        assert load_spec(small_xml_path) == load_spec(small_path)

    def test_missing_file(self, tmp_path):
        """A file that is not there is a structural error."""
        with pytest.raises(StructuralError):
            load_spec(tmp_path / "nope.json")

    def test_bad_suffix(self, tmp_path):
        """Only .json and .xml are understood."""
        path = tmp_path / "machine.txt"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(StructuralError):
            load_spec(path)

    def test_unparsable_json(self, tmp_path):
        """Broken JSON is reported, not leaked."""
        path = tmp_path / "machine.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(StructuralError) as info:
            load_spec(path)
        assert info.value.kind is ErrorKind.STRUCTURAL

    def test_unparsable_xml(self, tmp_path):
        """Broken XML is reported, not leaked."""
        path = tmp_path / "machine.xml"
        path.write_text("<BTE-Enigma><ABC>", encoding="utf-8")
        with pytest.raises(StructuralError):
            load_spec(path)

    @pytest.mark.parametrize("name", ["machine.json", "machine.xml"])
    def test_not_utf8(self, tmp_path, name):
        """Undecodable bytes are a structural error, not a decoding crash."""
        path = tmp_path / name
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(StructuralError, match="UTF-8"):
            load_spec(path)

    def test_xml_alphabet_whitespace_trimmed(self, tmp_path, small_xml_path):
        """Whitespace inside <ABC> is ignored."""
        text = small_xml_path.read_text(encoding="utf-8").replace("ABCDEF", "ABC DEF")
        path = tmp_path / "spaced.xml"
        path.write_text(text, encoding="utf-8")
        assert load_spec(path).alphabet.letters == "ABCDEF"


class TestStructuralChecks:
    """Every malformed description is rejected."""

    def test_valid(self):
        """The baseline passes."""
        assert spec_from_dict(VALID).rotors_in_use == 2

    @pytest.mark.parametrize(
        "changes",
        [
            {"alphabet": ""},
            {"alphabet": "ABC"},
            {"alphabet": "ABCA"},
            {"rotors_in_use": 0},
            {"rotors_in_use": 3},
            {"rotors": [{"id": 1, "notch": 1, "right": "ABCD", "left": "BADC"},
                        {"id": 3, "notch": 1, "right": "ABCD", "left": "CDAB"}]},
            {"rotors": [{"id": 1, "notch": 5, "right": "ABCD", "left": "BADC"},
                        {"id": 2, "notch": 1, "right": "ABCD", "left": "CDAB"}]},
            {"rotors": [{"id": 1, "notch": 1, "right": "ABCD", "left": "BADB"},
                        {"id": 2, "notch": 1, "right": "ABCD", "left": "CDAB"}]},
            {"rotors": [{"id": 1, "notch": 1, "right": "ABCD", "left": "BADZ"},
                        {"id": 2, "notch": 1, "right": "ABCD", "left": "CDAB"}]},
            {"rotors": [{"id": 1, "notch": 1, "right": "ABCD", "left": "BADC"},
                        {"id": 1, "notch": 1, "right": "ABCD", "left": "CDAB"}]},
            {"reflectors": [{"id": "II", "pairs": [[1, 2], [3, 4]]}]},
            {"reflectors": [{"id": "X", "pairs": [[1, 2], [3, 4]]}]},
            {"reflectors": [{"id": "I", "pairs": [[1, 1], [3, 4]]}]},
            {"reflectors": [{"id": "I", "pairs": [[1, 2], [2, 4]]}]},
            {"reflectors": [{"id": "I", "pairs": [[1, 2]]}]},
            {"reflectors": [{"id": "I", "pairs": [[1, 5], [3, 4]]}]},
            {"reflectors": []},
        ],
    )
    def test_rejected(self, changes):
        """Bad alphabet, rotor or reflector definitions fail loading."""
        with pytest.raises(StructuralError):
            spec_from_dict(broken(**changes))

    def test_missing_keys(self):
        """Required keys are named in the error."""
        data = copy.deepcopy(VALID)
        del data["reflectors"]
        with pytest.raises(StructuralError, match="reflectors"):
            spec_from_dict(data)

    def test_spec_to_dict_round_trip(self, small_spec):
        """spec_to_dict produces the loader's own shape."""
        data = spec_to_dict(small_spec)
        assert json.loads(json.dumps(data)) == data
        assert spec_from_dict(data) == small_spec
