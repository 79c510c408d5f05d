import struct

import pytest

from rmdb.execution import append_output, format_field, format_output_line
from rmdb.keys import ColType


@pytest.mark.parametrize("value", [0, 42, -7, 2**31 - 1, -(2**31)])
def test_format_int_round_trip(value):
    assert format_field(ColType.INT, struct.pack("<i", value), 4) == str(value)


def test_format_float_uses_six_decimals():
    assert format_field(ColType.FLOAT, struct.pack("<f", 1.5), 4) == "1.500000"


def test_format_float_parses_back():
    text = format_field(ColType.FLOAT, struct.pack("<f", -2.25), 4)
    assert float(text) == -2.25
    assert len(text.split(".")[1]) == 6


def test_format_string_stops_at_nul():
    assert format_field(ColType.STRING, b"abc\0\0", 5) == "abc"


def test_format_string_full_length():
    assert format_field(ColType.STRING, b"abcdefgh", 4) == "abcd"


def test_format_short_int_raises():
    with pytest.raises(ValueError):
        format_field(ColType.INT, b"\x01", 4)


def test_format_short_string_raises():
    with pytest.raises(ValueError):
        format_field(ColType.STRING, b"ab", 5)


def test_format_unknown_type_raises():
    with pytest.raises(ValueError):
        format_field(99, b"\0\0\0\0", 4)


def test_output_line_layout():
    assert format_output_line(["id", "name"]) == "| id | name |"


def test_output_line_empty():
    assert format_output_line([]) == "|"


def test_append_output_writes_header_and_rows(tmp_path):
    path = tmp_path / "output.txt"
    count = append_output(path, ["id", "name"], [["1", "a"], ["2", "b"]])
    assert count == 2
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        format_output_line(["id", "name"]),
        format_output_line(["1", "a"]),
        format_output_line(["2", "b"]),
    ]


def test_append_output_appends(tmp_path):
    path = tmp_path / "output.txt"
    append_output(path, ["x"], [["1"]])
    count = append_output(path, ["x"], [])
    assert count == 0
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines == ["| x |", "| 1 |", "| x |"]