from __future__ import annotations

import pytest

from dxfscene.mtext import height_from_directives, parse_mtext_content


def test_paragraph_breaks_become_newlines() -> None:
    assert parse_mtext_content("Line1\\PLine2") == ("Line1\nLine2", [])


def test_value_codes_are_collected_in_order() -> None:
    text, directives = parse_mtext_content("{\\Farial|b0;\\H2.5x;Big} text")
    assert text == "Big text"
    assert directives == [("F", "arial|b0"), ("H", "2.5x")]


def test_toggles_have_empty_values() -> None:
    text, directives = parse_mtext_content("\\LUnder\\l")
    assert text == "Under"
    assert directives == [("L", ""), ("l", "")]


def test_escapes_and_special_sequences() -> None:
    assert parse_mtext_content("a\\\\b")[0] == "a\\b"
    assert parse_mtext_content("\\U+0041BC")[0] == "ABC"
    assert parse_mtext_content("1\\~2")[0] == "1 2"
    assert parse_mtext_content("\\S1^2;")[0] == "1/2"
    assert parse_mtext_content("")[0] == ""


def test_height_directives_absolute_and_relative() -> None:
    assert height_from_directives([("H", "3")], 2.0) == 3.0
    assert height_from_directives([("H", "2.5x")], 2.0) == pytest.approx(5.0)
    assert height_from_directives([("H", "4"), ("H", "0.5x")], 2.0) == pytest.approx(2.0)


def test_height_directives_ignore_invalid_values() -> None:
    assert height_from_directives([("H", "abc"), ("H", "-1"), ("F", "2")], 2.0) == 2.0
