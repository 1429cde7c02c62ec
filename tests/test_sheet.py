import io

import pytest

from tabula.common import InvalidPositionException, Position, Size
from tabula.sheet import create_sheet


def pos(text):
    return Position.from_string(text)


def test_empty_sheet_has_zero_size():
    assert create_sheet().printable_size() == Size(0, 0)


def test_invalid_positions_raise():
    sheet = create_sheet()
    with pytest.raises(InvalidPositionException):
        sheet.set_cell(Position(-1, 0), "")
    with pytest.raises(InvalidPositionException):
        sheet.get_cell(Position(0, -2))
    with pytest.raises(InvalidPositionException):
        sheet.clear_cell(Position(Position.MAX_ROWS, 0))


def test_clear_cell():
    sheet = create_sheet()
    sheet.set_cell(pos("C2"), "Me gusta")
    sheet.clear_cell(pos("C2"))
    assert sheet.get_cell(pos("C2")) is None

    sheet.clear_cell(pos("A1"))
    sheet.clear_cell(pos("J10"))
    assert sheet.printable_size() == Size(0, 0)


def test_get_missing_cell_is_none():
    sheet = create_sheet()
    sheet.set_cell(pos("A1"), "Hello")
    assert sheet.get_cell(pos("B2")) is None
    assert sheet.get_cell(pos("A1")).text() == "Hello"


def test_print():
    sheet = create_sheet()
    sheet.set_cell(pos("A2"), "meow")
    sheet.set_cell(pos("B2"), "=35")

    assert sheet.printable_size() == Size(2, 2)

    texts = io.StringIO()
    sheet.print_texts(texts)
    assert texts.getvalue() == "\t\nmeow\t=35\n"

    values = io.StringIO()
    sheet.print_values(values)
    assert values.getvalue() == "\t\nmeow\t35\n"


def test_print_arithmetic_error():
    sheet = create_sheet()
    sheet.set_cell(pos("A1"), "=1/0")
    out = io.StringIO()
    sheet.print_values(out)
    assert out.getvalue() == "#ARITHM!\n"


def test_printable_size_shrinks_after_clear():
    sheet = create_sheet()
    sheet.set_cell(pos("A1"), "x")
    sheet.set_cell(pos("C137"), "y")
    assert sheet.printable_size() == Size(137, 3)
    sheet.clear_cell(pos("C137"))
    assert sheet.printable_size() == Size(1, 1)


def test_formula_creates_referenced_empty_cell():
    sheet = create_sheet()
    sheet.set_cell(pos("A1"), "=B3")
    created = sheet.get_cell(pos("B3"))
    assert created.text() == ""
    assert sheet.printable_size() == Size(3, 2)


def test_print_row_count_matches_size():
    sheet = create_sheet()
    sheet.set_cell(pos("B3"), "z")
    out = io.StringIO()
    sheet.print_texts(out)
    lines = out.getvalue().splitlines()
    size = sheet.printable_size()
    assert len(lines) == size.rows
    assert all(line.count("\t") == size.cols - 1 for line in lines)