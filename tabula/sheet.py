"""The sheet: a sparse table of cells addressed by position."""

from __future__ import annotations

from typing import TextIO

from tabula.cell import Cell, CellValue
from tabula.common import FormulaError, InvalidPositionException, Position, Size


def _check(pos: Position) -> None:
    if not pos.is_valid():
        raise InvalidPositionException("Invalid position")


def _format_value(value: CellValue) -> str:
    if isinstance(value, FormulaError):
        return value.to_string()
    if isinstance(value, str):
        return value
    return format(value, "g")


class Sheet:
    """A sparse table of cells."""

    def __init__(self) -> None:
        self._cells: dict[Position, Cell] = {}

    def set_cell(self, pos: Position, text: str) -> None:
        """Set the text of the cell at ``pos``, creating it if needed."""
        _check(pos)
        cell = self._cells.get(pos)
        if cell is None:
            cell = self._cells[pos] = Cell(self)
        cell.set(text)

    def get_cell(self, pos: Position) -> Cell | None:
        """The cell at ``pos``, or ``None`` if there is none."""
        _check(pos)
        return self._cells.get(pos)

    def clear_cell(self, pos: Position) -> None:
        """Remove the cell at ``pos``, if any."""
        _check(pos)
        self._cells.pop(pos, None)

    def printable_size(self) -> Size:
        """Smallest area from A1 that holds every cell."""
        rows = max((pos.row + 1 for pos in self._cells), default=0)
        cols = max((pos.col + 1 for pos in self._cells), default=0)
        return Size(rows, cols)

    def print_values(self, output: TextIO) -> None:
        """Write cell values as tab-separated rows."""
        self._print(output, lambda cell: _format_value(cell.value()))

    def print_texts(self, output: TextIO) -> None:
        """Write cell texts as tab-separated rows."""
        self._print(output, Cell.text)

    def _print(self, output: TextIO, render) -> None:
        size = self.printable_size()
        for row in range(size.rows):
            fields = []
            for col in range(size.cols):
                cell = self._cells.get(Position(row, col))
                fields.append("" if cell is None else render(cell))
            output.write("\t".join(fields) + "\n")


def create_sheet() -> Sheet:
    """Create an empty sheet."""
    return Sheet()