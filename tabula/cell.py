"""Cells of a sheet: empty, text or formula content."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Iterable, Protocol, Union

from tabula.common import (
    ESCAPE_SIGN,
    FORMULA_SIGN,
    CircularDependencyException,
    FormulaError,
    Position,
)
from tabula.formula import Formula, parse_formula

CellValue = Union[str, float, FormulaError]


class _SheetLike(Protocol):
    def get_cell(self, pos: Position): ...

    def set_cell(self, pos: Position, text: str) -> None: ...


class _Content(ABC):
    @abstractmethod
    def value(self, sheet: _SheetLike) -> CellValue: ...

    @abstractmethod
    def text(self) -> str: ...

    def referenced_cells(self) -> list[Position]:
        return []


class _Empty(_Content):
    def value(self, sheet: _SheetLike) -> CellValue:
        return ""

    def text(self) -> str:
        return ""


class _Text(_Content):
    def __init__(self, text: str) -> None:
        self._text = text

    def value(self, sheet: _SheetLike) -> CellValue:
        if self._text.startswith(ESCAPE_SIGN):
            return self._text[1:]
        return self._text

    def text(self) -> str:
        return self._text


class _FormulaContent(_Content):
    def __init__(self, formula: Formula) -> None:
        self._formula = formula

    def value(self, sheet: _SheetLike) -> CellValue:
        return self._formula.evaluate(sheet)

    def text(self) -> str:
        return FORMULA_SIGN + self._formula.expression()

    def referenced_cells(self) -> list[Position]:
        return self._formula.referenced_cells()


class Cell:
    """A single cell bound to the sheet that owns it."""

    def __init__(self, sheet: _SheetLike) -> None:
        self._sheet = sheet
        self._content: _Content = _Empty()

    def set(self, text: str) -> None:
        """Replace the content; formulas are validated before anything changes."""
        content: _Content
        if len(text) > 1 and text.startswith(FORMULA_SIGN):
            content = _FormulaContent(parse_formula(text[1:]))
            references = content.referenced_cells()
            if self._creates_cycle(references):
                raise CircularDependencyException("Circular Dependency Exception")
            for pos in references:
                if self._sheet.get_cell(pos) is None:
                    self._sheet.set_cell(pos, "")
        elif not text:
            content = _Empty()
        else:
            content = _Text(text)
        self._content = content

    def clear(self) -> None:
        """Make the cell empty."""
        self._content = _Empty()

    def value(self) -> CellValue:
        """Text, number or evaluation error shown by the cell."""
        return self._content.value(self._sheet)

    def text(self) -> str:
        """The text the cell was set to, formulas in canonical form."""
        return self._content.text()

    def referenced_cells(self) -> list[Position]:
        """Positions the cell's formula refers to, sorted and unique."""
        return self._content.referenced_cells()

    def is_referenced(self) -> bool:
        """Whether the cell's formula refers to other cells."""
        return bool(self._content.referenced_cells())

    def _creates_cycle(self, references: Iterable[Position]) -> bool:
        pending = deque(references)
        visited: set[Position] = set()
        while pending:
            pos = pending.popleft()
            if pos in visited:
                continue
            visited.add(pos)
            cell = self._sheet.get_cell(pos)
            if cell is None:
                continue
            if cell is self:
                return True
            pending.extend(cell.referenced_cells())
        return False