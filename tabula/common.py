"""Core value types shared by the spreadsheet: positions, sizes and errors."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

_LETTERS = 26
_MAX_POS_LETTER_COUNT = 3
_INT_MAX = 2**31 - 1

_SPLIT_RE = re.compile(r"([A-Z]*)(.*)", re.DOTALL)
_DIGITS_RE = re.compile(r"[0-9]+")

FORMULA_SIGN = "="
ESCAPE_SIGN = "'"


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based cell position, ordered by row and then by column."""

    row: int = 0
    col: int = 0

    MAX_ROWS: ClassVar[int] = 16384
    MAX_COLS: ClassVar[int] = 16384
    NONE: ClassVar[Position]

    def is_valid(self) -> bool:
        """Whether the position lies inside the sheet bounds."""
        return 0 <= self.row < self.MAX_ROWS and 0 <= self.col < self.MAX_COLS

    def to_string(self) -> str:
        """Return the A1-style name, or an empty string for an invalid position."""
        if not self.is_valid():
            return ""
        letters = []
        c = self.col
        while c >= 0:
            letters.append(chr(ord("A") + c % _LETTERS))
            c = c // _LETTERS - 1
        return "".join(reversed(letters)) + str(self.row + 1)

    @classmethod
    def from_string(cls, text: str) -> Position:
        """Parse an A1-style name; malformed input yields ``Position.NONE``."""
        match = _SPLIT_RE.fullmatch(text)
        letters, digits = match.group(1), match.group(2)
        if not letters or not digits:
            return cls.NONE
        if len(letters) > _MAX_POS_LETTER_COUNT:
            return cls.NONE
        if not _DIGITS_RE.fullmatch(digits):
            return cls.NONE
        row = int(digits)
        if row > _INT_MAX:
            return cls.NONE
        col = 0
        for ch in letters:
            col = col * _LETTERS + (ord(ch) - ord("A") + 1)
        return cls(row - 1, col - 1)

    def __str__(self) -> str:
        return self.to_string()


Position.NONE = Position(-1, -1)


@dataclass(frozen=True)
class Size:
    """Number of rows and columns of a printable area."""

    rows: int = 0
    cols: int = 0


class FormulaErrorCategory(Enum):
    """Kinds of errors a formula evaluation can produce."""

    REF = "Ref"
    VALUE = "Value"
    ARITHMETIC = "Arithmetic"


_ERROR_NAMES = {
    FormulaErrorCategory.REF: "#REF!",
    FormulaErrorCategory.VALUE: "#VALUE!",
    FormulaErrorCategory.ARITHMETIC: "#ARITHM!",
}


class FormulaError(Exception):
    """An evaluation error; raised during evaluation and stored as a cell value."""

    def __init__(self, category: FormulaErrorCategory) -> None:
        super().__init__(category)
        self.category = category

    def to_string(self) -> str:
        """Return the spreadsheet-style error marker."""
        return _ERROR_NAMES.get(self.category, "#ERROR!")

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"FormulaError({self.category})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FormulaError):
            return self.category == other.category
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.category)


class InvalidPositionException(IndexError):
    """Raised when a method receives a position outside the sheet."""


class FormulaException(RuntimeError):
    """Raised for a syntactically invalid formula."""


class CircularDependencyException(RuntimeError):
    """Raised when a formula would create a circular dependency between cells."""