"""Formulas: parsed expressions that can be evaluated against a sheet."""

from __future__ import annotations

from typing import Protocol, Union

from tabula.common import FormulaError, FormulaException, Position
from tabula.formula_ast import parse_formula_ast

FormulaValue = Union[float, FormulaError]


class _SheetLike(Protocol):
    def get_cell(self, pos: Position): ...


class Formula:
    """A syntactically valid formula expression."""

    def __init__(self, expression: str) -> None:
        try:
            self._ast = parse_formula_ast(expression)
        except Exception as exc:
            raise FormulaException("Invalid formula") from exc

    def evaluate(self, sheet: _SheetLike) -> FormulaValue:
        """Compute the value; evaluation errors are returned, not raised."""
        try:
            return self._ast.execute(sheet)
        except FormulaError as error:
            return error

    def expression(self) -> str:
        """The expression in canonical form, with only the needed parentheses."""
        return self._ast.format_formula()

    def referenced_cells(self) -> list[Position]:
        """Referenced positions, sorted and without duplicates."""
        return list(dict.fromkeys(self._ast.cells()))


def parse_formula(expression: str) -> Formula:
    """Parse ``expression`` (without the leading sign); raises ``FormulaException``."""
    return Formula(expression)