"""Parsing, printing and evaluation of arithmetic formula expressions."""

from __future__ import annotations

import math
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import IO, Iterator, Protocol

from tabula.common import (
    FormulaError,
    FormulaErrorCategory,
    FormulaException,
    Position,
)


class ParsingError(RuntimeError):
    """Raised when a formula cannot be tokenised or parsed."""


class _SheetLike(Protocol):
    def get_cell(self, pos: Position): ...


class _Prec(IntEnum):
    ADD = 0
    SUB = 1
    MUL = 2
    DIV = 3
    UNARY = 4
    ATOM = 5


# A bit is set when parentheses are needed around a child.
_PR_NONE = 0b00
_PR_LEFT = 0b01
_PR_RIGHT = 0b10
_PR_BOTH = _PR_LEFT | _PR_RIGHT

# _RULES[parent][child]; see the analysis of when dropping parentheses
# would change the tree: only the listed combinations require them.
_RULES = (
    (_PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE),
    (_PR_RIGHT, _PR_RIGHT, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE),
    (_PR_BOTH, _PR_BOTH, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE),
    (_PR_BOTH, _PR_BOTH, _PR_RIGHT, _PR_RIGHT, _PR_NONE, _PR_NONE),
    (_PR_BOTH, _PR_BOTH, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE),
    (_PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE, _PR_NONE),
)

_NUMERIC_TEXT_RE = re.compile(
    r"[ \t\n\r\f\v]*[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)


def _format_number(value: float) -> str:
    return format(value, "g")


class _Expr(ABC):
    @property
    @abstractmethod
    def precedence(self) -> _Prec: ...

    @abstractmethod
    def format_tree(self) -> str: ...

    @abstractmethod
    def _format_body(self, precedence: _Prec) -> str: ...

    @abstractmethod
    def evaluate(self, sheet: _SheetLike) -> float: ...

    def format(self, parent: _Prec, right_child: bool = False) -> str:
        precedence = self.precedence
        mask = _PR_RIGHT if right_child else _PR_LEFT
        body = self._format_body(precedence)
        if _RULES[parent][precedence] & mask:
            return f"({body})"
        return body


class _BinaryOp(Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"


_BINARY_PRECEDENCE = {
    _BinaryOp.ADD: _Prec.ADD,
    _BinaryOp.SUB: _Prec.SUB,
    _BinaryOp.MUL: _Prec.MUL,
    _BinaryOp.DIV: _Prec.DIV,
}


@dataclass
class _BinaryExpr(_Expr):
    op: _BinaryOp
    lhs: _Expr
    rhs: _Expr

    @property
    def precedence(self) -> _Prec:
        return _BINARY_PRECEDENCE[self.op]

    def format_tree(self) -> str:
        return f"({self.op.value} {self.lhs.format_tree()} {self.rhs.format_tree()})"

    def _format_body(self, precedence: _Prec) -> str:
        return (
            self.lhs.format(precedence)
            + self.op.value
            + self.rhs.format(precedence, right_child=True)
        )

    def evaluate(self, sheet: _SheetLike) -> float:
        lhs = self.lhs.evaluate(sheet)
        rhs = self.rhs.evaluate(sheet)
        try:
            if self.op is _BinaryOp.ADD:
                result = lhs + rhs
            elif self.op is _BinaryOp.SUB:
                result = lhs - rhs
            elif self.op is _BinaryOp.MUL:
                result = lhs * rhs
            else:
                result = lhs / rhs
        except (ZeroDivisionError, OverflowError):
            raise FormulaError(FormulaErrorCategory.ARITHMETIC) from None
        if not math.isfinite(result):
            raise FormulaError(FormulaErrorCategory.ARITHMETIC)
        return result


@dataclass
class _UnaryExpr(_Expr):
    sign: str
    operand: _Expr

    @property
    def precedence(self) -> _Prec:
        return _Prec.UNARY

    def format_tree(self) -> str:
        return f"({self.sign} {self.operand.format_tree()})"

    def _format_body(self, precedence: _Prec) -> str:
        return self.sign + self.operand.format(precedence)

    def evaluate(self, sheet: _SheetLike) -> float:
        value = self.operand.evaluate(sheet)
        return value * -1 if self.sign == "-" else value


@dataclass
class _CellExpr(_Expr):
    pos: Position

    @property
    def precedence(self) -> _Prec:
        return _Prec.ATOM

    def format_tree(self) -> str:
        if not self.pos.is_valid():
            return FormulaError(FormulaErrorCategory.REF).to_string()
        return self.pos.to_string()

    def _format_body(self, precedence: _Prec) -> str:
        return self.format_tree()

    def evaluate(self, sheet: _SheetLike) -> float:
        if not self.pos.is_valid():
            raise FormulaError(FormulaErrorCategory.REF)
        cell = sheet.get_cell(self.pos)
        if cell is None:
            return 0.0
        value = cell.value()
        if isinstance(value, FormulaError):
            raise FormulaError(value.category)
        if isinstance(value, str):
            if not value:
                return 0.0
            if not _NUMERIC_TEXT_RE.fullmatch(value):
                raise FormulaError(FormulaErrorCategory.VALUE)
            number = float(value)
            if math.isinf(number):
                raise FormulaError(FormulaErrorCategory.VALUE)
            return number
        return float(value)


@dataclass
class _NumberExpr(_Expr):
    value: float

    @property
    def precedence(self) -> _Prec:
        return _Prec.ATOM

    def format_tree(self) -> str:
        return _format_number(self.value)

    def _format_body(self, precedence: _Prec) -> str:
        return _format_number(self.value)

    def evaluate(self, sheet: _SheetLike) -> float:
        return self.value


class _Tok(Enum):
    NUMBER = "NUMBER"
    CELL = "CELL"
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LPAREN = "("
    RPAREN = ")"
    EOF = "<EOF>"


_TOKEN_RE = re.compile(
    r"(?P<WS>[ \t\n\r]+)"
    r"|(?P<NUMBER>[0-9]*\.[0-9]+(?:[eE][+-]?[0-9]+)?|[0-9]+(?:[eE][+-]?[0-9]+)?)"
    r"|(?P<CELL>[A-Z]+[0-9]+)"
    r"|(?P<OP>[-+*/()])"
)


@dataclass(frozen=True)
class _Token:
    kind: _Tok
    text: str


def _tokenize(text: str) -> Iterator[_Token]:
    pos = 0
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise ParsingError(
                f"Error when lexing: token recognition error at: '{text[pos]}'"
            )
        pos = match.end()
        group = match.lastgroup
        if group == "WS":
            continue
        if group == "NUMBER":
            yield _Token(_Tok.NUMBER, match.group())
        elif group == "CELL":
            yield _Token(_Tok.CELL, match.group())
        else:
            yield _Token(_Tok(match.group()), match.group())
    yield _Token(_Tok.EOF, "<EOF>")


class _Parser:
    def __init__(self, text: str) -> None:
        self._tokens = list(_tokenize(text))
        self._index = 0
        self.cells: list[tuple[str, Position]] = []

    def _peek(self) -> _Token:
        return self._tokens[self._index]

    def _advance(self) -> _Token:
        token = self._tokens[self._index]
        if token.kind is not _Tok.EOF:
            self._index += 1
        return token

    def _expect(self, kind: _Tok) -> _Token:
        token = self._peek()
        if token.kind is not kind:
            raise ParsingError(f"Error when parsing: {token.text}")
        return self._advance()

    def parse(self) -> _Expr:
        root = self._additive()
        self._expect(_Tok.EOF)
        return root

    def _additive(self) -> _Expr:
        node = self._multiplicative()
        while self._peek().kind in (_Tok.ADD, _Tok.SUB):
            op = _BinaryOp(self._advance().text)
            node = _BinaryExpr(op, node, self._multiplicative())
        return node

    def _multiplicative(self) -> _Expr:
        node = self._unary()
        while self._peek().kind in (_Tok.MUL, _Tok.DIV):
            op = _BinaryOp(self._advance().text)
            node = _BinaryExpr(op, node, self._unary())
        return node

    def _unary(self) -> _Expr:
        if self._peek().kind in (_Tok.ADD, _Tok.SUB):
            sign = self._advance().text
            return _UnaryExpr(sign, self._unary())
        return self._primary()

    def _primary(self) -> _Expr:
        token = self._peek()
        if token.kind is _Tok.LPAREN:
            self._advance()
            node = self._additive()
            self._expect(_Tok.RPAREN)
            return node
        if token.kind is _Tok.NUMBER:
            self._advance()
            value = float(token.text)
            if math.isinf(value):
                raise ParsingError(f"Invalid number: {token.text}")
            return _NumberExpr(value)
        if token.kind is _Tok.CELL:
            self._advance()
            pos = Position.from_string(token.text)
            self.cells.append((token.text, pos))
            return _CellExpr(pos)
        raise ParsingError(f"Error when parsing: {token.text}")


class FormulaAST:
    """A parsed formula: its expression tree and the cells it refers to."""

    def __init__(self, root: _Expr, cells: list[Position]) -> None:
        self._root = root
        self._cells = sorted(cells)

    def execute(self, sheet: _SheetLike) -> float:
        """Evaluate against ``sheet``; raises ``FormulaError`` on failure."""
        return self._root.evaluate(sheet)

    def format_cells(self) -> str:
        """Referenced cells in sorted order, each followed by a space."""
        return "".join(f"{cell.to_string()} " for cell in self._cells)

    def format_tree(self) -> str:
        """Prefix notation of the tree, fully parenthesised."""
        return self._root.format_tree()

    def format_formula(self) -> str:
        """Infix notation with only the parentheses that are needed."""
        return self._root.format(_Prec.ATOM)

    def cells(self) -> list[Position]:
        """Sorted referenced positions, duplicates included."""
        return list(self._cells)


def parse_formula_ast(text: str | IO[str]) -> FormulaAST:
    """Parse a formula expression (without the leading sign) into a tree."""
    if not isinstance(text, str):
        text = text.read()
    parser = _Parser(text)
    root = parser.parse()
    for raw, pos in parser.cells:
        if not pos.is_valid():
            raise FormulaException(f"Invalid position: {raw}")
    return FormulaAST(root, [pos for _, pos in parser.cells])