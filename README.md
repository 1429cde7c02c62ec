# tabula

A small in-memory spreadsheet engine. A cell holds plain text or a
formula. A formula can use numbers, references to other cells,
`+ - * /`, unary `+` and `-`, and parentheses. The sheet refuses any
formula that would make a cell refer back to itself, directly or
through other cells.

## Installation

```
pip install .
```

## Usage

```python
import io

from tabula.common import Position
from tabula.sheet import create_sheet

sheet = create_sheet()
sheet.set_cell(Position.from_string("A1"), "2")
sheet.set_cell(Position.from_string("A2"), "=A1*3+1")

print(sheet.get_cell(Position.from_string("A2")).value())  # 7.0
print(sheet.get_cell(Position.from_string("A2")).text())   # =A1*3+1

out = io.StringIO()
sheet.print_values(out)
print(out.getvalue())  # "2\n7\n"
```

## Modules

- `tabula.common`: `Position` (zero-based row and column, with
  `to_string()`, `from_string()` and `is_valid()`), `Size`,
  `FormulaError` with its `FormulaErrorCategory`, and the exceptions.
- `tabula.formula_ast`: `parse_formula_ast()` turns an expression into a
  `FormulaAST`. The tree can be evaluated with `execute()` and printed
  with `format_formula()`, `format_tree()` or `format_cells()`.
- `tabula.formula`: `parse_formula()` and `Formula`, with `evaluate()`,
  `expression()` and `referenced_cells()`.
- `tabula.cell`: `Cell`, with `set()`, `clear()`, `value()`, `text()`,
  `referenced_cells()` and `is_referenced()`.
- `tabula.sheet`: `Sheet` and `create_sheet()`. A sheet has
  `set_cell()`, `get_cell()`, `clear_cell()`, `printable_size()`,
  `print_values()` and `print_texts()`.

### Positions

`Position.from_string("C137")` gives `Position(row=136, col=2)`. Columns
take one to three capital letters, and the grid is 16384 × 16384
(`A1` to `XFD16384`). A name that does not fit this form gives
`Position.NONE`, which is not valid. `to_string()` of an invalid
position is the empty string.

### Cell contents

- Text that starts with `=` and has more than one character is a formula.
  Its text is kept in canonical form, with only the parentheses that are
  needed: `=(2*3)+4` reads back as `=2*3+4`.
- Text that starts with `'` is shown without the apostrophe. This lets a
  value begin with `=`.
- An empty string makes an empty cell.

When a formula refers to a position that has no cell, an empty cell is
created there.

### Values and errors

A formula evaluates to a float or to a `FormulaError`:

- `#REF!`: a reference to a position outside the sheet.
- `#VALUE!`: a referenced cell holds text that is not a number.
- `#ARITHM!`: division by zero or a result that is not finite.

Empty cells, and cells that do not exist, count as zero. Text that reads
as a number counts as that number.

`print_values()` and `print_texts()` write one line per row of the
printable area, with cells separated by tabs. Numbers are written in
`%g` form and errors as their markers.

### Exceptions

- `InvalidPositionException`: a sheet method got a position outside the
  grid.
- `FormulaException`: a formula does not parse, or names a cell outside
  the grid.
- `CircularDependencyException`: a formula would refer back to its own
  cell. The cell keeps its previous contents.

### Formulas on their own

```python
from tabula.formula import parse_formula

formula = parse_formula("(2*3)+A1")
print(formula.expression())        # 2*3+A1
print(formula.referenced_cells())  # [Position(row=0, col=0)]
```

## What it does not do

tabula is a library with no command-line tool or user interface. Sheets
live only in memory. They are not loaded from or saved to files. Formulas
have no functions such as sums or ranges, only the four operators. Values
are worked out again on each read and are not cached.

## Running the tests

```
pip install .[test]
pytest
```