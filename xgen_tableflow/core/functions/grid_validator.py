# xgen_tableflow/core/functions/grid_validator.py
"""
Grid Validator

Checks that a set of placed cells tiles a rectangle: every slot in bounds is
covered by exactly one cell and no cell leaves the matrix. Pure functions,
usable on a half-built grid (builder) or after a mutation.
"""
from typing import TYPE_CHECKING, Iterable, List, Optional

if TYPE_CHECKING:
    from xgen_tableflow.core.functions.table_grid import GridModel, TableCell


def validate_grid(cells: Iterable["TableCell"], height: int, width: int) -> Optional[str]:
    """Return None for a valid grid, otherwise a description of the first problem."""
    if height <= 0 or width <= 0:
        return f"Degenerate table of {height} rows and {width} columns"

    coverage: List[List[int]] = [[0] * width for _ in range(height)]

    for cell in cells:
        row, column = cell.origin.row, cell.origin.column
        rows, columns = cell.size.rows, cell.size.columns

        if rows < 1 or columns < 1:
            return f"Cell at ({row}, {column}) has an invalid size of {rows}x{columns}"
        if row < 0 or column < 0 or row + rows > height or column + columns > width:
            return (f"Cell at ({row}, {column}) spanning {rows}x{columns} "
                    f"overruns the {height}x{width} table")

        for r in range(row, row + rows):
            for c in range(column, column + columns):
                coverage[r][c] += 1
                if coverage[r][c] > 1:
                    return f"Slot ({r}, {c}) is covered by more than one cell"

    for r, counts in enumerate(coverage):
        for c, count in enumerate(counts):
            if count == 0:
                return f"Slot ({r}, {c}) is not covered by any cell"

    return None


def validate_grid_model(grid_model: "GridModel") -> Optional[str]:
    """Validate a complete GridModel, e.g. after a mutation and before synthesis."""
    height, width = grid_model.height, grid_model.width

    for row_index, row in enumerate(grid_model.grid):
        if len(row) != width:
            return f"Row {row_index} has {len(row)} slots, expected {width}"
        for column_index, cell in enumerate(row):
            if cell is None or not cell.covers(row_index, column_index):
                return f"Slot ({row_index}, {column_index}) references a cell that does not cover it"

    if len(grid_model.column_specifications) != width:
        return (f"Table has {len(grid_model.column_specifications)} column specifications "
                f"for {width} columns")

    if not 0 <= grid_model.header_row_count <= height:
        return f"Header row count {grid_model.header_row_count} outside 0..{height}"

    return validate_grid(grid_model.iter_cells(), height, width)


__all__ = [
    'validate_grid',
    'validate_grid_model',
]
