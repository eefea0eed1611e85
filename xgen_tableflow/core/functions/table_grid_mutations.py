# xgen_tableflow/core/functions/table_grid_mutations.py
"""
Table Grid Mutations

In-place structural edits of a GridModel: row/column insertion and deletion,
merging and splitting cells, and moving the header boundary.

Every mutation collects the surviving cells, adjusts origins and sizes, and
rebuilds (and thereby validates) the matrix. Requests that cannot be honoured
raise ValueError and leave the model untouched.

Cells created by a mutation have no backing element; the synthesizer
materializes them. Surviving cells keep their element, which is how their
content and any selection inside them survive the next synthesis.

Usage:
    insert_row(grid_model, 2, below=True)
    merge_cell_with_cell_to_the_right(grid_model, 0, 0, editor=editor)
    set_header_row_count(grid_model, 1)
"""
import logging
from dataclasses import replace
from typing import List, Optional

from xgen_tableflow.core.functions.column_widths import ColumnWidthStrategy
from xgen_tableflow.core.functions.table_grid import (
    CellCoordinates,
    CellSize,
    GridModel,
    TableCell,
)
from xgen_tableflow.core.functions.tree_editor import TreeEditor

logger = logging.getLogger("xgen_tableflow.mutations")


def _check_row(grid_model: GridModel, index: int) -> None:
    if not 0 <= index < grid_model.height:
        raise ValueError(f"Row index {index} outside table of {grid_model.height} rows")


def _check_column(grid_model: GridModel, index: int) -> None:
    if not 0 <= index < grid_model.width:
        raise ValueError(f"Column index {index} outside table of {grid_model.width} columns")


def _new_cell(row: int, column: int, rows: int = 1, columns: int = 1, data: Optional[dict] = None) -> TableCell:
    return TableCell(
        element=None,
        origin=CellCoordinates(row, column),
        size=CellSize(rows, columns),
        data=dict(data or {}),
    )


# ==============================================================================
# Rows
# ==============================================================================

def insert_row(grid_model: GridModel, index: int, below: bool = False) -> None:
    """Insert an empty row above (or below) row index.

    Cells spanning across the insertion point grow by one row. A row inserted
    next to a header row becomes a header row.
    """
    _check_row(grid_model, index)
    position = index + 1 if below else index

    cells = list(grid_model.iter_cells())
    covered_columns = set()
    for cell in cells:
        if cell.origin.row >= position:
            cell.origin.row += 1
        elif cell.last_row >= position:
            cell.size.rows += 1
            covered_columns.update(range(cell.origin.column, cell.last_column + 1))

    cells.extend(
        _new_cell(position, column)
        for column in range(grid_model.width)
        if column not in covered_columns
    )

    if index < grid_model.header_row_count:
        grid_model.header_row_count += 1

    grid_model.rebuild(cells, grid_model.height + 1, grid_model.width)
    logger.debug(f"Inserted row at {position}: {grid_model}")


def delete_row(grid_model: GridModel, index: int) -> None:
    """Delete row index. Spanning cells crossing the row shrink by one row."""
    _check_row(grid_model, index)
    if grid_model.height == 1:
        raise ValueError("Cannot delete the only row of a table")

    cells: List[TableCell] = []
    for cell in grid_model.iter_cells():
        if cell.origin.row == index:
            if cell.size.rows == 1:
                continue
            # The cell continues in the next row, which moves up into its place
            cell.size.rows -= 1
        elif cell.origin.row < index <= cell.last_row:
            cell.size.rows -= 1
        elif cell.origin.row > index:
            cell.origin.row -= 1
        cells.append(cell)

    if index < grid_model.header_row_count:
        grid_model.header_row_count -= 1

    grid_model.rebuild(cells, grid_model.height - 1, grid_model.width)
    logger.debug(f"Deleted row {index}: {grid_model}")


# ==============================================================================
# Columns
# ==============================================================================

def insert_column(grid_model: GridModel, index: int, after: bool = False) -> None:
    """Insert an empty column before (or after) column index.

    The new column copies the specification of column index, width included.
    """
    _check_column(grid_model, index)
    position = index + 1 if after else index

    cells = list(grid_model.iter_cells())
    covered_rows = set()
    for cell in cells:
        if cell.origin.column >= position:
            cell.origin.column += 1
        elif cell.last_column >= position:
            cell.size.columns += 1
            covered_rows.update(range(cell.origin.row, cell.last_row + 1))

    cells.extend(
        _new_cell(row, position)
        for row in range(grid_model.height)
        if row not in covered_rows
    )

    specification = replace(grid_model.column_specifications[index], element=None)
    grid_model.column_specifications.insert(position, specification)

    grid_model.rebuild(cells, grid_model.height, grid_model.width + 1)
    logger.debug(f"Inserted column at {position}: {grid_model}")


def delete_column(grid_model: GridModel, index: int) -> None:
    """Delete column index. Spanning cells crossing the column shrink by one column."""
    _check_column(grid_model, index)
    if grid_model.width == 1:
        raise ValueError("Cannot delete the only column of a table")

    cells: List[TableCell] = []
    for cell in grid_model.iter_cells():
        if cell.origin.column == index:
            if cell.size.columns == 1:
                continue
            cell.size.columns -= 1
        elif cell.origin.column < index <= cell.last_column:
            cell.size.columns -= 1
        elif cell.origin.column > index:
            cell.origin.column -= 1
        cells.append(cell)

    del grid_model.column_specifications[index]

    grid_model.rebuild(cells, grid_model.height, grid_model.width - 1)
    logger.debug(f"Deleted column {index}: {grid_model}")


# ==============================================================================
# Merging
# ==============================================================================

def _absorb(cell: TableCell, other: TableCell, editor: Optional[TreeEditor]) -> None:
    """Carry the content of a merged-away cell into the surviving one."""
    if cell.element is None:
        cell.element = other.element
        return
    if editor is not None and other.element is not None and editor.has_content(other.element):
        editor.move_children(other.element, cell.element)


def merge_cell_with_cell_to_the_right(
    grid_model: GridModel,
    row: int,
    column: int,
    editor: Optional[TreeEditor] = None
) -> None:
    """Merge the cell at (row, column) with its right neighbour.

    Both cells must cover the same rows. When an editor is given, the
    neighbour's content moves into the surviving cell.
    """
    cell = grid_model.get_cell_at_coordinates(row, column)
    next_column = cell.last_column + 1
    if next_column >= grid_model.width:
        raise ValueError(f"Cell at ({row}, {column}) has no cell to its right")

    other = grid_model.get_cell_at_coordinates(cell.origin.row, next_column)
    if other.origin.row != cell.origin.row or other.size.rows != cell.size.rows:
        raise ValueError(f"Cell at ({row}, {column}) and its right neighbour do not span the same rows")

    cell.size.columns += other.size.columns
    _absorb(cell, other, editor)

    cells = [candidate for candidate in grid_model.iter_cells() if candidate is not other]
    grid_model.rebuild(cells, grid_model.height, grid_model.width)
    logger.debug(f"Merged cell at ({row}, {column}) with the cell to its right")


def merge_cell_with_cell_below(
    grid_model: GridModel,
    row: int,
    column: int,
    editor: Optional[TreeEditor] = None
) -> None:
    """Merge the cell at (row, column) with the cell below it.

    Both cells must cover the same columns.
    """
    cell = grid_model.get_cell_at_coordinates(row, column)
    next_row = cell.last_row + 1
    if next_row >= grid_model.height:
        raise ValueError(f"Cell at ({row}, {column}) has no cell below it")

    other = grid_model.get_cell_at_coordinates(next_row, cell.origin.column)
    if other.origin.column != cell.origin.column or other.size.columns != cell.size.columns:
        raise ValueError(f"Cell at ({row}, {column}) and the cell below do not span the same columns")

    cell.size.rows += other.size.rows
    _absorb(cell, other, editor)

    cells = [candidate for candidate in grid_model.iter_cells() if candidate is not other]
    grid_model.rebuild(cells, grid_model.height, grid_model.width)
    logger.debug(f"Merged cell at ({row}, {column}) with the cell below")


# ==============================================================================
# Splitting
# ==============================================================================

def split_cell_into_rows(grid_model: GridModel, row: int, column: int) -> None:
    """Split a row-spanning cell into one cell per row it covers."""
    cell = grid_model.get_cell_at_coordinates(row, column)
    if cell.size.rows == 1:
        raise ValueError(f"Cell at ({row}, {column}) does not span multiple rows")

    cells = list(grid_model.iter_cells())
    cells.extend(
        _new_cell(cell.origin.row + offset, cell.origin.column, 1, cell.size.columns, cell.data)
        for offset in range(1, cell.size.rows)
    )
    cell.size.rows = 1

    grid_model.rebuild(cells, grid_model.height, grid_model.width)
    logger.debug(f"Split cell at ({row}, {column}) into rows")


def split_cell_into_columns(
    grid_model: GridModel,
    row: int,
    column: int,
    width_strategy: Optional[ColumnWidthStrategy] = None
) -> None:
    """Split a cell into one cell per column.

    A column-spanning cell is split over the columns it covers. A single
    column cell splits its column in two: the other cells of that column
    widen to span both halves, and with a width strategy the column width is
    halved over the two columns.
    """
    cell = grid_model.get_cell_at_coordinates(row, column)
    cells = list(grid_model.iter_cells())

    if cell.size.columns > 1:
        cells.extend(
            _new_cell(cell.origin.row, cell.origin.column + offset, cell.size.rows, 1, cell.data)
            for offset in range(1, cell.size.columns)
        )
        cell.size.columns = 1
        grid_model.rebuild(cells, grid_model.height, grid_model.width)
        logger.debug(f"Split cell at ({row}, {column}) into columns")
        return

    split_column = cell.origin.column
    for other in cells:
        if other is cell:
            continue
        if other.origin.column > split_column:
            other.origin.column += 1
        elif other.last_column >= split_column:
            other.size.columns += 1

    cells.append(_new_cell(cell.origin.row, split_column + 1, cell.size.rows, 1, cell.data))

    specification = grid_model.column_specifications[split_column]
    new_specification = replace(specification, element=None)
    if width_strategy is not None and not specification.ignore_width:
        half = width_strategy.divide_by_two(specification.column_width)
        if half:
            specification.column_width = half
            new_specification.column_width = half
    grid_model.column_specifications.insert(split_column + 1, new_specification)

    grid_model.rebuild(cells, grid_model.height, grid_model.width + 1)
    logger.debug(f"Split column {split_column} at cell ({row}, {column})")


# ==============================================================================
# Header
# ==============================================================================

def set_header_row_count(grid_model: GridModel, count: int) -> None:
    """Move the header boundary so that the first count rows are header rows."""
    if not 0 <= count <= grid_model.height:
        raise ValueError(f"Header row count {count} outside 0..{grid_model.height}")
    grid_model.header_row_count = count


__all__ = [
    'insert_row',
    'delete_row',
    'insert_column',
    'delete_column',
    'merge_cell_with_cell_to_the_right',
    'merge_cell_with_cell_below',
    'split_cell_into_rows',
    'split_cell_into_columns',
    'set_header_row_count',
]
