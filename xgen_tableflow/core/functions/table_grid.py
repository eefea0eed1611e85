# xgen_tableflow/core/functions/table_grid.py
"""
Table Grid - Logical Table Model

Provides the data structures for the rectangular logical table model that the
format-specific builders produce and the synthesizers render.

================================================================================
MODEL
================================================================================

    GridModel (height x width)
    +-----------+-----------+-----------+
    | cell A    | cell A    | cell B    |   <- row 0 (A spans two columns)
    +-----------+-----------+-----------+
    | cell C    | cell D    | cell B    |   <- row 1 (B spans two rows)
    +-----------+-----------+-----------+

Every slot references exactly one TableCell. A spanning cell occupies every
slot of its rectangle; its origin is the top-left slot and is the only slot at
which it is rendered.

TableCell.element is the backing tree node. It is reused (not recreated)
across a parse -> mutate -> synthesize cycle whenever the same logical cell
survives, which is what keeps selections inside the cell alive.

================================================================================
MODULE COMPONENTS
================================================================================

- CellCoordinates: (row, column) of a cell origin
- CellSize: (rows, columns) spanned by a cell
- TableCell: One logical cell and its backing element
- ColumnSpecification: Per-column settings (width, alignment)
- TableSpecification: Table-level settings (borders)
- GridModel: The matrix itself
- GridModelBuildError: Structured parse error returned instead of a model
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional

from xgen_tableflow.core.functions.grid_validator import validate_grid

logger = logging.getLogger("xgen_tableflow.grid")


@dataclass
class CellCoordinates:
    """Logical position of a cell origin."""
    row: int = 0
    column: int = 0


@dataclass
class CellSize:
    """Number of rows and columns a cell spans."""
    rows: int = 1
    columns: int = 1


@dataclass(eq=False)
class TableCell:
    """Represents a single logical table cell.

    Compared by identity: the same record occupies all slots it spans.

    Attributes:
        element: Backing tree node, None for a cell not materialized yet
        origin: Top-left slot of the cell
        size: Rows and columns spanned
        data: Free-form cell data (horizontal_alignment, vertical_alignment,
              character_alignment)
    """
    element: Optional[Any] = None
    origin: CellCoordinates = field(default_factory=CellCoordinates)
    size: CellSize = field(default_factory=CellSize)
    data: Dict[str, Any] = field(default_factory=dict)

    def is_origin(self, row: int, column: int) -> bool:
        """Whether (row, column) is this cell's origin rather than a continuation."""
        return self.origin.row == row and self.origin.column == column

    def covers(self, row: int, column: int) -> bool:
        """Whether (row, column) lies inside this cell's rectangle."""
        return (self.origin.row <= row < self.origin.row + self.size.rows
                and self.origin.column <= column < self.origin.column + self.size.columns)

    @property
    def last_row(self) -> int:
        return self.origin.row + self.size.rows - 1

    @property
    def last_column(self) -> int:
        return self.origin.column + self.size.columns - 1


@dataclass
class ColumnSpecification:
    """Settings for one logical column.

    Attributes:
        column_index: Position of the column
        column_width: Raw width encoding ('20%', '2*', ...)
        horizontal_alignment: Default horizontal alignment
        vertical_alignment: Default vertical alignment
        ignore_width: The column had no width originally; no width attribute
                      is written for it
        element: Backing column node, None when not materialized
    """
    column_index: int = 0
    column_width: str = "1*"
    horizontal_alignment: Optional[str] = None
    vertical_alignment: Optional[str] = None
    ignore_width: bool = True
    element: Optional[Any] = None


@dataclass
class TableSpecification:
    """Table-level settings."""
    borders: bool = False


@dataclass
class GridModelBuildError:
    """Returned by the grid builder when a table cannot be modelled.

    Attributes:
        error: Human readable description
        row_index: Logical row at which the problem was detected, if any
    """
    error: str
    row_index: Optional[int] = None


def create_default_column_specification(column_index: int) -> ColumnSpecification:
    """Column specification for a column that has no column node."""
    return ColumnSpecification(column_index=column_index, column_width="1*", ignore_width=True)


class GridModel:
    """
    Rectangular logical table.

    The matrix is stored row-major; ``grid[row][column]`` is the TableCell
    covering that slot.
    """

    def __init__(self):
        self.grid: List[List[TableCell]] = []
        self.header_row_count: int = 0
        self.table_specification = TableSpecification()
        self.column_specifications: List[ColumnSpecification] = []

    def __repr__(self) -> str:
        return (f"GridModel(height={self.height}, width={self.width}, "
                f"header_row_count={self.header_row_count})")

    @property
    def height(self) -> int:
        return len(self.grid)

    @property
    def width(self) -> int:
        return len(self.grid[0]) if self.grid else 0

    @property
    def borders(self) -> bool:
        return self.table_specification.borders

    @borders.setter
    def borders(self, value: bool) -> None:
        self.table_specification.borders = bool(value)

    def get_cell_at_coordinates(self, row: int, column: int) -> TableCell:
        if not (0 <= row < self.height and 0 <= column < self.width):
            raise IndexError(f"Coordinates ({row}, {column}) outside {self.height}x{self.width} grid")
        return self.grid[row][column]

    def get_lowest_header_row_index(self) -> int:
        """Index of the last header row, -1 when the table has no header."""
        return self.header_row_count - 1

    def iter_cells(self) -> Iterator[TableCell]:
        """Yield every cell once, ordered by origin (row, then column)."""
        for row_index, row in enumerate(self.grid):
            for column_index, cell in enumerate(row):
                if cell.is_origin(row_index, column_index):
                    yield cell

    def find_cell_for_element(self, element: Any) -> Optional[TableCell]:
        for cell in self.iter_cells():
            if cell.element is element:
                return cell
        return None

    def rebuild(self, cells: Iterable[TableCell], height: int, width: int) -> None:
        """
        Refill the matrix from a list of placed cells.

        Raises:
            ValueError: When the cells do not tile a height x width rectangle.
        """
        cells = list(cells)
        error = validate_grid(cells, height, width)
        if error:
            raise ValueError(f"Invalid grid: {error}")

        matrix: List[List[Optional[TableCell]]] = [[None] * width for _ in range(height)]
        for cell in cells:
            for row in range(cell.origin.row, cell.origin.row + cell.size.rows):
                for column in range(cell.origin.column, cell.origin.column + cell.size.columns):
                    matrix[row][column] = cell
        self.grid = matrix

        for index, specification in enumerate(self.column_specifications):
            specification.column_index = index


__all__ = [
    'CellCoordinates',
    'CellSize',
    'TableCell',
    'ColumnSpecification',
    'TableSpecification',
    'GridModel',
    'GridModelBuildError',
    'create_default_column_specification',
]
