# xgen_tableflow/core/processor/xhtml_helper/xhtml_grid_builder.py
"""
XHTML Grid Builder

Builds a GridModel from an XHTML <table> element.

================================================================================
BUILD APPROACH
================================================================================

External Interface: build(table_node, navigator) -> GridModel | GridModelBuildError

Internal (Private) - All called from build():
    _parse_cell()                   - span and alignment data of one cell node
    _place_cells()                  - origin resolution with rowspan reservations
    _parse_column_specifications()  - col nodes or default column specs

Processing steps:
    1. Collect rows (thead rows, body rows in document order, tfoot rows)
    2. Count header rows (thead > rows before tbody > leading th-only rows)
    3. Compute the table width from the first row (cells plus colspans)
    4. Place every cell at the first free column of its row, reserving the
       slots its rowspan covers in the rows below
    5. Read column specifications
    6. Validate coverage and build the GridModel

A row without cells of its own that is fully covered by rowspans from above
(a virtual row) is a regular row of the grid. Rowspans in the last rows may
reach past the last <tr>; the rows they cover are added as virtual rows, and
must be fully covered like any other row.

Structural problems (empty table, colspans overrunning the width, fractional
spans, rows with too many or too few cells) are returned as
GridModelBuildError, never raised, and nothing outside the returned value is
touched.

XHTML Table Structure:
- table/@border = "1": table borders
- col/@width, col/@align, col/@valign: column specification
- tr: row, directly or in thead / tbody / tfoot
- td, th: cell; @rowspan, @colspan, @align, @valign, @char
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from xgen_tableflow.core.functions.column_widths import ColumnWidthStrategy
from xgen_tableflow.core.functions.grid_validator import validate_grid
from xgen_tableflow.core.functions.table_grid import (
    CellCoordinates,
    CellSize,
    ColumnSpecification,
    GridModel,
    GridModelBuildError,
    TableCell,
    create_default_column_specification,
)
from xgen_tableflow.core.functions.tree_editor import TreeNavigator
from xgen_tableflow.core.processor.xhtml_helper.xhtml_constants import (
    ATTR_BORDER,
    ATTR_COLSPAN,
    ATTR_ROWSPAN,
    ATTR_WIDTH,
    BORDER_ON,
    CELL_DATA_ATTRIBUTES,
    COLUMN_ALIGNMENT_ATTRIBUTES,
)
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import PartSelectorSet

logger = logging.getLogger("xgen_tableflow.builder")


@dataclass
class _ParsedCell:
    element: Any
    row_span: int = 1
    col_span: int = 1
    data: Dict[str, Any] = field(default_factory=dict)


def parse_span(value: Optional[str]) -> int:
    """
    Span attribute value as a positive int.

    Missing, non-numeric or below 1 gives 1. A fractional span such as '2.7'
    cannot be placed on the grid and raises ValueError; the builder reports it
    as a GridModelBuildError.
    """
    if value is None:
        return 1
    try:
        number = float(value.strip())
    except ValueError:
        return 1
    if not math.isfinite(number) or number < 1:
        return 1
    if not number.is_integer():
        raise ValueError(f"Span {value!r} is not a whole number")
    return int(number)


class XhtmlGridBuilder:
    """
    Builds GridModels from XHTML table elements.

    Usage:
        builder = XhtmlGridBuilder(PartSelectorSet(options))
        result = builder.build(table_element)
        if isinstance(result, GridModelBuildError):
            print(result.error)
    """

    def __init__(self, selectors: PartSelectorSet, width_strategy: Optional[ColumnWidthStrategy] = None):
        self.selectors = selectors
        self.width_strategy = width_strategy or ColumnWidthStrategy(selectors.column_width_type)

    def build(
        self,
        table_node: Any,
        navigator: Optional[TreeNavigator] = None
    ) -> Union[GridModel, GridModelBuildError]:
        """Build a validated GridModel, or describe why the table cannot be modelled."""
        navigator = navigator or self.selectors.navigator

        if not self.selectors.is_table(table_node):
            return self._error("Node is not a table of this configuration")

        # ----------------------------------------------------------------
        # Step 1-2: Rows and header rows
        # ----------------------------------------------------------------
        row_nodes = self.selectors.find_row_nodes(table_node, navigator)
        if not row_nodes:
            return self._error("Table has no rows")

        header_row_count = len(self.selectors.find_header_row_nodes(table_node, navigator))

        parsed_rows = []
        for row_index, row in enumerate(row_nodes):
            try:
                parsed_rows.append([
                    self._parse_cell(cell, navigator)
                    for cell in self.selectors.find_cell_nodes(row, navigator)
                ])
            except ValueError as e:
                return self._error(str(e), row_index)

        # ----------------------------------------------------------------
        # Step 3: Width from the first row
        # ----------------------------------------------------------------
        width = sum(parsed.col_span for parsed in parsed_rows[0])
        if width == 0:
            return self._error("First row of the table has no cells", 0)

        # ----------------------------------------------------------------
        # Step 4: Place cells; rowspans may add virtual rows at the bottom
        # ----------------------------------------------------------------
        placed = self._place_cells(parsed_rows, width)
        if isinstance(placed, GridModelBuildError):
            return placed

        cells, height = placed
        if height > len(row_nodes):
            logger.debug(f"Added {height - len(row_nodes)} virtual rows below the last row")

        error = validate_grid(cells, height, width)
        if error:
            return self._error(error)

        # ----------------------------------------------------------------
        # Step 5-6: Column specifications and model
        # ----------------------------------------------------------------
        grid_model = GridModel()
        grid_model.header_row_count = min(header_row_count, height)
        grid_model.column_specifications = self._parse_column_specifications(table_node, width, navigator)
        if self.selectors.use_borders:
            grid_model.borders = navigator.get_attribute(table_node, ATTR_BORDER) == BORDER_ON
        grid_model.rebuild(cells, height, width)

        logger.debug(f"Built grid model {grid_model}")
        return grid_model

    # ==========================================================================
    # Private Helper Methods (Called internally from build)
    # ==========================================================================

    def _parse_cell(self, cell_node: Any, navigator: TreeNavigator) -> _ParsedCell:
        data = {}
        for attribute, key in CELL_DATA_ATTRIBUTES.items():
            value = navigator.get_attribute(cell_node, attribute)
            if value:
                data[key] = value

        return _ParsedCell(
            element=cell_node,
            row_span=parse_span(navigator.get_attribute(cell_node, ATTR_ROWSPAN)),
            col_span=parse_span(navigator.get_attribute(cell_node, ATTR_COLSPAN)),
            data=data,
        )

    def _place_cells(
        self,
        parsed_rows: List[List[_ParsedCell]],
        width: int
    ) -> Union[Tuple[List[TableCell], int], GridModelBuildError]:
        """
        Place the cells row by row; returns the cells and the grid height.

        A rowspan reaching past the last row adds virtual rows. Every row,
        virtual ones included, must be fully covered.
        """
        occupied = [[False] * width for _ in parsed_rows]
        cells: List[TableCell] = []

        row_index = 0
        while row_index < len(occupied):
            parsed_cells = parsed_rows[row_index] if row_index < len(parsed_rows) else []
            column = 0

            for parsed in parsed_cells:
                # Skip slots reserved by rowspans from above
                while column < width and occupied[row_index][column]:
                    column += 1

                if column >= width:
                    return self._error(
                        f"Row {row_index} has more cells than the {width} columns of the table",
                        row_index,
                    )
                if column + parsed.col_span > width:
                    return self._error(
                        f"Cell at ({row_index}, {column}) with colspan {parsed.col_span} "
                        f"overruns the {width} columns of the table",
                        row_index,
                    )

                while len(occupied) < row_index + parsed.row_span:
                    occupied.append([False] * width)

                for r in range(row_index, row_index + parsed.row_span):
                    for c in range(column, column + parsed.col_span):
                        if occupied[r][c]:
                            return self._error(
                                f"Cell at ({row_index}, {column}) overlaps a spanning cell at ({r}, {c})",
                                row_index,
                            )
                        occupied[r][c] = True

                cells.append(TableCell(
                    element=parsed.element,
                    origin=CellCoordinates(row_index, column),
                    size=CellSize(parsed.row_span, parsed.col_span),
                    data=parsed.data,
                ))
                column += parsed.col_span

            missing = occupied[row_index].count(False)
            if missing:
                kind = "Row" if row_index < len(parsed_rows) else "Virtual row"
                return self._error(
                    f"{kind} {row_index} has insufficient cells: {missing} of {width} columns are not covered",
                    row_index,
                )
            row_index += 1

        return cells, len(occupied)

    def _parse_column_specifications(
        self,
        table_node: Any,
        width: int,
        navigator: TreeNavigator
    ) -> List[ColumnSpecification]:
        column_nodes = self.selectors.find_column_specification_nodes(table_node, navigator)
        if len(column_nodes) > width:
            logger.debug(f"Ignoring {len(column_nodes) - width} column nodes beyond the table width")

        specifications = []
        for index in range(width):
            if index >= len(column_nodes):
                specifications.append(create_default_column_specification(index))
                continue

            node = column_nodes[index]
            specification = create_default_column_specification(index)
            specification.element = node

            if self.width_strategy.tracks_widths:
                column_width = navigator.get_attribute(node, ATTR_WIDTH)
                if column_width:
                    specification.column_width = column_width
                    specification.ignore_width = False

            for attribute, name in COLUMN_ALIGNMENT_ATTRIBUTES.items():
                value = navigator.get_attribute(node, attribute)
                if value:
                    setattr(specification, name, value)

            specifications.append(specification)

        return specifications

    @staticmethod
    def _error(message: str, row_index: Optional[int] = None) -> GridModelBuildError:
        logger.warning(f"Cannot build grid model: {message}")
        return GridModelBuildError(error=message, row_index=row_index)


def build_grid_model(
    selectors: PartSelectorSet,
    table_node: Any,
    navigator: Optional[TreeNavigator] = None,
    width_strategy: Optional[ColumnWidthStrategy] = None
) -> Union[GridModel, GridModelBuildError]:
    """Build a GridModel from an XHTML table element."""
    return XhtmlGridBuilder(selectors, width_strategy).build(table_node, navigator)


__all__ = [
    'XhtmlGridBuilder',
    'build_grid_model',
    'parse_span',
]
