# xgen_tableflow/core/table_flow.py
"""XhtmlTableFlow - Table Flow Entry Class

Main entry class of the xgen_tableflow library. Binds one XHTML table
configuration to the grid builder, the synthesizer and the width arithmetic,
so callers work with a single object per table vocabulary.

Usage Example:
    from lxml import etree
    from xgen_tableflow import XhtmlTableFlow, XhtmlTableOptions, TreeEditor
    from xgen_tableflow.core.functions.table_grid_mutations import insert_row

    flow = XhtmlTableFlow(XhtmlTableOptions(use_th=True))
    editor = TreeEditor()

    table = etree.fromstring("<table><tr><td>a</td><td>b</td></tr></table>")
    grid_model = flow.build_grid_model(table)

    insert_row(grid_model, 0)
    grid_model.header_row_count = 1
    flow.apply_to_tree(grid_model, table, editor)
"""

import logging
from typing import Any, Optional, Union

from xgen_tableflow.core.functions.column_widths import ColumnWidthStrategy
from xgen_tableflow.core.functions.table_grid import (
    CellCoordinates,
    GridModel,
    GridModelBuildError,
    TableCell,
    create_default_column_specification,
)
from xgen_tableflow.core.functions.tree_editor import TreeEditor, TreeNavigator
from xgen_tableflow.core.processor.xhtml_helper.xhtml_colspec_normalizer import normalize_column_widths
from xgen_tableflow.core.processor.xhtml_helper.xhtml_constants import TableRole
from xgen_tableflow.core.processor.xhtml_helper.xhtml_grid_builder import XhtmlGridBuilder
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import (
    DEFAULT_TABLE_OPTIONS,
    PartSelectorSet,
    XhtmlTableOptions,
)
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_synthesizer import (
    StructureCompleter,
    XhtmlTableSynthesizer,
)

logger = logging.getLogger("xgen_tableflow")


class XhtmlTableFlow:
    """
    xgen_tableflow Main Table Class

    Parses XHTML tables into GridModels and writes mutated GridModels back,
    for one table configuration.

    Attributes:
        options: The XhtmlTableOptions this instance was created with
        selectors: Resolved PartSelectorSet
        width_strategy: Column width arithmetic for the configured width type

    Raises:
        ValueError: When the options are inconsistent (see PartSelectorSet)
    """

    def __init__(self, options: Optional[XhtmlTableOptions] = None):
        self._options = options or DEFAULT_TABLE_OPTIONS
        self._selectors = PartSelectorSet(self._options)
        self._width_strategy = ColumnWidthStrategy(self._selectors.column_width_type)
        self._builder = XhtmlGridBuilder(self._selectors, self._width_strategy)
        self._synthesizer = XhtmlTableSynthesizer(self._selectors, self._width_strategy)
        self._logger = logger

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def options(self) -> XhtmlTableOptions:
        return self._options

    @property
    def selectors(self) -> PartSelectorSet:
        return self._selectors

    @property
    def width_strategy(self) -> ColumnWidthStrategy:
        return self._width_strategy

    # ==========================================================================
    # Node predicates
    # ==========================================================================

    def is_table(self, node: Any) -> bool:
        return self._selectors.is_table(node)

    def is_table_cell(self, node: Any) -> bool:
        return self._selectors.is_table_cell(node)

    def is_table_part(self, node: Any) -> bool:
        return self._selectors.is_table_part(node)

    # ==========================================================================
    # Parse / serialize
    # ==========================================================================

    def build_grid_model(
        self,
        table_node: Any,
        navigator: Optional[TreeNavigator] = None
    ) -> Union[GridModel, GridModelBuildError]:
        """
        Parse a table element into a GridModel.

        Args:
            table_node: The table element
            navigator: Tree access, a plain TreeNavigator by default

        Returns:
            The GridModel, or a GridModelBuildError describing why the table
            cannot be modelled
        """
        return self._builder.build(table_node, navigator)

    def apply_to_tree(
        self,
        grid_model: GridModel,
        table_node: Any,
        editor: TreeEditor,
        complete_structure: Optional[StructureCompleter] = None
    ) -> bool:
        """
        Write a GridModel back onto its table element.

        Args:
            grid_model: Model to write, usually built from table_node and mutated
            table_node: The table element
            editor: TreeEditor performing (and journaling) the edits
            complete_structure: Callback accepting or rejecting the result;
                                accepts everything by default

        Returns:
            True when committed, False when rejected (tree unchanged)
        """
        return self._synthesizer.apply(grid_model, table_node, editor, complete_structure)

    def normalize_column_widths(self, grid_model: GridModel) -> None:
        """Rewrite the column widths of grid_model in normalized form."""
        normalize_column_widths(grid_model, self._width_strategy)

    # ==========================================================================
    # New tables
    # ==========================================================================

    def create_grid_model(self, rows: int, columns: int, header_row_count: int = 0) -> GridModel:
        """
        Create a GridModel of empty 1x1 cells with default column specifications.

        With width tracking enabled every column gets an even share of the
        total width.
        """
        if rows < 1 or columns < 1:
            raise ValueError(f"A table needs at least one row and one column, got {rows}x{columns}")
        if not 0 <= header_row_count <= rows:
            raise ValueError(f"Header row count {header_row_count} outside 0..{rows}")

        grid_model = GridModel()
        grid_model.header_row_count = header_row_count
        grid_model.borders = self._selectors.use_borders
        grid_model.column_specifications = [create_default_column_specification(index) for index in range(columns)]

        if self._width_strategy.tracks_widths:
            widths = self._width_strategy.fractions_to_widths([1 / columns] * columns)
            for specification, width in zip(grid_model.column_specifications, widths):
                specification.column_width = width
                specification.ignore_width = False

        cells = [
            TableCell(origin=CellCoordinates(row, column))
            for row in range(rows)
            for column in range(columns)
        ]
        grid_model.rebuild(cells, rows, columns)
        return grid_model

    def create_table(
        self,
        editor: TreeEditor,
        rows: int,
        columns: int,
        header_row_count: int = 0,
        complete_structure: Optional[StructureCompleter] = None
    ) -> Optional[Any]:
        """
        Create a new, detached table element.

        Returns:
            The table element, or None when complete_structure rejected it
        """
        grid_model = self.create_grid_model(rows, columns, header_row_count)
        table_node = editor.create_element(
            self._selectors.namespace_uri,
            self._selectors.local_name(TableRole.TABLE),
        )

        if not self._synthesizer.apply(grid_model, table_node, editor, complete_structure):
            self._logger.info(f"New {rows}x{columns} table was rejected")
            return None

        self._logger.debug(f"Created {rows}x{columns} table with {header_row_count} header rows")
        return table_node

    def __repr__(self) -> str:
        return f"XhtmlTableFlow({self._selectors!r})"


def create_table_flow(options: Optional[XhtmlTableOptions] = None) -> XhtmlTableFlow:
    """
    Factory function to create an XhtmlTableFlow instance.

    Args:
        options: Table configuration, DEFAULT_TABLE_OPTIONS when omitted

    Returns:
        Configured XhtmlTableFlow instance

    Example:
        >>> flow = create_table_flow(XhtmlTableOptions(use_thead=True, use_tbody=True))
        >>> grid_model = flow.build_grid_model(table)
    """
    return XhtmlTableFlow(options)


__all__ = [
    "XhtmlTableFlow",
    "create_table_flow",
]
