# xgen_tableflow/core/processor/xhtml_helper/xhtml_table_synthesizer.py
"""
XHTML Table Synthesizer

Writes a (mutated) GridModel back onto an XHTML <table> element.

================================================================================
SYNTHESIS APPROACH
================================================================================

External Interface: apply(grid_model, table_node, editor, complete_structure) -> bool

Internal (Private) - All called from apply():
    _apply_borders()        - table/@border
    _place_rows()           - row reuse, containers, row order
    _place_cells()          - role conversion, span/data attributes, cell order
    _remove_stale_nodes()   - unused cells, rows and containers

The synthesizer reuses whatever the tree already has: row i of the grid is
written into the i-th existing row node, and every cell element the grid
still references is kept (moved if needed, never copied). Only a cell whose
role changed (td <-> th) gets a new element, and its content and anchors are
carried over. This keeps text content and selections alive across edits.

All edits happen inside one overlay of the TreeEditor. The completion
callback decides whether the result is acceptable:

    True       -> overlay committed, apply() returns True
    False      -> overlay discarded, apply() returns False
    exception  -> overlay discarded, exception re-raised

On discard the cell and column element references of the grid model are
restored, so a rejected model still describes the untouched tree.
"""
import logging
import traceback
from typing import Any, Callable, List, Optional, Tuple

from xgen_tableflow.core.functions.column_widths import ColumnWidthStrategy
from xgen_tableflow.core.functions.table_grid import ColumnSpecification, GridModel, TableCell
from xgen_tableflow.core.functions.tree_editor import TreeEditor
from xgen_tableflow.core.processor.xhtml_helper.xhtml_colspec_normalizer import apply_column_specifications
from xgen_tableflow.core.processor.xhtml_helper.xhtml_constants import (
    ATTR_BORDER,
    ATTR_COLSPAN,
    ATTR_ROWSPAN,
    BORDER_OFF,
    BORDER_ON,
    CELL_DATA_ATTRIBUTES,
    TableRole,
)
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import PartSelectorSet

logger = logging.getLogger("xgen_tableflow.synthesizer")

StructureCompleter = Callable[[Any, TreeEditor], bool]


def accept_structure(table_node: Any, editor: TreeEditor) -> bool:
    """Default completion callback: every synthesized structure is accepted."""
    return True


class XhtmlTableSynthesizer:
    """
    Serializes GridModels onto XHTML table elements.

    Usage:
        synthesizer = XhtmlTableSynthesizer(PartSelectorSet(options))
        if not synthesizer.apply(grid_model, table, editor):
            print("structure rejected, tree unchanged")
    """

    def __init__(self, selectors: PartSelectorSet, width_strategy: Optional[ColumnWidthStrategy] = None):
        self.selectors = selectors
        self.width_strategy = width_strategy or ColumnWidthStrategy(selectors.column_width_type)

    def apply(
        self,
        grid_model: GridModel,
        table_node: Any,
        editor: TreeEditor,
        complete_structure: Optional[StructureCompleter] = None
    ) -> bool:
        """Write grid_model onto table_node; True when the result was committed."""
        complete_structure = complete_structure or accept_structure

        cell_elements: List[Tuple[TableCell, Any]] = [(cell, cell.element) for cell in grid_model.iter_cells()]
        column_elements: List[Tuple[ColumnSpecification, Any]] = [
            (specification, specification.element) for specification in grid_model.column_specifications
        ]

        overlay = editor.begin_overlay()
        try:
            self._apply_borders(grid_model, table_node, editor)
            row_nodes = self._place_rows(grid_model, table_node, editor)
            self._place_cells(grid_model, table_node, row_nodes, editor)
            self._remove_stale_nodes(grid_model, table_node, row_nodes, editor)
            apply_column_specifications(self.selectors, grid_model, table_node, editor, self.width_strategy)

            completed = complete_structure(table_node, editor)
        except Exception as e:
            editor.discard(overlay)
            self._restore(cell_elements, column_elements)
            logger.error(f"Error applying grid model to table: {e}")
            logger.debug(traceback.format_exc())
            raise

        if not completed:
            editor.discard(overlay)
            self._restore(cell_elements, column_elements)
            logger.info("Synthesized table structure was rejected, changes discarded")
            return False

        editor.commit(overlay)
        logger.debug(f"Applied {grid_model} to table")
        return True

    # ==========================================================================
    # Private Helper Methods (Called internally from apply)
    # ==========================================================================

    def _apply_borders(self, grid_model: GridModel, table_node: Any, editor: TreeEditor) -> None:
        if not self.selectors.use_borders:
            return
        if grid_model.borders:
            editor.set_attribute(table_node, ATTR_BORDER, BORDER_ON)
        elif editor.get_attribute(table_node, ATTR_BORDER) not in (None, BORDER_OFF):
            editor.remove_attribute(table_node, ATTR_BORDER)

    def _place_rows(self, grid_model: GridModel, table_node: Any, editor: TreeEditor) -> List[Any]:
        """Put one row node per grid row into its container, in order."""
        selectors = self.selectors
        existing_rows = selectors.find_row_nodes(table_node, editor)
        headers = selectors.find_header_container_nodes(table_node, editor)
        bodies = selectors.find_body_container_nodes(table_node, editor)

        # Lazily resolved containers: reused first of a kind, or created
        containers = {
            TableRole.HEADER_CONTAINER: headers[0] if headers else None,
            TableRole.BODY_CONTAINER: bodies[0] if bodies else None,
        }

        row_nodes = []
        previous_row = None
        previous_container = None
        for row_index in range(grid_model.height):
            if row_index < len(existing_rows):
                row_node = existing_rows[row_index]
            else:
                row_node = editor.create_element(selectors.namespace_uri, selectors.local_name(TableRole.ROW), table_node)

            is_header_row = row_index < grid_model.header_row_count
            if is_header_row and selectors.use_thead:
                container = self._container(TableRole.HEADER_CONTAINER, containers, table_node, editor)
            elif not is_header_row and selectors.use_tbody:
                container = self._container(TableRole.BODY_CONTAINER, containers, table_node, editor)
            else:
                container = table_node

            if container is not previous_container:
                previous_row = None

            if previous_row is None:
                self._place_first_row(container, row_node, table_node, editor)
            elif self._next_sibling(previous_row, selectors.is_row, editor) is not row_node:
                editor.insert_after(container, row_node, previous_row)

            row_nodes.append(row_node)
            previous_row = row_node
            previous_container = container

        return row_nodes

    def _container(self, role: TableRole, containers: dict, table_node: Any, editor: TreeEditor) -> Any:
        container = containers[role]
        if container is not None:
            return container

        selectors = self.selectors
        container = editor.create_element(selectors.namespace_uri, selectors.local_name(role), table_node)

        if role is TableRole.HEADER_CONTAINER:
            reference = self._first_child(table_node, (
                TableRole.BODY_CONTAINER, TableRole.ROW, TableRole.FOOTER_CONTAINER,
            ), editor)
            editor.insert_before(table_node, container, reference)
        else:
            header = containers[TableRole.HEADER_CONTAINER]
            if header is not None and editor.get_parent(header) is table_node:
                editor.insert_after(table_node, container, header)
            else:
                reference = self._first_child(table_node, (TableRole.ROW, TableRole.FOOTER_CONTAINER), editor)
                editor.insert_before(table_node, container, reference)

        containers[role] = container
        return container

    def _place_first_row(self, container: Any, row_node: Any, table_node: Any, editor: TreeEditor) -> None:
        reference = self._first_child(container, (TableRole.ROW,), editor)
        if reference is not None or container is not table_node:
            editor.insert_before(container, row_node, reference)
            return

        # First row directly under the table: after the header container if any
        headers = self.selectors.find_header_container_nodes(table_node, editor)
        if headers:
            editor.insert_after(table_node, row_node, headers[-1])
        else:
            editor.append_child(table_node, row_node)

    def _place_cells(self, grid_model: GridModel, table_node: Any, row_nodes: List[Any], editor: TreeEditor) -> None:
        selectors = self.selectors
        lowest_header_row = grid_model.get_lowest_header_row_index()

        for row_index, row_node in enumerate(row_nodes):
            previous_cell = None
            for column_index in range(grid_model.width):
                cell = grid_model.grid[row_index][column_index]
                if not cell.is_origin(row_index, column_index):
                    continue

                if selectors.use_th and cell.origin.row <= lowest_header_row:
                    role = TableRole.HEADER_CELL
                else:
                    role = TableRole.CELL
                element = self._materialize(cell, role, table_node, editor)

                if previous_cell is None:
                    reference = self._first_child(row_node, (TableRole.CELL, TableRole.HEADER_CELL), editor)
                    editor.insert_before(row_node, element, reference)
                elif self._next_sibling(previous_cell, selectors.is_table_cell, editor) is not element:
                    editor.insert_after(row_node, element, previous_cell)

                self._apply_cell_attributes(cell, element, editor)
                previous_cell = element

    def _materialize(self, cell: TableCell, role: TableRole, table_node: Any, editor: TreeEditor) -> Any:
        """Backing element of cell with the given role, converting or creating it."""
        selectors = self.selectors
        element = cell.element

        if element is None:
            element = editor.create_element(selectors.namespace_uri, selectors.local_name(role), table_node)
        elif not selectors.has_role(element, role):
            converted = editor.create_element(selectors.namespace_uri, selectors.local_name(role), element)
            for name, value in element.attrib.items():
                editor.set_attribute(converted, name, value)

            if editor.has_content(element):
                editor.move_children(element, converted)
            else:
                editor.move_position(element, 0, converted, 0)

            parent = editor.get_parent(element)
            if parent is not None:
                editor.replace_child(parent, converted, element)
            element = converted

        cell.element = element
        return element

    @staticmethod
    def _apply_cell_attributes(cell: TableCell, element: Any, editor: TreeEditor) -> None:
        for name, span in ((ATTR_ROWSPAN, cell.size.rows), (ATTR_COLSPAN, cell.size.columns)):
            if span != 1:
                editor.set_attribute(element, name, str(span))
            else:
                editor.remove_attribute(element, name)

        for attribute, key in CELL_DATA_ATTRIBUTES.items():
            value = cell.data.get(key)
            if value:
                editor.set_attribute(element, attribute, str(value))
            else:
                editor.remove_attribute(element, attribute)

    def _remove_stale_nodes(self, grid_model: GridModel, table_node: Any, row_nodes: List[Any], editor: TreeEditor) -> None:
        selectors = self.selectors

        live_cells = {cell.element for cell in grid_model.iter_cells()}
        for row_node in row_nodes:
            for cell_node in selectors.find_cell_nodes(row_node, editor):
                if cell_node not in live_cells:
                    editor.remove_child(row_node, cell_node)

        live_rows = set(row_nodes)
        for row_node in selectors.find_row_nodes(table_node, editor):
            if row_node not in live_rows:
                editor.remove_child(editor.get_parent(row_node), row_node)

        # Containers: only a row-holding thead / tbody in use survives
        for container in (
            selectors.find_header_container_nodes(table_node, editor)
            + selectors.find_body_container_nodes(table_node, editor)
            + selectors.find_footer_container_nodes(table_node, editor)
        ):
            in_use = (
                (selectors.use_thead and selectors.is_header_container(container))
                or (selectors.use_tbody and selectors.is_body_container(container))
            )
            has_rows = bool(selectors.find_children(container, TableRole.ROW, editor))
            if not (in_use and has_rows):
                editor.remove_child(table_node, container)

    def _first_child(self, parent: Any, roles: tuple, editor: TreeEditor) -> Optional[Any]:
        for child in editor.get_element_children(parent):
            if any(self.selectors.has_role(child, role) for role in roles):
                return child
        return None

    @staticmethod
    def _next_sibling(node: Any, predicate: Callable[[Any], bool], editor: TreeEditor) -> Optional[Any]:
        sibling = editor.get_next_sibling(node)
        while sibling is not None and not predicate(sibling):
            sibling = editor.get_next_sibling(sibling)
        return sibling

    @staticmethod
    def _restore(
        cell_elements: List[Tuple[TableCell, Any]],
        column_elements: List[Tuple[ColumnSpecification, Any]]
    ) -> None:
        for cell, element in cell_elements:
            cell.element = element
        for specification, element in column_elements:
            specification.element = element


def apply_grid_model(
    selectors: PartSelectorSet,
    grid_model: GridModel,
    table_node: Any,
    editor: TreeEditor,
    complete_structure: Optional[StructureCompleter] = None,
    width_strategy: Optional[ColumnWidthStrategy] = None
) -> bool:
    """Write grid_model onto table_node inside an overlay of editor."""
    return XhtmlTableSynthesizer(selectors, width_strategy).apply(
        grid_model, table_node, editor, complete_structure
    )


__all__ = [
    'XhtmlTableSynthesizer',
    'apply_grid_model',
    'accept_structure',
    'StructureCompleter',
]
