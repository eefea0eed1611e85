# xgen_tableflow/core/processor/xhtml_helper/xhtml_colspec_normalizer.py
"""
XHTML Column Specification Normalizer

Keeps the col nodes of a table in step with the column specifications of its
GridModel.

Col nodes are maintained when the configuration asks for them
(should_create_column_specification_nodes) or when the table already has
some. With use_column_group they live inside a single colgroup; otherwise
colgroups are unwrapped and the cols sit directly under the table, before
the first row-level node.

Attributes written per col:
- width:  only when widths are tracked and the column originally had one
- align, valign: when the specification sets them, removed otherwise
"""
import logging
from typing import Any, List, Optional

from xgen_tableflow.core.functions.column_widths import ColumnWidthStrategy
from xgen_tableflow.core.functions.table_grid import GridModel
from xgen_tableflow.core.functions.tree_editor import TreeEditor
from xgen_tableflow.core.processor.xhtml_helper.xhtml_constants import (
    ATTR_ALIGN,
    ATTR_VALIGN,
    ATTR_WIDTH,
    TableRole,
)
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import PartSelectorSet

logger = logging.getLogger("xgen_tableflow.colspec")

# Roles the col nodes are placed in front of
_ROW_SIDE_ROLES = (
    TableRole.HEADER_CONTAINER,
    TableRole.BODY_CONTAINER,
    TableRole.FOOTER_CONTAINER,
    TableRole.ROW,
)


def normalize_column_widths(grid_model: GridModel, width_strategy: ColumnWidthStrategy) -> None:
    """Rewrite every column width of the model into its normalized encoding."""
    specifications = grid_model.column_specifications
    widths = width_strategy.normalize_column_widths([spec.column_width for spec in specifications])
    for specification, width in zip(specifications, widths):
        specification.column_width = width
        specification.ignore_width = not width


def _first_row_side_child(table: Any, selectors: PartSelectorSet, editor: TreeEditor) -> Optional[Any]:
    for child in editor.get_element_children(table):
        if any(selectors.has_role(child, role) for role in _ROW_SIDE_ROLES):
            return child
    return None


def remove_column_group_nodes(table: Any, selectors: PartSelectorSet, editor: TreeEditor) -> None:
    """Unwrap every colgroup of the table, keeping its col nodes in place."""
    for group in selectors.find_children(table, TableRole.COLUMN_GROUP, editor):
        for column in selectors.find_children(group, TableRole.COLUMN, editor):
            editor.insert_before(table, column, group)
        editor.remove_child(table, group)


def _column_container(table: Any, selectors: PartSelectorSet, editor: TreeEditor) -> Any:
    """The single colgroup holding the cols, merging or creating it as needed."""
    groups = selectors.find_children(table, TableRole.COLUMN_GROUP, editor)
    if groups:
        group = groups[0]
        for extra in groups[1:]:
            for column in selectors.find_children(extra, TableRole.COLUMN, editor):
                editor.append_child(group, column)
            editor.remove_child(table, extra)
    else:
        group = editor.create_element(selectors.namespace_uri, selectors.local_name(TableRole.COLUMN_GROUP), table)
        editor.insert_before(table, group, _first_row_side_child(table, selectors, editor))

    # Loose cols directly under the table are taken into the group
    for column in selectors.find_children(table, TableRole.COLUMN, editor):
        editor.append_child(group, column)
    return group


def _sync_attribute(editor: TreeEditor, node: Any, name: str, value: Optional[str]) -> None:
    if value:
        editor.set_attribute(node, name, value)
    else:
        editor.remove_attribute(node, name)


def apply_column_specifications(
    selectors: PartSelectorSet,
    grid_model: GridModel,
    table: Any,
    editor: TreeEditor,
    width_strategy: Optional[ColumnWidthStrategy] = None
) -> None:
    """Synchronize the col nodes of table with grid_model.column_specifications."""
    width_strategy = width_strategy or ColumnWidthStrategy(selectors.column_width_type)

    existing = selectors.find_column_specification_nodes(table, editor)
    if not selectors.should_create_column_specification_nodes and not existing:
        return

    if selectors.use_column_group:
        container = _column_container(table, selectors, editor)
    else:
        remove_column_group_nodes(table, selectors, editor)
        container = table

    used: List[Any] = []
    previous = None
    for specification in grid_model.column_specifications:
        node = specification.element
        if node is None or not selectors.is_column_specification(node):
            node = editor.create_element(selectors.namespace_uri, selectors.local_name(TableRole.COLUMN), table)

        if previous is not None:
            editor.insert_after(container, node, previous)
        else:
            columns = selectors.find_children(container, TableRole.COLUMN, editor)
            if columns:
                editor.insert_before(container, node, columns[0])
            elif container is table:
                editor.insert_before(table, node, _first_row_side_child(table, selectors, editor))
            else:
                editor.append_child(container, node)

        if width_strategy.tracks_widths:
            width = specification.column_width if not specification.ignore_width else None
            _sync_attribute(editor, node, ATTR_WIDTH, width)
        _sync_attribute(editor, node, ATTR_ALIGN, specification.horizontal_alignment)
        _sync_attribute(editor, node, ATTR_VALIGN, specification.vertical_alignment)

        specification.element = node
        used.append(node)
        previous = node

    used_ids = {id(node) for node in used}
    for node in selectors.find_column_specification_nodes(table, editor):
        if id(node) not in used_ids:
            editor.remove_child(editor.get_parent(node), node)

    logger.debug(f"Synchronized {len(used)} column nodes")


__all__ = [
    'normalize_column_widths',
    'remove_column_group_nodes',
    'apply_column_specifications',
]
