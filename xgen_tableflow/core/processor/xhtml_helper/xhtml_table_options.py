# xgen_tableflow/core/processor/xhtml_helper/xhtml_table_options.py
"""
XHTML Table Options and Part Selector Set

XhtmlTableOptions is the configuration surface for XHTML tables.
PartSelectorSet resolves it into the structural vocabulary: which element
plays each role, predicates per role, and the child queries the grid builder
and the synthesizer use.

================================================================================
CONFIGURATION RULES
================================================================================

| Options                                        | Result                     |
|------------------------------------------------|----------------------------|
| use_tbody without use_thead                     | ValueError                 |
| use_thead=False and use_th=False (both given)   | ValueError                 |
| no header mechanism requested                   | use_th enabled, warning    |
| column_width_type set, no column node creation  | ValueError                 |

================================================================================
USAGE
================================================================================

    options = XhtmlTableOptions(namespace_uri=XHTML_NS, use_thead=True, use_tbody=True)
    selectors = PartSelectorSet(options)

    for row in selectors.find_row_nodes(table):
        cells = selectors.find_cell_nodes(row)
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from lxml import etree

from xgen_tableflow.core.functions.column_widths import ColumnWidthType
from xgen_tableflow.core.functions.tree_editor import TreeNavigator
from xgen_tableflow.core.processor.xhtml_helper.xhtml_constants import (
    ROLE_LOCAL_NAMES,
    ROW_LEVEL_ROLES,
    TableRole,
)

logger = logging.getLogger("xgen_tableflow.options")


@dataclass
class XhtmlTableOptions:
    """Configuration for XHTML tables.

    Attributes:
        namespace_uri: Namespace of all table elements ('' for none)
        table_filter: Extra predicate a table element must satisfy, used to
                      tell XHTML tables from a same-named foreign element
        use_thead: Mark header rows with a thead element
        use_tbody: Wrap body rows in a tbody element (requires use_thead)
        use_th: Mark header cells with th elements
        use_borders: Track the table border attribute
        should_create_column_specification_nodes: Create and maintain col nodes
        use_column_group: Keep col nodes inside a single colgroup
        column_width_type: Column width arithmetic mode
    """
    namespace_uri: str = ""
    table_filter: Optional[Callable[[Any], bool]] = None
    use_thead: Optional[bool] = None
    use_tbody: Optional[bool] = None
    use_th: Optional[bool] = None
    use_borders: bool = True
    should_create_column_specification_nodes: bool = False
    use_column_group: bool = False
    column_width_type: ColumnWidthType = ColumnWidthType.NONE


class PartSelectorSet:
    """
    Structural vocabulary of one XHTML table configuration.

    ============================================================================
    CLASS STRUCTURE
    ============================================================================

    Role predicates:
        is_table(), is_header_container(), is_body_container(),
        is_footer_container(), is_row(), is_cell(), is_header_cell(),
        is_table_cell(), is_column_group(), is_column_specification(),
        is_caption()

    Combined predicates:
        is_table_part()  -> any structural role except caption
        is_table_node()  -> row-level roles (col, colgroup, tr, thead, tbody, tfoot)

    Queries:
        find_children(), find_row_nodes(), find_header_row_nodes(),
        find_body_row_nodes(), find_footer_row_nodes(),
        find_*_container_nodes(), find_column_specification_nodes(),
        find_cell_nodes(), find_non_table_nodes_preceding_rows()
    ============================================================================
    """

    def __init__(self, options: Optional[XhtmlTableOptions] = None, navigator: Optional[TreeNavigator] = None):
        options = options or XhtmlTableOptions()
        self.options = options
        self.navigator = navigator or TreeNavigator()

        use_thead = bool(options.use_thead)
        use_tbody = bool(options.use_tbody)
        use_th = bool(options.use_th)

        if options.column_width_type is not ColumnWidthType.NONE and not options.should_create_column_specification_nodes:
            raise ValueError(
                "XHTML table: using column_width_type requires "
                "should_create_column_specification_nodes to be True."
            )

        if use_tbody and not use_thead:
            raise ValueError("XHTML table: using tbody requires the use of thead.")

        if options.use_thead is False and options.use_th is False:
            raise ValueError("XHTML table: at least one header type (th or thead) must be used.")

        if not use_thead and not use_th:
            logger.warning("XHTML table: no header type configured, defaulting to th header cells")
            use_th = True

        self.namespace_uri = options.namespace_uri or ""
        self.table_filter = options.table_filter
        self.use_thead = use_thead
        self.use_tbody = use_tbody
        self.use_th = use_th
        self.use_borders = options.use_borders
        self.should_create_column_specification_nodes = options.should_create_column_specification_nodes
        self.use_column_group = options.use_column_group
        self.column_width_type = options.column_width_type

        self.tags: Dict[TableRole, str] = {
            role: etree.QName(self.namespace_uri or None, local_name).text
            for role, local_name in ROLE_LOCAL_NAMES.items()
        }
        self._part_tags = {tag for role, tag in self.tags.items() if role is not TableRole.CAPTION}
        self._row_level_tags = {self.tags[role] for role in ROW_LEVEL_ROLES}

    def __repr__(self) -> str:
        return (f"PartSelectorSet(namespace_uri={self.namespace_uri!r}, use_thead={self.use_thead}, "
                f"use_tbody={self.use_tbody}, use_th={self.use_th})")

    # ==========================================================================
    # Role predicates
    # ==========================================================================

    def local_name(self, role: TableRole) -> str:
        return ROLE_LOCAL_NAMES[role]

    def has_role(self, node: Any, role: TableRole) -> bool:
        if node is None or not isinstance(node.tag, str) or node.tag != self.tags[role]:
            return False
        if role is TableRole.TABLE and self.table_filter is not None:
            return bool(self.table_filter(node))
        if role is TableRole.CAPTION:
            return self.is_table(self.navigator.get_parent(node))
        return True

    def is_table(self, node: Any) -> bool:
        return self.has_role(node, TableRole.TABLE)

    def is_header_container(self, node: Any) -> bool:
        return self.has_role(node, TableRole.HEADER_CONTAINER)

    def is_body_container(self, node: Any) -> bool:
        return self.has_role(node, TableRole.BODY_CONTAINER)

    def is_footer_container(self, node: Any) -> bool:
        return self.has_role(node, TableRole.FOOTER_CONTAINER)

    def is_row(self, node: Any) -> bool:
        return self.has_role(node, TableRole.ROW)

    def is_cell(self, node: Any) -> bool:
        return self.has_role(node, TableRole.CELL)

    def is_header_cell(self, node: Any) -> bool:
        return self.has_role(node, TableRole.HEADER_CELL)

    def is_table_cell(self, node: Any) -> bool:
        return self.is_cell(node) or self.is_header_cell(node)

    def is_column_group(self, node: Any) -> bool:
        return self.has_role(node, TableRole.COLUMN_GROUP)

    def is_column_specification(self, node: Any) -> bool:
        return self.has_role(node, TableRole.COLUMN)

    def is_caption(self, node: Any) -> bool:
        return self.has_role(node, TableRole.CAPTION)

    def is_table_part(self, node: Any) -> bool:
        """Any structural element of this vocabulary except the caption."""
        if node is None or not isinstance(node.tag, str) or node.tag not in self._part_tags:
            return False
        if node.tag == self.tags[TableRole.TABLE]:
            return self.is_table(node)
        return True

    def is_table_node(self, node: Any) -> bool:
        """Row-level structural element: col, colgroup, tr, thead, tbody or tfoot."""
        return node is not None and isinstance(node.tag, str) and node.tag in self._row_level_tags

    # ==========================================================================
    # Queries
    # ==========================================================================
    #
    # Every query reads the tree through a TreeNavigator. Callers holding a
    # navigator or an editor pass it along; otherwise a read-only one is used.

    def _children(self, node: Any, navigator: Optional[TreeNavigator]) -> List[Any]:
        return (navigator or self.navigator).get_element_children(node)

    def find_children(self, node: Any, role: TableRole, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        return [child for child in self._children(node, navigator) if self.has_role(child, role)]

    def find_header_container_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        return self.find_children(table, TableRole.HEADER_CONTAINER, navigator)

    def find_body_container_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        return self.find_children(table, TableRole.BODY_CONTAINER, navigator)

    def find_footer_container_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        return self.find_children(table, TableRole.FOOTER_CONTAINER, navigator)

    def find_cell_nodes(self, row: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        """Direct td and th children of a row, comments and PIs skipped."""
        return [child for child in self._children(row, navigator) if self.is_table_cell(child)]

    def find_column_specification_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        """col nodes directly under the table or inside a colgroup, in document order."""
        columns = []
        for child in self._children(table, navigator):
            if self.is_column_specification(child):
                columns.append(child)
            elif self.is_column_group(child):
                columns.extend(self.find_children(child, TableRole.COLUMN, navigator))
        return columns

    def find_row_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        """All rows: header rows, then body rows, then footer rows."""
        header_rows = [
            row
            for container in self.find_header_container_nodes(table, navigator)
            for row in self.find_children(container, TableRole.ROW, navigator)
        ]
        body_rows = []
        for child in self._children(table, navigator):
            if self.is_row(child):
                body_rows.append(child)
            elif self.is_body_container(child):
                body_rows.extend(self.find_children(child, TableRole.ROW, navigator))
        return header_rows + body_rows + self.find_footer_row_nodes(table, navigator)

    def find_header_row_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        """
        Rows forming the table header.

        - thead present: its rows
        - tbody present: rows directly under the table preceding the first tbody
        - otherwise: the leading rows consisting of th cells only; a row with no
          cells of its own continues the run, the first row holding a td ends it
        """
        header_containers = self.find_header_container_nodes(table, navigator)
        if header_containers:
            return [
                row
                for container in header_containers
                for row in self.find_children(container, TableRole.ROW, navigator)
            ]

        if self.find_body_container_nodes(table, navigator):
            rows = []
            for child in self._children(table, navigator):
                if self.is_body_container(child):
                    break
                if self.is_row(child):
                    rows.append(child)
            return rows

        rows = []
        for row in self.find_children(table, TableRole.ROW, navigator):
            cells = self.find_cell_nodes(row, navigator)
            if any(self.is_cell(cell) for cell in cells):
                break
            rows.append(row)
        return rows

    def find_footer_row_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        return [
            row
            for container in self.find_footer_container_nodes(table, navigator)
            for row in self.find_children(container, TableRole.ROW, navigator)
        ]

    def find_body_row_nodes(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        excluded = (set(self.find_header_row_nodes(table, navigator))
                    | set(self.find_footer_row_nodes(table, navigator)))
        return [row for row in self.find_row_nodes(table, navigator) if row not in excluded]

    def find_non_table_nodes_preceding_rows(self, table: Any, navigator: Optional[TreeNavigator] = None) -> List[Any]:
        """Foreign elements interleaved before the last row-level structural node."""
        children = self._children(table, navigator)
        last_structural = max(
            (index for index, child in enumerate(children) if self.is_table_node(child)),
            default=-1,
        )
        return [
            child
            for child in children[:last_structural]
            if not self.is_table_node(child) and not self.is_caption(child)
        ]


def create_part_selector_set(options: Optional[XhtmlTableOptions] = None) -> PartSelectorSet:
    """Factory function to create a PartSelectorSet."""
    return PartSelectorSet(options)


# Default configuration
DEFAULT_TABLE_OPTIONS = XhtmlTableOptions()


__all__ = [
    'XhtmlTableOptions',
    'PartSelectorSet',
    'create_part_selector_set',
    'DEFAULT_TABLE_OPTIONS',
]
