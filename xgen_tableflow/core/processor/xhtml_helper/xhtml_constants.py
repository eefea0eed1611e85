# xgen_tableflow/core/processor/xhtml_helper/xhtml_constants.py
"""
XHTML table vocabulary constants

- TableRole: structural role of an element
- ROLE_LOCAL_NAMES: element name per role
- Attribute names and cell/column data mappings
"""
from enum import Enum


# === Structural roles ===

class TableRole(Enum):
    """Structural role an element plays in an XHTML table"""
    TABLE = "table"
    HEADER_CONTAINER = "thead"
    BODY_CONTAINER = "tbody"
    FOOTER_CONTAINER = "tfoot"
    ROW = "tr"
    CELL = "td"
    HEADER_CELL = "th"
    COLUMN_GROUP = "colgroup"
    COLUMN = "col"
    CAPTION = "caption"


ROLE_LOCAL_NAMES = {role: role.value for role in TableRole}

# Roles that delimit table structure from foreign content among the rows
ROW_LEVEL_ROLES = (
    TableRole.COLUMN,
    TableRole.COLUMN_GROUP,
    TableRole.ROW,
    TableRole.HEADER_CONTAINER,
    TableRole.BODY_CONTAINER,
    TableRole.FOOTER_CONTAINER,
)


# === Attributes ===

ATTR_ROWSPAN = "rowspan"
ATTR_COLSPAN = "colspan"
ATTR_BORDER = "border"
ATTR_WIDTH = "width"
ATTR_ALIGN = "align"
ATTR_VALIGN = "valign"
ATTR_CHAR = "char"

BORDER_ON = "1"
BORDER_OFF = "0"

# attribute -> TableCell.data key
CELL_DATA_ATTRIBUTES = {
    ATTR_CHAR: "character_alignment",
    ATTR_ALIGN: "horizontal_alignment",
    ATTR_VALIGN: "vertical_alignment",
}

# attribute -> ColumnSpecification field
COLUMN_ALIGNMENT_ATTRIBUTES = {
    ATTR_ALIGN: "horizontal_alignment",
    ATTR_VALIGN: "vertical_alignment",
}
