# xgen_tableflow/core/functions/__init__.py
"""
Functions - Format-independent Table Modules

Module Components:
- table_grid: GridModel, TableCell, ColumnSpecification, GridModelBuildError
- grid_validator: Span coverage validation
- table_grid_mutations: In-place structural edits of a GridModel
- column_widths: Column width arithmetic (ColumnWidthStrategy)
- tree_editor: TreeNavigator / TreeEditor with overlays and anchors

Usage Example:
    from xgen_tableflow.core.functions import GridModel, insert_column
    from xgen_tableflow.core.functions import ColumnWidthStrategy, ColumnWidthType
    from xgen_tableflow.core.functions.tree_editor import TreeEditor
"""

# Grid model
from xgen_tableflow.core.functions.table_grid import (
    CellCoordinates,
    CellSize,
    TableCell,
    ColumnSpecification,
    TableSpecification,
    GridModel,
    GridModelBuildError,
    create_default_column_specification,
)

# Validation
from xgen_tableflow.core.functions.grid_validator import (
    validate_grid,
    validate_grid_model,
)

# Mutations
from xgen_tableflow.core.functions.table_grid_mutations import (
    insert_row,
    delete_row,
    insert_column,
    delete_column,
    merge_cell_with_cell_to_the_right,
    merge_cell_with_cell_below,
    split_cell_into_rows,
    split_cell_into_columns,
    set_header_row_count,
)

# Column widths
from xgen_tableflow.core.functions.column_widths import (
    ColumnWidthType,
    ColumnWidthStrategy,
    create_column_width_strategy,
    parse_width,
)

# Tree access
from xgen_tableflow.core.functions.tree_editor import (
    Anchor,
    Overlay,
    TreeNavigator,
    TreeEditor,
    create_tree_editor,
)

__all__ = [
    # Grid model
    "CellCoordinates",
    "CellSize",
    "TableCell",
    "ColumnSpecification",
    "TableSpecification",
    "GridModel",
    "GridModelBuildError",
    "create_default_column_specification",
    # Validation
    "validate_grid",
    "validate_grid_model",
    # Mutations
    "insert_row",
    "delete_row",
    "insert_column",
    "delete_column",
    "merge_cell_with_cell_to_the_right",
    "merge_cell_with_cell_below",
    "split_cell_into_rows",
    "split_cell_into_columns",
    "set_header_row_count",
    # Column widths
    "ColumnWidthType",
    "ColumnWidthStrategy",
    "create_column_width_strategy",
    "parse_width",
    # Tree access
    "Anchor",
    "Overlay",
    "TreeNavigator",
    "TreeEditor",
    "create_tree_editor",
]
