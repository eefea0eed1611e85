# xgen_tableflow/core/__init__.py
"""
Core - Table Flow Core Module

Module Structure:
- table_flow: Main XhtmlTableFlow class
- functions/: Format-independent pieces
    - table_grid: GridModel and its cell / column / table records
    - grid_validator: Span coverage checks
    - table_grid_mutations: Row, column, merge, split and header edits
    - column_widths: Column width arithmetic
    - tree_editor: Tree navigation, journaled edits, anchors
- processor/: Vocabulary-specific modules
    - xhtml_helper: XHTML table parse and synthesis

Usage:
    from xgen_tableflow.core import XhtmlTableFlow, XhtmlTableOptions
    from xgen_tableflow.core.functions import insert_row, TreeEditor
"""

# === Main Class ===
from xgen_tableflow.core.table_flow import (
    XhtmlTableFlow,
    create_table_flow,
)

# === Configuration ===
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import (
    XhtmlTableOptions,
    PartSelectorSet,
    DEFAULT_TABLE_OPTIONS,
)
from xgen_tableflow.core.functions.column_widths import ColumnWidthType

# === Model and Tree ===
from xgen_tableflow.core.functions.table_grid import (
    GridModel,
    GridModelBuildError,
)
from xgen_tableflow.core.functions.tree_editor import (
    TreeEditor,
    TreeNavigator,
)

# === Explicit Subpackage Imports ===
from xgen_tableflow.core import processor
from xgen_tableflow.core import functions

__all__ = [
    # Main Class
    "XhtmlTableFlow",
    "create_table_flow",
    # Configuration
    "XhtmlTableOptions",
    "PartSelectorSet",
    "DEFAULT_TABLE_OPTIONS",
    "ColumnWidthType",
    # Model and Tree
    "GridModel",
    "GridModelBuildError",
    "TreeEditor",
    "TreeNavigator",
    # Subpackages
    "processor",
    "functions",
]
