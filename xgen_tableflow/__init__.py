# xgen_tableflow/__init__.py
"""
xgen_tableflow Library

Keeps a rectangular logical table model and an XHTML table tree in sync.

Package Structure:
- core: Table flow core module
    - XhtmlTableFlow: Main entry class
    - functions: Grid model, grid validation, grid mutations, width
      arithmetic and the journaling tree editor
    - processor: Vocabulary-specific parse and synthesis (XHTML)

Usage:
    from xgen_tableflow import XhtmlTableFlow, XhtmlTableOptions, TreeEditor

    flow = XhtmlTableFlow(XhtmlTableOptions(use_thead=True, use_tbody=True))
    grid_model = flow.build_grid_model(table)
    grid_model.header_row_count = 1
    flow.apply_to_tree(grid_model, table, TreeEditor())
"""

__version__ = "0.1.0"

# Expose core classes at top level
from xgen_tableflow.core import (
    XhtmlTableFlow,
    create_table_flow,
    XhtmlTableOptions,
    DEFAULT_TABLE_OPTIONS,
    ColumnWidthType,
    GridModel,
    GridModelBuildError,
    TreeEditor,
)

# Explicit subpackages
from xgen_tableflow import core

__all__ = [
    "__version__",
    # Core classes
    "XhtmlTableFlow",
    "create_table_flow",
    "XhtmlTableOptions",
    "DEFAULT_TABLE_OPTIONS",
    "ColumnWidthType",
    "GridModel",
    "GridModelBuildError",
    "TreeEditor",
    # Subpackages
    "core",
]
