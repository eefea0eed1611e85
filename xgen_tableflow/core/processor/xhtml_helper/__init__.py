# xgen_tableflow/core/processor/xhtml_helper/__init__.py
"""
XHTML Helper Module

Modules for XHTML tables.

Module structure:
- xhtml_constants: TableRole Enum, attribute names
- xhtml_table_options: XhtmlTableOptions, PartSelectorSet
- xhtml_grid_builder: Table element -> GridModel (XhtmlGridBuilder)
- xhtml_table_synthesizer: GridModel -> table element (XhtmlTableSynthesizer)
- xhtml_colspec_normalizer: col / colgroup maintenance
"""

# Constants
from xgen_tableflow.core.processor.xhtml_helper.xhtml_constants import (
    TableRole,
    ROLE_LOCAL_NAMES,
)

# Options and selectors
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import (
    XhtmlTableOptions,
    PartSelectorSet,
    create_part_selector_set,
    DEFAULT_TABLE_OPTIONS,
)

# Grid Builder
from xgen_tableflow.core.processor.xhtml_helper.xhtml_grid_builder import (
    XhtmlGridBuilder,
    build_grid_model,
    parse_span,
)

# Synthesizer
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_synthesizer import (
    XhtmlTableSynthesizer,
    apply_grid_model,
    accept_structure,
)

# Column specifications
from xgen_tableflow.core.processor.xhtml_helper.xhtml_colspec_normalizer import (
    normalize_column_widths,
    remove_column_group_nodes,
    apply_column_specifications,
)

__all__ = [
    # Constants
    'TableRole',
    'ROLE_LOCAL_NAMES',
    # Options and selectors
    'XhtmlTableOptions',
    'PartSelectorSet',
    'create_part_selector_set',
    'DEFAULT_TABLE_OPTIONS',
    # Grid Builder
    'XhtmlGridBuilder',
    'build_grid_model',
    'parse_span',
    # Synthesizer
    'XhtmlTableSynthesizer',
    'apply_grid_model',
    'accept_structure',
    # Column specifications
    'normalize_column_widths',
    'remove_column_group_nodes',
    'apply_column_specifications',
]
