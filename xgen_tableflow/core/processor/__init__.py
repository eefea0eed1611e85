# xgen_tableflow/core/processor/__init__.py
"""
Processor - Vocabulary-specific Table Modules

Helper Modules (subdirectories):
- xhtml_helper/: XHTML table vocabulary, grid builder and synthesizer

Usage Example:
    from xgen_tableflow.core.processor import XhtmlGridBuilder, XhtmlTableSynthesizer
    from xgen_tableflow.core.processor.xhtml_helper import PartSelectorSet
"""

# === XHTML ===
from xgen_tableflow.core.processor.xhtml_helper import (
    XhtmlGridBuilder,
    XhtmlTableSynthesizer,
    build_grid_model,
    apply_grid_model,
)

# === Explicit Subpackage Imports ===
from xgen_tableflow.core.processor import xhtml_helper

__all__ = [
    "XhtmlGridBuilder",
    "XhtmlTableSynthesizer",
    "build_grid_model",
    "apply_grid_model",
    "xhtml_helper",
]
