"""Shared test configuration and fixtures."""

import pytest

from xgen_tableflow.core.functions.tree_editor import TreeEditor
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import PartSelectorSet, XhtmlTableOptions


@pytest.fixture
def editor() -> TreeEditor:
    return TreeEditor()


@pytest.fixture
def th_selectors() -> PartSelectorSet:
    """Header rows marked with th cells only."""
    return PartSelectorSet(XhtmlTableOptions(use_th=True))


@pytest.fixture
def thead_selectors() -> PartSelectorSet:
    """Header rows in thead, body rows in tbody, header cells as th."""
    return PartSelectorSet(XhtmlTableOptions(use_thead=True, use_tbody=True, use_th=True))
