"""Tests for writing grid models back onto XHTML tables.

Tests cover:
  - round trips leave the tree unchanged
  - row / column / merge / split edits and their minimal tree changes
  - header conversion (th and thead / tbody)
  - identity preservation and selection migration
  - column specification nodes and widths
  - rejection and failure roll back
"""

import logging

import pytest
from lxml import etree

from table_helpers import XHTML_NS, as_jsonml, parse_xml, transform
from xgen_tableflow.core.functions.column_widths import ColumnWidthType
from xgen_tableflow.core.functions.table_grid_mutations import (
    delete_column,
    delete_row,
    insert_column,
    insert_row,
    merge_cell_with_cell_to_the_right,
    set_header_row_count,
    split_cell_into_rows,
)
from xgen_tableflow.core.functions.tree_editor import TreeEditor
from xgen_tableflow.core.processor.xhtml_helper.xhtml_table_options import XhtmlTableOptions
from xgen_tableflow.core.table_flow import XhtmlTableFlow

TH_FLOW = XhtmlTableFlow(XhtmlTableOptions(use_th=True))
THEAD_FLOW = XhtmlTableFlow(XhtmlTableOptions(use_thead=True, use_tbody=True, use_th=True))
THEAD_TD_FLOW = XhtmlTableFlow(XhtmlTableOptions(use_thead=True, use_tbody=True))


def keep(grid_model):
    pass


def table_4x4() -> str:
    rows = "".join(
        "<tr>" + "".join(f"<td>{row}{column}</td>" for column in range(4)) + "</tr>"
        for row in range(4)
    )
    return f"<table>{rows}</table>"


# ===========================================================================
# Round trips
# ===========================================================================


class TestRoundTrip:
    """Parsing and writing back an unmodified model changes nothing."""

    @pytest.mark.parametrize("flow, xml", [
        (TH_FLOW, "<table><tr><th>h</th><th>i</th></tr><tr><td>a</td><td>b</td></tr></table>"),
        (TH_FLOW, "<table border=\"1\"><caption>c</caption><tr><td rowspan=\"2\">a</td><td>b</td></tr><tr><td>c</td></tr></table>"),
        (TH_FLOW, "<table><tr><td rowspan=\"2\">a</td><td rowspan=\"2\">b</td></tr><tr/></table>"),
        (TH_FLOW, "<table><tr><td align=\"left\" valign=\"top\">a<b>b</b>c</td><!--note--></tr></table>"),
        (THEAD_FLOW, "<table><thead><tr><th>h</th><th>i</th></tr></thead><tbody><tr><td>a</td><td>b</td></tr></tbody></table>"),
        (THEAD_FLOW, "<table border=\"0\"><thead><tr><th colspan=\"2\">h</th></tr></thead><tbody><tr><td>a</td><td>b</td></tr></tbody></table>"),
    ])
    def test_round_trip(self, flow, xml):
        table, _, applied = transform(flow, xml, keep)
        assert applied
        assert as_jsonml(table) == as_jsonml(parse_xml(xml))

    def test_round_trip_keeps_every_node(self):
        xml = "<table><tr><td>a</td><td>b</td></tr><tr><td>c</td><td>d</td></tr></table>"
        table = parse_xml(xml)
        before = list(table.iter())
        grid_model = TH_FLOW.build_grid_model(table)
        TH_FLOW.apply_to_tree(grid_model, table, TreeEditor())
        after = list(table.iter())
        assert len(before) == len(after)
        assert all(old is new for old, new in zip(before, after))

    def test_virtual_rows_below_last_row_become_empty_rows(self):
        xml = (
            "<table><tr><th>h</th><th>i</th></tr>"
            "<tr><td rowspan=\"3\">a</td><td rowspan=\"3\">b</td></tr></table>"
        )
        table, grid_model, applied = transform(TH_FLOW, xml, keep)
        assert applied
        assert grid_model.height == 4
        assert as_jsonml(table) == [
            "table",
            ["tr", ["th", "h"], ["th", "i"]],
            ["tr", ["td", {"rowspan": "3"}, "a"], ["td", {"rowspan": "3"}, "b"]],
            ["tr"],
            ["tr"],
        ]
        reparsed = TH_FLOW.build_grid_model(table)
        assert (reparsed.height, reparsed.width, reparsed.header_row_count) == (4, 2, 1)


# ===========================================================================
# Scenarios
# ===========================================================================


class TestScenarios:
    """End-to-end edits."""

    def test_header_row_in_th_mode(self):
        table, grid_model, _ = transform(TH_FLOW, table_4x4(), lambda g: set_header_row_count(g, 1))

        assert as_jsonml(table[0]) == ["tr", ["th", "00"], ["th", "01"], ["th", "02"], ["th", "03"]]
        for row in table[1:]:
            assert all(cell.tag == "td" for cell in row)
        assert TH_FLOW.build_grid_model(table).header_row_count == 1
        assert grid_model.get_cell_at_coordinates(0, 0).element is table[0][0]

    def test_insert_column_with_percentual_widths(self):
        flow = XhtmlTableFlow(XhtmlTableOptions(
            use_th=True,
            should_create_column_specification_nodes=True,
            column_width_type=ColumnWidthType.PERCENTUAL,
        ))
        xml = (
            "<table>" + "<col width=\"20%\"/>" * 4
            + "<tr><td>a</td><td>b</td><td>c</td><td>d</td></tr>"
            + "<tr><td>e</td><td>f</td><td>g</td><td>h</td></tr>"
            + "</table>"
        )
        table, _, _ = transform(flow, xml, lambda g: insert_column(g, 0))

        assert as_jsonml(table) == [
            "table",
            *[["col", {"width": "20%"}]] * 5,
            ["tr", ["td"], ["td", "a"], ["td", "b"], ["td", "c"], ["td", "d"]],
            ["tr", ["td"], ["td", "e"], ["td", "f"], ["td", "g"], ["td", "h"]],
        ]

    def test_split_rowspan_cell(self):
        xml = (
            "<table>"
            "<tr><td>a</td><td>b</td><td>c</td></tr>"
            "<tr><td>d</td><td rowspan=\"2\">e</td><td>f</td></tr>"
            "<tr><td>g</td><td>h</td></tr>"
            "</table>"
        )
        table, _, _ = transform(TH_FLOW, xml, lambda g: split_cell_into_rows(g, 1, 1))

        assert as_jsonml(table) == [
            "table",
            ["tr", ["td", "a"], ["td", "b"], ["td", "c"]],
            ["tr", ["td", "d"], ["td", "e"], ["td", "f"]],
            ["tr", ["td", "g"], ["td"], ["td", "h"]],
        ]

    def test_overrunning_colspan_is_an_error(self):
        xml = "<table><tr><td>a</td><td>b</td></tr><tr><td colspan=\"3\">c</td></tr></table>"
        result = TH_FLOW.build_grid_model(parse_xml(xml))
        assert not hasattr(result, "grid")
        assert result.row_index == 1


# ===========================================================================
# Row and cell edits
# ===========================================================================


class TestEdits:
    """Row and cell edits write minimal changes."""

    def test_delete_row(self):
        xml = "<table><tr><td>a</td></tr><tr><td>b</td></tr><tr><td>c</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: delete_row(g, 1))
        assert as_jsonml(table) == ["table", ["tr", ["td", "a"]], ["tr", ["td", "c"]]]

    def test_insert_row_at_end(self):
        xml = "<table><tr><td>a</td><td>b</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: insert_row(g, 0, below=True))
        assert as_jsonml(table) == ["table", ["tr", ["td", "a"], ["td", "b"]], ["tr", ["td"], ["td"]]]

    def test_insert_row_through_rowspan(self):
        xml = "<table><tr><td rowspan=\"2\">a</td><td>b</td></tr><tr><td>c</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: insert_row(g, 1))
        assert as_jsonml(table) == [
            "table",
            ["tr", ["td", {"rowspan": "3"}, "a"], ["td", "b"]],
            ["tr", ["td"]],
            ["tr", ["td", "c"]],
        ]

    def test_merge_moves_content(self):
        xml = "<table><tr><td>a</td><td>b</td></tr><tr><td>c</td><td>d</td></tr></table>"
        editor = TreeEditor()
        table, _, _ = transform(
            TH_FLOW, xml,
            lambda g: merge_cell_with_cell_to_the_right(g, 0, 0, editor=editor),
            editor=editor,
        )
        assert as_jsonml(table) == [
            "table",
            ["tr", ["td", {"colspan": "2"}, "ab"]],
            ["tr", ["td", "c"], ["td", "d"]],
        ]

    def test_delete_column_keeps_foreign_nodes(self):
        xml = "<table><tr><td>a</td><!--x--><td>b</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: delete_column(g, 0))
        assert as_jsonml(table) == ["table", ["tr", ["td", "b"], ["#comment", "x"]]]

    def test_foreign_node_between_cells_left_in_place(self):
        xml = "<table><tr><td>a</td><!--x--><td>b</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: insert_column(g, 1, after=True))
        assert as_jsonml(table) == ["table", ["tr", ["td", "a"], ["#comment", "x"], ["td", "b"], ["td"]]]

    def test_cell_data_written(self):
        xml = "<table><tr><td align=\"left\">a</td></tr></table>"

        def align(grid_model):
            cell = grid_model.get_cell_at_coordinates(0, 0)
            cell.data = {"vertical_alignment": "bottom"}

        table, _, _ = transform(TH_FLOW, xml, align)
        assert table[0][0].attrib == {"valign": "bottom"}

    def test_borders(self):
        table, _, _ = transform(TH_FLOW, "<table><tr><td/></tr></table>", lambda g: setattr(g, "borders", True))
        assert table.get("border") == "1"

        table, _, _ = transform(TH_FLOW, "<table border=\"1\"><tr><td/></tr></table>", lambda g: setattr(g, "borders", False))
        assert table.get("border") is None

        table, _, _ = transform(TH_FLOW, "<table border=\"0\"><tr><td/></tr></table>", keep)
        assert table.get("border") == "0"

    def test_new_nodes_in_namespace(self):
        flow = XhtmlTableFlow(XhtmlTableOptions(namespace_uri=XHTML_NS, use_th=True))
        xml = f"<table xmlns=\"{XHTML_NS}\"><tr><td>a</td></tr></table>"
        table, _, _ = transform(flow, xml, lambda g: insert_row(g, 0, below=True))
        assert table[1].tag == f"{{{XHTML_NS}}}tr"
        assert table[1][0].tag == f"{{{XHTML_NS}}}td"


# ===========================================================================
# Header structure
# ===========================================================================


class TestHeaderStructure:
    """thead / tbody maintenance."""

    def test_thead_and_tbody_created(self):
        xml = "<table><tr><td>a</td></tr><tr><td>b</td></tr></table>"
        table, _, _ = transform(THEAD_TD_FLOW, xml, lambda g: set_header_row_count(g, 1))
        assert as_jsonml(table) == [
            "table",
            ["thead", ["tr", ["td", "a"]]],
            ["tbody", ["tr", ["td", "b"]]],
        ]

    def test_empty_thead_removed(self):
        xml = "<table><thead><tr><th>h</th></tr></thead><tbody><tr><td>b</td></tr></tbody></table>"
        table, _, _ = transform(THEAD_FLOW, xml, lambda g: set_header_row_count(g, 0))
        assert as_jsonml(table) == ["table", ["tbody", ["tr", ["td", "h"]], ["tr", ["td", "b"]]]]

    def test_footer_merged_into_body(self):
        xml = (
            "<table><thead><tr><th>h</th></tr></thead>"
            "<tfoot><tr><td>f</td></tr></tfoot>"
            "<tbody><tr><td>a</td></tr></tbody><tbody><tr><td>b</td></tr></tbody></table>"
        )
        table, _, _ = transform(THEAD_FLOW, xml, keep)
        assert as_jsonml(table) == [
            "table",
            ["thead", ["tr", ["th", "h"]]],
            ["tbody", ["tr", ["td", "a"]], ["tr", ["td", "b"]], ["tr", ["td", "f"]]],
        ]

    def test_containers_dropped_when_not_configured(self):
        xml = "<table><thead><tr><th>h</th></tr></thead><tbody><tr><td>b</td></tr></tbody></table>"
        table, _, _ = transform(TH_FLOW, xml, keep)
        assert as_jsonml(table) == ["table", ["tr", ["th", "h"]], ["tr", ["td", "b"]]]

    @pytest.mark.parametrize("flow", [TH_FLOW, THEAD_FLOW, THEAD_TD_FLOW])
    @pytest.mark.parametrize("count", [0, 1, 2, 3])
    def test_header_boundary_round_trips(self, flow, count):
        xml = "<table><tr><td>a</td></tr><tr><td>b</td></tr><tr><td>c</td></tr></table>"
        table, _, _ = transform(flow, xml, lambda g: set_header_row_count(g, count))
        assert flow.build_grid_model(table).header_row_count == count

    def test_header_cells_become_body_cells(self):
        xml = "<table><tr><th>h</th></tr><tr><td>a</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: set_header_row_count(g, 0))
        assert as_jsonml(table) == ["table", ["tr", ["td", "h"]], ["tr", ["td", "a"]]]


# ===========================================================================
# Identity and selections
# ===========================================================================


class TestIdentityAndSelection:
    """Surviving cells keep their nodes; anchors follow the content."""

    def test_surviving_cells_keep_their_elements(self):
        table = parse_xml("<table><tr><td>a</td><td>b</td></tr><tr><td>c</td><td>d</td></tr></table>")
        cells = list(table.iter("td"))
        grid_model = TH_FLOW.build_grid_model(table)
        insert_row(grid_model, 1)
        insert_column(grid_model, 1)
        TH_FLOW.apply_to_tree(grid_model, table, TreeEditor())

        remaining = list(table.iter("td"))
        for cell in cells:
            assert any(cell is node for node in remaining)

    def test_anchor_follows_converted_cell(self):
        table = parse_xml("<table><tr><td>head</td></tr><tr><td>body</td></tr></table>")
        editor = TreeEditor()
        anchor = editor.register_anchor(table[0][0], 2)

        grid_model = TH_FLOW.build_grid_model(table)
        set_header_row_count(grid_model, 1)
        TH_FLOW.apply_to_tree(grid_model, table, editor)

        container, offset = editor.get_anchor_position(anchor)
        assert container is table[0][0]
        assert container.tag == "th"
        assert offset == 2

    def test_anchor_in_empty_converted_cell(self):
        table = parse_xml("<table><tr><td/></tr><tr><td/></tr></table>")
        editor = TreeEditor()
        anchor = editor.register_anchor(table[0][0], 0)

        grid_model = TH_FLOW.build_grid_model(table)
        set_header_row_count(grid_model, 1)
        TH_FLOW.apply_to_tree(grid_model, table, editor)

        assert editor.get_anchor_position(anchor) == (table[0][0], 0)

    def test_anchor_inside_cell_content_survives_move(self):
        table = parse_xml("<table><tr><td>a</td><td><b>bold</b></td></tr></table>")
        editor = TreeEditor()
        bold = table[0][1][0]
        anchor = editor.register_anchor(bold, 1)

        grid_model = TH_FLOW.build_grid_model(table)
        insert_column(grid_model, 0)
        TH_FLOW.apply_to_tree(grid_model, table, editor)

        assert editor.get_anchor_position(anchor) == (bold, 1)
        assert table[0][2][0] is bold

    def test_anchor_in_removed_cell_moves_to_row(self):
        table = parse_xml("<table><tr><td>a</td><td>b</td></tr></table>")
        editor = TreeEditor()
        anchor = editor.register_anchor(table[0][1], 0)

        grid_model = TH_FLOW.build_grid_model(table)
        merge_cell_with_cell_to_the_right(grid_model, 0, 0)
        TH_FLOW.apply_to_tree(grid_model, table, editor)

        assert editor.get_anchor_position(anchor) == (table[0], 1)


# ===========================================================================
# Column specifications
# ===========================================================================


class TestColumnSpecifications:
    """col / colgroup maintenance."""

    def test_relative_widths_after_delete_and_normalize(self):
        flow = XhtmlTableFlow(XhtmlTableOptions(
            use_th=True,
            should_create_column_specification_nodes=True,
            column_width_type=ColumnWidthType.RELATIVE,
        ))
        xml = (
            "<table><col width=\"1*\"/><col width=\"2*\"/><col width=\"3*\"/>"
            "<tr><td>a</td><td>b</td><td>c</td></tr></table>"
        )

        def mutate(grid_model):
            delete_column(grid_model, 1)
            flow.normalize_column_widths(grid_model)

        table, _, _ = transform(flow, xml, mutate)
        assert as_jsonml(table) == [
            "table",
            ["col", {"width": "1*"}],
            ["col", {"width": "3*"}],
            ["tr", ["td", "a"], ["td", "c"]],
        ]

    def test_column_sync_logs_under_its_own_logger(self, caplog):
        xml = "<table><col align=\"left\"/><tr><td>a</td></tr></table>"
        with caplog.at_level(logging.DEBUG, logger="xgen_tableflow.colspec"):
            transform(TH_FLOW, xml, keep)
        assert any(
            record.name == "xgen_tableflow.colspec" and "Synchronized 1 column nodes" in record.getMessage()
            for record in caplog.records
        )

    def test_existing_columns_maintained_without_creation(self):
        xml = "<table><col align=\"left\"/><col/><tr><td>a</td><td>b</td></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, lambda g: insert_column(g, 1, after=True))
        assert as_jsonml(table) == [
            "table",
            ["col", {"align": "left"}],
            ["col"],
            ["col"],
            ["tr", ["td", "a"], ["td", "b"], ["td"]],
        ]

    def test_no_columns_created_by_default(self):
        table, _, _ = transform(TH_FLOW, "<table><tr><td/></tr></table>", lambda g: insert_column(g, 0))
        assert [child.tag for child in table] == ["tr"]

    def test_width_untouched_without_tracking(self):
        flow = XhtmlTableFlow(XhtmlTableOptions(use_th=True, should_create_column_specification_nodes=True))
        xml = "<table><col width=\"30%\"/><tr><td/></tr></table>"
        table, _, _ = transform(flow, xml, keep)
        assert table[0].get("width") == "30%"

    def test_column_group_unwrapped(self):
        xml = "<table><caption>c</caption><colgroup><col/><col/></colgroup><tr><td/><td/></tr></table>"
        table, _, _ = transform(TH_FLOW, xml, keep)
        assert [child.tag for child in table] == ["caption", "col", "col", "tr"]

    def test_column_group_created(self):
        flow = XhtmlTableFlow(XhtmlTableOptions(
            use_th=True,
            should_create_column_specification_nodes=True,
            use_column_group=True,
        ))
        xml = "<table><col/><tr><td/><td/></tr></table>"
        table, grid_model, _ = transform(flow, xml, keep)
        assert as_jsonml(table) == ["table", ["colgroup", ["col"], ["col"]], ["tr", ["td"], ["td"]]]
        assert grid_model.column_specifications[1].element is table[0][1]


# ===========================================================================
# Completion
# ===========================================================================


class TestCompletion:
    """Structure completion decides over commit or discard."""

    def test_rejected_structure_rolls_back(self):
        xml = "<table><tr><td>a</td><td>b</td></tr><tr><td>c</td><td>d</td></tr></table>"
        table = parse_xml(xml)
        original_cell = table[0][0]
        editor = TreeEditor()
        anchor = editor.register_anchor(original_cell, 1)

        grid_model = TH_FLOW.build_grid_model(table)
        set_header_row_count(grid_model, 1)
        delete_column(grid_model, 1)

        applied = TH_FLOW.apply_to_tree(grid_model, table, editor, lambda node, e: False)

        assert applied is False
        assert as_jsonml(table) == as_jsonml(parse_xml(xml))
        assert table[0][0] is original_cell
        assert grid_model.get_cell_at_coordinates(0, 0).element is original_cell
        assert editor.get_anchor_position(anchor) == (original_cell, 1)
        assert not editor.in_overlay

    def test_failure_rolls_back_and_reraises(self):
        xml = "<table><tr><td>a</td></tr></table>"
        table = parse_xml(xml)
        editor = TreeEditor()
        grid_model = TH_FLOW.build_grid_model(table)
        insert_row(grid_model, 0)

        def explode(node, e):
            raise RuntimeError("schema check failed")

        with pytest.raises(RuntimeError):
            TH_FLOW.apply_to_tree(grid_model, table, editor, explode)

        assert as_jsonml(table) == as_jsonml(parse_xml(xml))
        assert not editor.in_overlay

    def test_completion_sees_synthesized_tree(self):
        seen = []

        def record(node, e):
            seen.append(etree.tostring(node))
            return True

        table = parse_xml("<table><tr><td/></tr></table>")
        grid_model = TH_FLOW.build_grid_model(table)
        insert_row(grid_model, 0, below=True)
        assert TH_FLOW.apply_to_tree(grid_model, table, TreeEditor(), record)
        assert seen == [b"<table><tr><td/></tr><tr><td/></tr></table>"]

    def test_commit_folds_into_enclosing_overlay(self):
        xml = "<table><tr><td>a</td></tr></table>"
        table = parse_xml(xml)
        editor = TreeEditor()
        outer = editor.begin_overlay()

        grid_model = TH_FLOW.build_grid_model(table)
        insert_row(grid_model, 0)
        assert TH_FLOW.apply_to_tree(grid_model, table, editor)
        assert len(table) == 2

        editor.discard(outer)
        assert as_jsonml(table) == as_jsonml(parse_xml(xml))
