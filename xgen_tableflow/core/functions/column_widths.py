# xgen_tableflow/core/functions/column_widths.py
"""
Column Widths - Width Arithmetic for Column Specifications

Pure functions converting between the column width encodings used by
column specification nodes and the fractions the grid mutations work with.

Encodings:
    "20%"   percentual width
    "2*"    relative (proportional) width
    ""      no width tracking

================================================================================
OPERATIONS
================================================================================

| Operation                | Used by                                  |
|--------------------------|------------------------------------------|
| width_to_html_width()    | rendering a width as a share of the total |
| widths_to_fractions()    | redistributing after insert/delete       |
| fractions_to_widths()    | writing redistributed fractions back     |
| add_widths()             | joining two columns                      |
| divide_by_two()          | splitting a column                       |
| normalize_column_widths()| tidying widths after a structural change |

Under ColumnWidthType.NONE every operation producing an encoding returns "".
"""
import logging
import re
from enum import Enum
from typing import List, Optional, Sequence

logger = logging.getLogger("xgen_tableflow.columns")

# Leading number of a width, unit ignored: "20%", "2*", "12.5%", "50", "50px", ".5*"
WIDTH_RE = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)")


class ColumnWidthType(Enum):
    """Column width arithmetic mode."""
    PERCENTUAL = "percentual"
    RELATIVE = "relative"
    NONE = "none"


def parse_width(width: Optional[str]) -> Optional[float]:
    """
    Parse the leading number of a width such as '20%', '2*' or '50px'.

    The unit is ignored. Returns None when the width does not start with a
    non-negative number.
    """
    if not width:
        return None
    match = WIDTH_RE.match(width)
    if match is None:
        return None
    return float(match.group(1))


def format_number(value: float) -> str:
    """Format a number without trailing zeros ('25' rather than '25.0')."""
    text = f"{value:.4f}".rstrip("0").rstrip(".")
    return text if text not in ("", "-0") else "0"


class ColumnWidthStrategy:
    """
    Width arithmetic bound to one ColumnWidthType.

    Usage:
        strategy = ColumnWidthStrategy(ColumnWidthType.PERCENTUAL)
        strategy.add_widths("20%", "30%")          # '50%'
        strategy.divide_by_two("20%")              # '10%'
        strategy.normalize_column_widths(["1%", "3%"])  # ['25%', '75%']
    """

    def __init__(self, width_type: ColumnWidthType = ColumnWidthType.NONE):
        self.width_type = width_type

    @property
    def tracks_widths(self) -> bool:
        return self.width_type is not ColumnWidthType.NONE

    @property
    def unit(self) -> str:
        return "%" if self.width_type is ColumnWidthType.PERCENTUAL else "*"

    def width_to_html_width(self, width: str, widths: Sequence[str]) -> str:
        """Express one width as a percentage of the sum of all widths."""
        if not self.tracks_widths:
            return ""

        proportion = parse_width(width) or 1
        total = sum(parse_width(other) or 1 for other in widths)
        if not total:
            return ""

        return f"{format_number(100 * proportion / total)}%"

    def add_widths(self, width1: str, width2: str) -> str:
        """Sum two widths; an unparsable width counts as zero."""
        if not self.tracks_widths:
            return ""

        proportion = (parse_width(width1) or 0) + (parse_width(width2) or 0)
        if proportion == 0:
            return ""

        return format_number(proportion) + self.unit

    def divide_by_two(self, width: str) -> str:
        """Halve a width, used when one column becomes two."""
        if not self.tracks_widths:
            return ""

        proportion = parse_width(width)
        if not proportion:
            return ""

        return format_number(proportion / 2) + self.unit

    def widths_to_fractions(self, widths: Sequence[str]) -> List[float]:
        """
        Convert widths to fractions of their total.

        If any width fails to parse the total is split evenly over all
        columns instead of reporting an error.
        """
        if not widths:
            return []

        parsed = [parse_width(width) for width in widths]
        total = sum(value for value in parsed if value is not None)

        if any(value is None for value in parsed) or total <= 0:
            logger.debug(f"Unparsable column widths {list(widths)}, splitting evenly")
            return [1 / len(widths)] * len(widths)

        return [value / total for value in parsed]

    def fractions_to_widths(self, fractions: Sequence[float]) -> List[str]:
        """Convert fractions back to widths in this strategy's unit."""
        if not self.tracks_widths:
            return ["" for _ in fractions]

        return [format_number(round(fraction * 100, 2)) + self.unit for fraction in fractions]

    def normalize_column_widths(self, widths: Sequence[str]) -> List[str]:
        """
        Tidy a full set of column widths.

        percentual: rescaled so the columns add up to 100%.
        relative:   each width rewritten as a clean 'N*'.
        """
        if not self.tracks_widths:
            return ["" for _ in widths]
        if not widths:
            return []

        numbers = [parse_width(width) for width in widths]
        if any(number is None for number in numbers):
            logger.debug(f"Unparsable column widths {list(widths)}, splitting evenly")
            if self.width_type is ColumnWidthType.RELATIVE:
                return ["1*" for _ in widths]
            return self.fractions_to_widths([1 / len(widths)] * len(widths))

        if self.width_type is ColumnWidthType.RELATIVE:
            return [f"{format_number(number)}*" for number in numbers]

        total = sum(numbers)
        if total <= 0:
            return self.fractions_to_widths([1 / len(widths)] * len(widths))

        return [f"{format_number(round(number / total, 4) * 100)}%" for number in numbers]


def create_column_width_strategy(width_type: ColumnWidthType = ColumnWidthType.NONE) -> ColumnWidthStrategy:
    """Factory function to create a ColumnWidthStrategy."""
    return ColumnWidthStrategy(width_type)


__all__ = [
    'ColumnWidthType',
    'ColumnWidthStrategy',
    'create_column_width_strategy',
    'parse_width',
    'format_number',
]
