# --- pdfxml_lib/normalizer.py ---
"""
pdfxml_lib/normalizer.py: Contains the LayoutNormalizer, which orders a page's
text runs into reading-order lines.
"""
import logging
from functools import cmp_to_key

from .constants import ROW_TOLERANCE
from .models import Line

log_layout = logging.getLogger("pdfxml.layout")


class LayoutNormalizer:
    """
    Groups unordered TextRuns into Lines by vertical proximity.
    Args:
        row_tolerance (float): Maximum |dy| for two runs to share a row.
    """

    def __init__(self, row_tolerance=ROW_TOLERANCE):
        self.row_tolerance = row_tolerance

    def sort_runs(self, runs):
        """Sorts runs top-to-bottom, left-to-right within a row. Stable."""

        def compare(a, b):
            if abs(a.y - b.y) < self.row_tolerance:
                return (a.x > b.x) - (a.x < b.x)
            return (a.y > b.y) - (a.y < b.y)

        return sorted(runs, key=cmp_to_key(compare))

    def group_into_lines(self, runs):
        """Sweeps sorted runs, starting a new line whenever a run leaves the anchor's row."""
        lines, current, anchor_y = [], [], None
        for run in self.sort_runs(runs):
            if anchor_y is None or abs(run.y - anchor_y) < self.row_tolerance:
                if anchor_y is None:
                    anchor_y = run.y
                current.append(run)
                continue
            lines.append(Line(current))
            current, anchor_y = [run], run.y
        if current:
            lines.append(Line(current))
        log_layout.debug("Grouped %d run(s) into %d line(s).", len(runs), len(lines))
        return lines
