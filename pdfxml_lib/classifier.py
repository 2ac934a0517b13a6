# --- pdfxml_lib/classifier.py ---
"""
pdfxml_lib/classifier.py: Contains the StructureClassifier, which turns ordered
lines into headings and paragraphs using font-size statistics.
"""
import logging

from .constants import (
    FIELD_LABEL_PATTERN,
    GAP_RATIO,
    H1_RATIO,
    H2_RATIO,
    LIST_ITEM_PATTERNS,
    SHORT_LINE_LENGTH,
)
from .models import Header, ParagraphState

log_structure = logging.getLogger("pdfxml.structure")


def is_list_item(text: str) -> bool:
    """True if the text starts with a bullet glyph or a list numbering."""
    return any(p.match(text) for p in LIST_ITEM_PATTERNS)


class StructureClassifier:
    """
    Classifies each line of a page as a heading, list item, block end or
    paragraph continuation. Headings are lines whose largest run is clearly
    bigger than the page's average run height; everything else is prose,
    split into paragraphs with short-line, field-label and gap heuristics.
    Args:
        h1_ratio (float): Height/average ratio above which a heading is level 1.
        h2_ratio (float): Height/average ratio above which a line is a heading.
        gap_ratio (float): Gap/average ratio above which a paragraph ends.
        short_line_length (int): Lines shorter than this end a paragraph.
    """

    def __init__(
        self,
        h1_ratio=H1_RATIO,
        h2_ratio=H2_RATIO,
        gap_ratio=GAP_RATIO,
        short_line_length=SHORT_LINE_LENGTH,
    ):
        self.h1_ratio = h1_ratio
        self.h2_ratio = h2_ratio
        self.gap_ratio = gap_ratio
        self.short_line_length = short_line_length

    @staticmethod
    def average_font_size(lines) -> float:
        """Mean of all positive run heights on the page, 0 if there are none."""
        sizes = [run.height for line in lines for run in line if run.height > 0]
        return sum(sizes) / len(sizes) if sizes else 0.0

    def classify(self, lines):
        """Returns (headers, paragraphs) for a page's ordered lines."""
        page_avg = self.average_font_size(lines)
        log_structure.debug("Average font size: %.2f over %d line(s).", page_avg, len(lines))
        headers, paragraphs, state = [], [], ParagraphState()

        def emit(text):
            if text is not None:
                paragraphs.append(text)

        for i, line in enumerate(lines):
            text = line.text
            if not text:
                continue
            # Without any positive height, compare the line against itself.
            avg = page_avg or line.max_height
            next_line = lines[i + 1] if i + 1 < len(lines) else None

            level = self._heading_level(line.max_height, avg)
            if level:
                flushed, state = state.flush()
                emit(flushed)
                log_structure.debug("H%d: %s", level, text)
                headers.append(Header(text, level))
            elif is_list_item(text):
                flushed, state = state.flush()
                emit(flushed)
                log_structure.debug("List item: %s", text)
                paragraphs.append(text)
            elif self._ends_block(text, line, next_line, avg):
                flushed, state = state.append(text).flush()
                emit(flushed)
            else:
                state = state.append(text)

        flushed, state = state.flush()
        emit(flushed)
        return headers, paragraphs

    def _heading_level(self, height, avg):
        """Returns 1 or 2 for a heading-sized line, None otherwise."""
        if height <= 0 or height <= avg * self.h2_ratio:
            return None
        return 1 if height > avg * self.h1_ratio else 2

    def _ends_block(self, text, line, next_line, avg):
        """Short lines, field labels and large gaps below a line close the paragraph."""
        if len(text) < self.short_line_length or FIELD_LABEL_PATTERN.match(text):
            return True
        if next_line is not None:
            return abs(line.y - next_line.y) > avg * self.gap_ratio
        return False
