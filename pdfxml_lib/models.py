# --- pdfxml_lib/models.py ---
"""
pdfxml_lib/models.py: Data models for a PDF page's text runs and its recovered structure.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

log_structure = logging.getLogger("pdfxml.structure")


# --- PHYSICAL LAYOUT ---
@dataclass(frozen=True)
class TextRun:
    """A single chunk of text emitted by the PDF backend, with its position and font.

    Coordinates are top-down: y grows towards the bottom of the page and marks
    the baseline of the run. height is the font size signal.
    """

    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0
    font_name: str = ""
    has_eol: bool = False


class Line:
    """A left-to-right ordered group of TextRuns sharing one vertical position."""

    def __init__(self, runs):
        self.runs: List[TextRun] = sorted(runs, key=lambda r: r.x)

    @property
    def y(self) -> float:
        """The vertical position of the line, taken from its leftmost run."""
        return self.runs[0].y if self.runs else 0.0

    @property
    def text(self) -> str:
        """The run texts joined with single spaces and trimmed."""
        return " ".join(run.text for run in self.runs).strip()

    @property
    def max_height(self) -> float:
        """The largest run height on the line, the line's font size signal."""
        return max((run.height for run in self.runs), default=0.0)

    def __len__(self):
        return len(self.runs)

    def __iter__(self):
        return iter(self.runs)

    def __repr__(self):
        return f"Line(y={self.y:.2f}, text={self.text!r})"


# --- LOGICAL STRUCTURE ---
@dataclass(frozen=True)
class Header:
    """A heading line, level 1 or 2."""

    text: str
    level: int


@dataclass
class PageContent:
    """The recovered structure and verbatim text of one page."""

    page_number: int
    headers: List[Header] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    raw_content: str = ""


@dataclass(frozen=True)
class DocumentInfo:
    """Document metadata as read from the PDF info dictionary."""

    author: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None


@dataclass(frozen=True)
class ConversionDocument:
    """Everything the serializer needs to emit one XML document."""

    file_name: str
    file_size_bytes: int
    page_count: int
    info: DocumentInfo
    conversion_date: datetime
    pages: tuple = ()


@dataclass(frozen=True)
class ConversionResult:
    """The value returned to callers of convert()."""

    xml: str
    page_count: int


# --- PARAGRAPH ACCUMULATOR ---
IDLE, BUILDING = "idle", "building"


@dataclass(frozen=True)
class ParagraphState:
    """The classifier's paragraph buffer as an explicit tagged state."""

    state: str = IDLE
    buffer: tuple = ()

    def append(self, text: str) -> "ParagraphState":
        """Returns a building state with text appended to the buffer."""
        return ParagraphState(BUILDING, self.buffer + (text,))

    def flush(self):
        """Returns (paragraph text or None, idle state)."""
        if self.state == IDLE or not self.buffer:
            return None, ParagraphState()
        log_structure.debug("Flushing paragraph of %d line(s).", len(self.buffer))
        return " ".join(self.buffer), ParagraphState()
