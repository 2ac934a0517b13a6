# --- pdfxml_lib/constants.py ---
"""
pdfxml_lib/constants.py: Heuristic thresholds and patterns for the conversion engine.
"""
import re

# --- LAYOUT ---
# Runs whose baselines differ by less than this are on the same row.
ROW_TOLERANCE = 5.0

# --- STRUCTURE ---
H1_RATIO = 1.5
H2_RATIO = 1.2
# A vertical gap larger than avg font size * GAP_RATIO closes a paragraph.
GAP_RATIO = 1.5
SHORT_LINE_LENGTH = 5

LIST_ITEM_PATTERNS = (
    re.compile(r"^[\s•\-*\d]+[.)]\s"),
    re.compile(r"^[⚫•◦○♦⬤▪▫◆◇■□●]\s"),
    re.compile(r"^\s*\d+[.)]\s"),
)
FIELD_LABEL_PATTERN = re.compile(r"^[A-Z][a-z]*:")

# --- XML ---
UNKNOWN = "Unknown"
XML_PROLOGUE = '<?xml version="1.0" encoding="UTF-8"?>'
# Paragraph text outside Basic Latin, Latin-1 and Latin Extended-A/B is dropped.
UNSAFE_PARAGRAPH_CHARS = re.compile(r"[^\x20-\x7E\u00A0-\u024F]")
LINE_SEPARATORS = re.compile(r"[\u2028\u2029]")
WHITESPACE_RUN = re.compile(r"\s+")
# Characters XML 1.0 cannot carry at all, not even inside CDATA.
XML_ILLEGAL_CHARS = re.compile(
    r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]"
)

DECODE_ERROR_MESSAGE = "Failed to parse PDF. Please try again with a different file."
NO_PAGES_MESSAGE = "The PDF contains no pages."
