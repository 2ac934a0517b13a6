# --- pdfxml_lib/serializer.py ---
"""
pdfxml_lib/serializer.py: Turns PageContent and ConversionDocument objects into XML text.

The markup is assembled as strings rather than through an element tree so
that the page text can be wrapped in CDATA and the exact escaping order is
under our control.
"""
import logging
import os
from datetime import timezone
from xml.dom import minidom

from .constants import (
    LINE_SEPARATORS,
    UNKNOWN,
    UNSAFE_PARAGRAPH_CHARS,
    WHITESPACE_RUN,
    XML_ILLEGAL_CHARS,
    XML_PROLOGUE,
)
from .errors import SerializationError

log_xml = logging.getLogger("pdfxml.xml")

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
)


def escape_xml(text: str) -> str:
    """Escapes the five XML special characters, ampersand first."""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def strip_illegal_chars(text: str) -> str:
    """Removes characters that XML 1.0 does not allow anywhere in a document."""
    return XML_ILLEGAL_CHARS.sub("", text)


def clean_paragraph(text: str) -> str:
    """Normalizes a paragraph for output. Idempotent.

    Line separators and characters outside the safe Latin range become
    spaces, then whitespace runs collapse to one space and the ends are
    trimmed.
    """
    text = LINE_SEPARATORS.sub(" ", text)
    text = UNSAFE_PARAGRAPH_CHARS.sub(" ", text)
    return WHITESPACE_RUN.sub(" ", text).strip()


def wrap_cdata(text: str) -> str:
    """Wraps text in a CDATA section that cannot be terminated early."""
    return f"<![CDATA[{strip_illegal_chars(text).replace(']]>', ']]&gt;')}]]>"


def format_timestamp(dt) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


class XmlSerializer:
    """Emits page fragments and the full document."""

    def serialize_page(self, page) -> str:
        """Renders one <page> element: headers, paragraphs, then raw content."""
        parts = [f'<page number="{page.page_number}">']
        if page.headers:
            parts.append("<headers>")
            for header in page.headers:
                if header.level not in (1, 2):
                    raise SerializationError(f"Invalid heading level: {header.level}")
                text = WHITESPACE_RUN.sub(" ", strip_illegal_chars(header.text)).strip()
                text = escape_xml(text)
                parts.append(f"<h{header.level}>{text}</h{header.level}>")
            parts.append("</headers>")

        parts.append("<paragraphs>")
        for paragraph in page.paragraphs:
            cleaned = clean_paragraph(paragraph)
            if cleaned:
                parts.append(f"<p>{escape_xml(cleaned)}</p>")
        parts.append("</paragraphs>")

        parts.append(f"<rawContent>{wrap_cdata(page.raw_content)}</rawContent>")
        parts.append("</page>")
        log_xml.debug(
            "Page %d: %d header(s), %d paragraph(s).",
            page.page_number,
            len(page.headers),
            len(page.paragraphs),
        )
        return "".join(parts)

    def serialize_document(self, document) -> str:
        """Renders the prologue, <info> block and all pages in page-number order."""
        pages = sorted(document.pages, key=lambda p: p.page_number)
        page_xml = "\n    ".join(self.serialize_page(p) for p in pages)
        info = document.info
        date = format_timestamp(document.conversion_date)
        return (
            f"{XML_PROLOGUE}\n"
            "<document>\n"
            "  <info>\n"
            f"    <filename>{self._text(document.file_name)}</filename>\n"
            f"    <filesize>{document.file_size_bytes} bytes</filesize>\n"
            f"    <pages>{document.page_count}</pages>\n"
            f"    <author>{self._text(info.author or UNKNOWN)}</author>\n"
            f"    <creator>{self._text(info.creator or UNKNOWN)}</creator>\n"
            f"    <producer>{self._text(info.producer or UNKNOWN)}</producer>\n"
            f"    <conversionDate>{date}</conversionDate>\n"
            "  </info>\n"
            "  <content>\n"
            f"    {page_xml}\n"
            "  </content>\n"
            "</document>"
        )

    @staticmethod
    def _text(value) -> str:
        return escape_xml(strip_illegal_chars(str(value)))


# --- CALLER-SIDE CONVENIENCE ---
def xml_file_name(file_name: str) -> str:
    """Derives the download name: report.pdf -> report.xml."""
    stem, _ = os.path.splitext(os.path.basename(file_name))
    return f"{stem or 'document'}.xml"


def pretty_print(xml_text: str, indent: str = "  ") -> str:
    """Re-indents an XML document for display. Text content is unchanged."""
    dom = minidom.parseString(xml_text.encode("utf-8"))
    pretty = dom.toprettyxml(indent=indent, encoding="UTF-8").decode("utf-8")
    return "\n".join(line for line in pretty.splitlines() if line.strip())
