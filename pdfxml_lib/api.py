# --- pdfxml_lib/api.py ---
"""
pdfxml_lib/api.py: The conversion entry points.

convert() drives the backend, normalizer, classifier and serializer once per
page and returns the finished XML together with the page count. Any failure
surfaces as a single ConversionError; callers never see partial output.
"""
import logging
import os
from datetime import datetime, timezone

from .backend import PdfMinerBackend
from .classifier import StructureClassifier
from .constants import DECODE_ERROR_MESSAGE, NO_PAGES_MESSAGE, WHITESPACE_RUN
from .errors import ConversionError, PageExtractionError
from .models import ConversionDocument, ConversionResult, DocumentInfo, PageContent
from .normalizer import LayoutNormalizer
from .serializer import XmlSerializer

log = logging.getLogger("pdfxml.convert")


def build_raw_content(sorted_runs) -> str:
    """The page's run texts in reading order, whitespace-collapsed."""
    text = " ".join(run.text for run in sorted_runs)
    return WHITESPACE_RUN.sub(" ", text).strip()


def extract_page_content(runs, page_number, normalizer=None, classifier=None) -> PageContent:
    """Runs the normalizer and classifier over one page's text runs."""
    normalizer = normalizer or LayoutNormalizer()
    classifier = classifier or StructureClassifier()
    lines = normalizer.group_into_lines(runs)
    headers, paragraphs = classifier.classify(lines)
    return PageContent(
        page_number=page_number,
        headers=headers,
        paragraphs=paragraphs,
        raw_content=build_raw_content(normalizer.sort_runs(runs)),
    )


def _read_metadata(backend, handle) -> DocumentInfo:
    """Reads document info, falling back to empty values on any failure."""
    try:
        return backend.get_metadata(handle) or DocumentInfo()
    except Exception as e:
        # Metadata never decides whether a conversion succeeds.
        log.warning("Could not read PDF metadata, using defaults: %s", e)
        return DocumentInfo()


def convert(
    file_bytes: bytes,
    file_name: str,
    file_size_bytes: int | None = None,
    backend=None,
    xsd_schema: str | None = None,
    skip_bad_pages: bool = False,
    normalizer=None,
    classifier=None,
    serializer=None,
) -> ConversionResult:
    """
    Converts PDF bytes into a structured XML document.
    Args:
        file_bytes: The raw PDF content.
        file_name: Name recorded in the document's <info> block.
        file_size_bytes: Size recorded in <info>; defaults to len(file_bytes).
        backend: A PDF decoding backend; a fresh PdfMinerBackend if omitted.
        xsd_schema: Accepted for interface compatibility. It does not alter
            the output structure.
        skip_bad_pages: Emit an empty page instead of aborting when a page's
            text cannot be read.
    Returns:
        ConversionResult with the XML text and the page count.
    Raises:
        ConversionError: The PDF could not be decoded or has no pages.
    """
    backend = backend or PdfMinerBackend()
    normalizer = normalizer or LayoutNormalizer()
    classifier = classifier or StructureClassifier()
    serializer = serializer or XmlSerializer()
    if file_size_bytes is None:
        file_size_bytes = len(file_bytes or b"")
    if xsd_schema:
        log.debug("Schema '%s' requested; output structure is fixed.", xsd_schema)

    log.info("Converting '%s' (%d bytes)...", file_name, file_size_bytes)
    try:
        with backend.open(file_bytes) as handle:
            page_count = backend.page_count(handle)
            if page_count < 1:
                raise ConversionError(NO_PAGES_MESSAGE)
            info = _read_metadata(backend, handle)

            pages = []
            for index in range(page_count):
                page_number = index + 1
                try:
                    runs = backend.get_text_runs(backend.get_page(handle, index))
                except PageExtractionError as e:
                    if not skip_bad_pages:
                        raise
                    log.warning("Skipping unreadable page %d: %s", page_number, e)
                    pages.append(PageContent(page_number=page_number))
                    continue
                log.info("Structuring page %d/%d...", page_number, page_count)
                pages.append(extract_page_content(runs, page_number, normalizer, classifier))

            document = ConversionDocument(
                file_name=file_name,
                file_size_bytes=file_size_bytes,
                page_count=page_count,
                info=info,
                conversion_date=datetime.now(timezone.utc),
                pages=tuple(pages),
            )
            xml = serializer.serialize_document(document)
    except ConversionError:
        raise
    except Exception as e:
        log.error("Conversion of '%s' failed: %s", file_name, e, exc_info=True)
        raise ConversionError(DECODE_ERROR_MESSAGE) from e

    log.info("Converted '%s': %d page(s).", file_name, page_count)
    return ConversionResult(xml=xml, page_count=page_count)


def convert_file(pdf_path: str, **kwargs) -> ConversionResult:
    """Reads a PDF from disk and converts it."""
    if not os.path.exists(pdf_path):
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")
    with open(pdf_path, "rb") as f:
        data = f.read()
    return convert(data, os.path.basename(pdf_path), len(data), **kwargs)
