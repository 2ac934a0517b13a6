# --- pdfxml_lib/backend.py ---
"""
pdfxml_lib/backend.py: The PDF decoding backend, built on pdfminer.six.

The backend is a plain object constructed by the caller and handed to
convert(); it keeps no module-level state, so independent conversions never
share a parser, a resource manager or a cached document.
"""
import logging
from io import BytesIO

from pdfminer.converter import PDFPageAggregator
from pdfminer.layout import LAParams, LTAnno, LTChar, LTTextLine
from pdfminer.pdfdocument import PDFDocument
from pdfminer.pdfinterp import PDFPageInterpreter, PDFResourceManager
from pdfminer.pdfpage import PDFPage
from pdfminer.pdfparser import PDFParser
from pdfminer.pdftypes import resolve1
from pdfminer.psparser import PSLiteral
from pdfminer.utils import decode_text

from .errors import DecodeError, MetadataError, PageExtractionError
from .models import DocumentInfo, TextRun

log = logging.getLogger("pdfxml.backend")

# The PDF header may be preceded by junk, but only within the first KiB.
HEADER_SEARCH_WINDOW = 1024


class PdfHandle:
    """An opened PDF: the parsed document and its page objects, in order."""

    def __init__(self, stream, document, pages):
        self.stream, self.document, self.pages = stream, document, pages

    def close(self):
        self.stream.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class PageHandle:
    """A single page of an opened PDF. page_number is 1-based."""

    def __init__(self, pdf_page, page_number):
        self.pdf_page, self.page_number = pdf_page, page_number


class PdfMinerBackend:
    """
    Decodes PDF bytes into positioned text runs.
    Args:
        laparams (LAParams): Layout analysis parameters handed to pdfminer.
        password (str): Password for encrypted documents.
    """

    def __init__(self, laparams=None, password=""):
        self.laparams = laparams or LAParams()
        self.password = password

    def open(self, data: bytes) -> PdfHandle:
        """Parses the document structure. Raises DecodeError on failure."""
        if not data or b"%PDF-" not in data[:HEADER_SEARCH_WINDOW]:
            raise DecodeError("Input does not carry a PDF header.")
        stream = BytesIO(data)
        try:
            parser = PDFParser(stream)
            document = PDFDocument(parser, password=self.password)
            pages = list(PDFPage.create_pages(document))
        except Exception as e:
            stream.close()
            raise DecodeError(f"pdfminer could not parse the document: {e}") from e
        log.debug("Opened PDF with %d page(s).", len(pages))
        return PdfHandle(stream, document, pages)

    def page_count(self, handle: PdfHandle) -> int:
        return len(handle.pages)

    def get_page(self, handle: PdfHandle, index: int) -> PageHandle:
        """Returns the page at a 0-based index."""
        return PageHandle(handle.pages[index], index + 1)

    def get_text_runs(self, page: PageHandle) -> list[TextRun]:
        """Lays out a page and splits its text lines into same-font runs."""
        try:
            rsrcmgr = PDFResourceManager()
            device = PDFPageAggregator(rsrcmgr, laparams=self.laparams)
            interpreter = PDFPageInterpreter(rsrcmgr, device)
            interpreter.process_page(page.pdf_page)
            layout = device.get_result()
        except Exception as e:
            raise PageExtractionError(page.page_number, str(e)) from e

        runs = []
        for line in self._find_elements_by_type(layout, LTTextLine):
            runs.extend(self._split_line_into_runs(line, layout.y1))
        log.debug("Page %d: extracted %d text run(s).", page.page_number, len(runs))
        return runs

    def get_metadata(self, handle: PdfHandle) -> DocumentInfo:
        """Reads author/creator/producer. Raises MetadataError on failure."""
        try:
            info = {}
            for entry in handle.document.info:
                info.update(resolve1(entry) or {})
            return DocumentInfo(
                author=self._decode_info_value(info.get("Author")),
                creator=self._decode_info_value(info.get("Creator")),
                producer=self._decode_info_value(info.get("Producer")),
            )
        except Exception as e:
            raise MetadataError(f"Could not read document info: {e}") from e

    def _find_elements_by_type(self, obj, t):
        """Recursively finds all layout elements of a specific type."""
        e = []
        if isinstance(obj, t):
            e.append(obj)
        if hasattr(obj, "_objs"):
            for child in obj:
                e.extend(self._find_elements_by_type(child, t))
        return e

    def _split_line_into_runs(self, line, page_top):
        """Groups a line's characters into runs of one font name and size."""
        runs, chars, texts = [], [], []

        def flush(has_eol=False):
            text = "".join(texts).strip()
            if chars and text:
                runs.append(
                    TextRun(
                        text=text,
                        x=chars[0].x0,
                        y=page_top - chars[0].matrix[5],
                        width=chars[-1].x1 - chars[0].x0,
                        height=chars[0].size,
                        font_name=chars[0].fontname,
                        has_eol=has_eol,
                    )
                )
            chars.clear()
            texts.clear()

        for obj in line:
            if isinstance(obj, LTChar):
                if chars and (
                    obj.fontname != chars[0].fontname or abs(obj.size - chars[0].size) > 0.01
                ):
                    flush()
                chars.append(obj)
                texts.append(obj.get_text())
            elif isinstance(obj, LTAnno):
                if obj.get_text() == "\n":
                    flush(has_eol=True)
                else:
                    texts.append(obj.get_text())
        flush()
        return runs

    @staticmethod
    def _decode_info_value(value):
        """Turns a PDF info dictionary value into a plain string, or None."""
        value = resolve1(value)
        if value is None:
            return None
        if isinstance(value, PSLiteral):
            value = value.name
        if isinstance(value, bytes):
            value = decode_text(value)
        text = str(value).strip()
        return text or None
