# --- pdfxml_lib/errors.py ---
"""
pdfxml_lib/errors.py: Exceptions raised by the conversion engine.

Only ConversionError ever reaches callers of pdfxml_lib.api.convert; the
others are raised internally and normalized at the orchestrator boundary.
"""


class PdfXmlError(Exception):
    """Base class for internal engine failures."""


class DecodeError(PdfXmlError):
    """The PDF bytes could not be opened or parsed by the backend."""


class MetadataError(PdfXmlError):
    """The document info dictionary could not be read."""


class PageExtractionError(PdfXmlError):
    """A single page's text content could not be read."""

    def __init__(self, page_number, message):
        super().__init__(f"Page {page_number}: {message}")
        self.page_number = page_number


class SerializationError(PdfXmlError):
    """Raised when internal data cannot be turned into XML. Indicates a bug."""


class ConversionError(Exception):
    """The single, user-facing failure of a conversion."""

    def __init__(self, message):
        super().__init__(message)
        self.message = message
