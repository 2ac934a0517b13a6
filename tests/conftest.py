import pytest

from pdfxml_lib.models import Line, TextRun


def _pdf_string(text):
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages, info=None):
    """
    Builds a small, valid PDF using the standard Helvetica font.
    pages: one list per page of (x, baseline_y, font_size, text) tuples, in
        PDF user space (origin bottom-left, 612x792 points).
    info: optional dict of document info entries (e.g. {"Author": "Jane"}).
    """
    objects = []

    def add(body):
        objects.append(body)
        return len(objects)

    catalog = add(None)
    pages_obj = add(None)
    font = add(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    kids = []
    for items in pages:
        ops = []
        for x, y, size, text in items:
            ops.append(f"BT /F1 {size} Tf {x} {y} Td ({_pdf_string(text)}) Tj ET")
        stream = "\n".join(ops).encode("latin-1")
        content = add(
            b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
        )
        kids.append(
            add(
                (
                    f"<< /Type /Page /Parent {pages_obj} 0 R /MediaBox [0 0 612 792] "
                    f"/Resources << /Font << /F1 {font} 0 R >> >> /Contents {content} 0 R >>"
                ).encode("latin-1")
            )
        )
    objects[catalog - 1] = f"<< /Type /Catalog /Pages {pages_obj} 0 R >>".encode()
    objects[pages_obj - 1] = (
        f"<< /Type /Pages /Kids [{' '.join(f'{k} 0 R' for k in kids)}] "
        f"/Count {len(kids)} >>"
    ).encode()
    info_ref = None
    if info:
        entries = " ".join(f"/{k} ({_pdf_string(v)})" for k, v in info.items())
        info_ref = add(f"<< {entries} >>".encode("latin-1"))

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_at = len(out)
    out += b"xref\n0 %d\n0000000000 65535 f \n" % (len(objects) + 1)
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    trailer = f"<< /Size {len(objects) + 1} /Root {catalog} 0 R"
    if info_ref:
        trailer += f" /Info {info_ref} 0 R"
    out += f"trailer\n{trailer} >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


def run(text, x=0.0, y=0.0, height=10.0, width=None):
    """Shorthand for a TextRun in top-down page coordinates."""
    return TextRun(
        text=text,
        x=x,
        y=y,
        width=len(text) * 5.0 if width is None else width,
        height=height,
        font_name="Helvetica",
    )


def lines_of(*specs):
    """Builds one single-run Line per (text, y, height) tuple."""
    return [Line([run(text, y=y, height=height)]) for text, y, height in specs]


@pytest.fixture
def sample_pdf_bytes():
    """Two pages: a large title over four body lines, then a list page."""
    return make_pdf(
        [
            [
                (72, 720, 24, "Annual Report"),
                (72, 680, 12, "The committee met twice this year to review"),
                (72, 666, 12, "the budget and the plans for the new library"),
                (72, 652, 12, "building, which opens next spring with a"),
                (72, 638, 12, "public reading room & a cafe."),
            ],
            [
                (72, 720, 12, "1. Approve the budget"),
                (72, 706, 12, "2. Elect a new treasurer"),
            ],
        ],
        info={"Author": "Jane Doe", "Producer": "pdfxml tests"},
    )


@pytest.fixture
def sample_pdf_path(tmp_path, sample_pdf_bytes):
    path = tmp_path / "report.pdf"
    path.write_bytes(sample_pdf_bytes)
    return str(path)
