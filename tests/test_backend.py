import pytest

from pdfxml_lib.backend import PdfMinerBackend
from pdfxml_lib.errors import DecodeError, MetadataError
from pdfxml_lib.normalizer import LayoutNormalizer

from conftest import make_pdf


@pytest.fixture
def backend():
    return PdfMinerBackend()


def test_open_rejects_bytes_without_pdf_header(backend):
    with pytest.raises(DecodeError):
        backend.open(b"this is just text, not a PDF")


def test_open_rejects_empty_input(backend):
    with pytest.raises(DecodeError):
        backend.open(b"")


def test_page_count_and_text_runs(backend, sample_pdf_bytes):
    with backend.open(sample_pdf_bytes) as handle:
        assert backend.page_count(handle) == 2
        page = backend.get_page(handle, 0)
        assert page.page_number == 1
        runs = backend.get_text_runs(page)

    by_text = {r.text: r for r in runs}
    title = by_text["Annual Report"]
    body = by_text["The committee met twice this year to review"]
    assert title.height == pytest.approx(24, abs=0.5)
    assert body.height == pytest.approx(12, abs=0.5)
    assert "Helvetica" in title.font_name
    # Top-down coordinates: the title sits above the first body line.
    assert title.y < body.y
    assert title.x == pytest.approx(72, abs=1)
    assert title.width > 0


def test_runs_split_on_font_size_change(backend):
    data = make_pdf([[(72, 700, 20, "Big"), (120, 700, 10, "small words")]])
    with backend.open(data) as handle:
        runs = backend.get_text_runs(backend.get_page(handle, 0))
    texts = sorted(r.text for r in runs)
    assert texts == ["Big", "small words"]


def test_mixed_sizes_on_one_baseline_form_one_line(backend):
    data = make_pdf([[(72, 700, 20, "Big"), (120, 700, 10, "small words here")]])
    with backend.open(data) as handle:
        runs = backend.get_text_runs(backend.get_page(handle, 0))
    # y is the baseline: 792 - 700.
    assert [r.y for r in runs] == [pytest.approx(92), pytest.approx(92)]
    lines = LayoutNormalizer().group_into_lines(runs)
    assert len(lines) == 1
    assert lines[0].text == "Big small words here"


def test_metadata_is_decoded(backend, sample_pdf_bytes):
    with backend.open(sample_pdf_bytes) as handle:
        info = backend.get_metadata(handle)
    assert info.author == "Jane Doe"
    assert info.producer == "pdfxml tests"
    assert info.creator is None


def test_missing_metadata_gives_empty_info(backend):
    with backend.open(make_pdf([[(72, 700, 12, "text")]])) as handle:
        info = backend.get_metadata(handle)
    assert (info.author, info.creator, info.producer) == (None, None, None)


def test_metadata_failure_is_wrapped(backend, sample_pdf_bytes, mocker):
    with backend.open(sample_pdf_bytes) as handle:
        mocker.patch.object(handle, "document", mocker.Mock(info=None))
        with pytest.raises(MetadataError):
            backend.get_metadata(handle)


def test_backends_do_not_share_state(sample_pdf_bytes):
    first, second = PdfMinerBackend(), PdfMinerBackend()
    with first.open(sample_pdf_bytes) as a, second.open(make_pdf([[(0, 0, 9, "x")]])) as b:
        assert first.page_count(a) == 2
        assert second.page_count(b) == 1
