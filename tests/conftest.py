import pytest


@pytest.fixture
def make_pdf():
    """Build a PDF in memory; ``pages`` is a list of lists of ``(x, y, text)``."""

    fitz = pytest.importorskip("fitz")

    def _make(pages, width=300, height=400, fontsize=11):
        doc = fitz.open()
        for lines in pages:
            page = doc.new_page(width=width, height=height)
            for x, y, text in lines:
                page.insert_text((x, y), text, fontsize=fontsize)
        data = doc.tobytes()
        doc.close()
        return data

    return _make
