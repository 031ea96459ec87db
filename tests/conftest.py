from io import BytesIO
from typing import Callable, Optional

import pytest
from PyPDF2 import PdfWriter
from PyPDF2.generic import ArrayObject, DictionaryObject, NameObject, NumberObject


def make_pdf(num_pages: int, title: Optional[str] = None) -> bytes:
    writer = PdfWriter()
    for _ in range(num_pages):
        writer.add_blank_page(width=612, height=792)
    if title is not None:
        writer.add_metadata({"/Title": title})
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


def make_bookmarked_pdf(num_pages: int = 6) -> bytes:
    """
    A PDF whose catalog carries more than pages: roman page labels for the first two
    pages, a page mode, and an outline with one item ("Preface" on the second page).
    """
    writer = PdfWriter()
    for _ in range(num_pages):
        writer.add_blank_page(width=612, height=792)
    writer._root_object[NameObject("/PageLabels")] = DictionaryObject({
        NameObject("/Nums"): ArrayObject([
            NumberObject(0),
            DictionaryObject({NameObject("/S"): NameObject("/r")}),
            NumberObject(2),
            DictionaryObject({NameObject("/S"): NameObject("/D")}),
        ]),
    })
    writer._root_object[NameObject("/PageMode")] = NameObject("/UseOutlines")
    writer.add_outline_item("Preface", 1)
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.fixture
def pdf_factory() -> Callable[..., bytes]:
    return make_pdf


@pytest.fixture
def ten_page_pdf() -> bytes:
    return make_pdf(10, title="Original Title")


@pytest.fixture
def bookmarked_pdf() -> bytes:
    return make_bookmarked_pdf()
