from typing import Sequence
from io import BytesIO
from PyPDF2 import PdfReader, PdfWriter


PDF_MAGIC = b"%PDF-"


def is_pdf(data: bytes) -> bool:
    """Whether the data starts with the PDF file header."""
    return data[:len(PDF_MAGIC)] == PDF_MAGIC


def extract_page_range(pdf_bytes: bytes, start_page: int, end_page: int) -> bytes:
    """
    Copy an inclusive, 1-based page range into a new PDF.

    Args:
        pdf_bytes: The PDF file data as bytes.
        start_page: First page to keep (1-based).
        end_page: Last page to keep (1-based, inclusive).

    Returns:
        bytes: The new PDF.

    Raises:
        ValueError: If the range is empty or outside the document.
    """
    reader = PdfReader(BytesIO(pdf_bytes))
    num_pages = len(reader.pages)
    if start_page < 1 or end_page > num_pages or start_page > end_page:
        raise ValueError(f"Invalid page range {start_page}-{end_page} for a {num_pages}-page document")
    writer = PdfWriter()
    for page in reader.pages[start_page - 1:end_page]:
        writer.add_page(page)
    return _write(writer)


def merge_pdfs(documents: Sequence[bytes]) -> bytes:
    """
    Concatenate the pages of several PDFs, in order, into one document.

    Args:
        documents: PDF files as bytes.

    Returns:
        bytes: The merged PDF.
    """
    writer = PdfWriter()
    for pdf_bytes in documents:
        reader = PdfReader(BytesIO(pdf_bytes))
        for page in reader.pages:
            writer.add_page(page)
    return _write(writer)


def _write(writer: PdfWriter) -> bytes:
    buf = BytesIO()
    writer.write(buf)
    return buf.getvalue()
