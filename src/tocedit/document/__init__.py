from tocedit.document.pdf_document import PdfDocument
from tocedit.document.page_ops import is_pdf, extract_page_range, merge_pdfs
