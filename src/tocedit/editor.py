from pathlib import Path
from typing import List, Optional, Union

from globalog import LOG

from tocedit.config import SaveConfig
from tocedit.document.pdf_document import PdfDocument
from tocedit.extraction.ai_config import AiExtractionConfig
from tocedit.extraction.ai_extractor import AiTocExtractor
from tocedit.extraction.heuristic import detect_toc_structure
from tocedit.outline.saver import OutlineSaver, SaveResult
from tocedit.toc.models import TableOfContents, TocDraft


def open_pdf(source: Union[str, Path, bytes]) -> PdfDocument:
    """
    Open a PDF from a path or raw bytes.

    Args:
        source: Path to a PDF file, or its content

    Returns:
        PdfDocument: The parsed document

    Raises:
        InvalidInputFileError: If the content is not a readable PDF
    """
    if isinstance(source, bytes):
        return PdfDocument.from_bytes(source)
    return PdfDocument.from_file(str(source))


def detect_toc(text: str, page_offset: int = 0) -> TableOfContents:
    """
    Build a TOC from document text with the heuristic heading classifier.
    """
    drafts = detect_toc_structure(text)
    LOG.info(f"Heuristic detection found {len(drafts)} TOC entries.")
    return TableOfContents.from_drafts(drafts, page_offset=page_offset)


def extract_toc(text: str, config: AiExtractionConfig, page_offset: int = 0) -> TableOfContents:
    """
    Build a TOC from document text with the AI extractor.

    Raises:
        ValueError: If no API key is configured
        ExternalServiceError: If the API call fails
    """
    drafts: List[TocDraft] = AiTocExtractor(config).extract(text)
    return TableOfContents.from_drafts(drafts, page_offset=page_offset)


def add_outline_to_pdf(
    pdf_bytes: bytes,
    toc: TableOfContents,
    title: Optional[str] = None,
    config: Optional[SaveConfig] = None,
) -> SaveResult:
    """
    Write the TOC into the PDF as bookmarks.

    Args:
        pdf_bytes: The original PDF
        toc: Edited Table of Contents
        title: Document title to record in the metadata
        config: Metadata settings

    Returns:
        SaveResult: The new PDF bytes and whether bookmarks were included
    """
    return OutlineSaver(config).save(pdf_bytes, toc, title=title)


def default_output_path(input_path: Union[str, Path]) -> Path:
    input_path = Path(input_path)
    return input_path.with_name(f"{input_path.stem}_with_toc.pdf")


def save_pdf_with_outline(
    input_path: Union[str, Path],
    toc_path: Union[str, Path],
    output_path: Optional[Union[str, Path]] = None,
    page_offset: Optional[int] = None,
    title: Optional[str] = None,
    config: Optional[SaveConfig] = None,
) -> SaveResult:
    """
    Read a PDF and a TOC JSON file, and write the PDF with bookmarks.

    Args:
        input_path: Source PDF
        toc_path: TOC JSON (TableOfContents object or list of {title, page, level})
        output_path: Destination (default: <input>_with_toc.pdf)
        page_offset: Overrides the offset stored in the TOC file
        title: Document title to record in the metadata
        config: Metadata settings

    Returns:
        SaveResult: Result of the save; the bytes are also written to output_path
    """
    toc = TableOfContents.load(str(toc_path))
    if page_offset is not None:
        toc.page_offset = page_offset

    with open(input_path, "rb") as f:
        pdf_bytes = f.read()

    result = add_outline_to_pdf(pdf_bytes, toc, title=title, config=config)

    output_path = Path(output_path) if output_path else default_output_path(input_path)
    with open(output_path, "wb") as f:
        f.write(result.data)
    LOG.info(f"Saved {output_path} (bookmarks included: {result.had_outline}).")
    return result
