"""
tocedit - Edit the table of contents of PDF files and write it as bookmarks
"""

__version__ = "0.1.0"

from tocedit.toc.models import TocDraft, TocEntry, TableOfContents
from tocedit.outline.tree import OutlineTree, build_outline_tree
from tocedit.outline.serializer import write_outline
from tocedit.outline.saver import OutlineSaver, OutlineState, SaveResult
from tocedit.editor import (
    open_pdf,
    detect_toc,
    extract_toc,
    add_outline_to_pdf,
    save_pdf_with_outline
)
from tocedit.exceptions import TocEditError, InvalidInputFileError, StructuralError, ExternalServiceError
