"""
Plain-text heading classifier.

Chapter headings (第N章, Chapter N) become level 1, numbered sections (1.2, 3.)
level 2, and short lines containing CJK characters level 3. Page numbers are a
rough estimate from the line position.
"""

import re
from typing import List

from tocedit.toc.models import TocDraft


CHAPTER_PATTERN = re.compile(r"^(第[一二三四五六七八九十百\d]+[章节]|Chapter\s+\d+)", re.IGNORECASE)
SECTION_PATTERN = re.compile(r"^(\d+\.\d+|\d+\.)")
CJK_PATTERN = re.compile(r"[\u4e00-\u9fa5]")

MAX_LINE_LENGTH = 100
MAX_LEVEL3_LENGTH = 30


def classify_line(line: str):
    """Return the heading level (1-3) of a line, or None if it does not look like a heading."""
    trimmed = line.strip()
    if not trimmed or len(trimmed) > MAX_LINE_LENGTH:
        return None
    if CHAPTER_PATTERN.match(trimmed):
        return 1
    if SECTION_PATTERN.match(trimmed):
        return 2
    if len(trimmed) < MAX_LEVEL3_LENGTH and CJK_PATTERN.search(trimmed):
        return 3
    return None


def detect_toc_structure(text: str, max_items: int = 50, lines_per_page: int = 20) -> List[TocDraft]:
    """
    Detect TOC entries in plain text.

    Args:
        text: Document text, one heading candidate per line.
        max_items: Maximum number of entries returned.
        lines_per_page: Number of non-empty lines assumed per page for the page estimate.

    Returns:
        List[TocDraft]: Detected entries in text order.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    drafts = []
    for index, line in enumerate(lines):
        level = classify_line(line)
        if level is None:
            continue
        drafts.append(TocDraft(title=line.strip(), page=index // lines_per_page + 1, level=level))
        if len(drafts) >= max_items:
            break
    return drafts
