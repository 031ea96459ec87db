"""
Saving a PDF with its outline, without ever letting the outline break the save.

Outline building and serialization run inside a safety boundary: any failure
there discards the mutated document, the original bytes are re-opened, the same
metadata is applied again and the document is encoded without new bookmarks. The
caller learns about it through SaveResult.had_outline.
"""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum, auto
from typing import Callable, Iterable, Optional

from globalog import LOG

from tocedit.config import SaveConfig
from tocedit.document.pdf_document import PdfDocument
from tocedit.outline.serializer import write_outline
from tocedit.outline.tree import OutlineTree, build_outline_tree
from tocedit.toc.models import TableOfContents, TocEntry


OutlineBuilder = Callable[[Iterable[TocEntry], int, int], OutlineTree]
OutlineWriter = Callable[[PdfDocument, OutlineTree], object]


class OutlineState(Enum):
    BUILDING = auto()
    SERIALIZED = auto()
    FAILED = auto()


@dataclass
class SaveResult:
    data: bytes
    had_outline: bool
    state: OutlineState
    node_count: int = 0
    skipped_count: int = 0
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.state == OutlineState.FAILED


@dataclass(frozen=True)
class _Metadata:
    title: Optional[str]
    producer: str
    creator: str
    modified: datetime

    def apply(self, document: PdfDocument) -> None:
        document.update_metadata(
            title=self.title,
            producer=self.producer,
            creator=self.creator,
            modified=self.modified,
        )


class OutlineSaver:
    """
    Writes a TableOfContents into a PDF as bookmarks and encodes the result.

    Failures while building or writing the outline are counted in failure_count
    and turned into a save without bookmarks.
    """

    def __init__(
        self,
        config: Optional[SaveConfig] = None,
        builder: OutlineBuilder = build_outline_tree,
        writer: OutlineWriter = write_outline,
    ) -> None:
        """
        Initialize the OutlineSaver.

        Args:
            config: Metadata written into every saved document (default: SaveConfig())
            builder: Builds the outline tree from entries, offset and page count
            writer: Serializes the outline tree into the document
        """
        self.config = config or SaveConfig()
        self._builder = builder
        self._writer = writer
        self.failure_count = 0

    def save(self, pdf_bytes: bytes, toc: TableOfContents, title: Optional[str] = None) -> SaveResult:
        """
        Produce a new PDF carrying the TOC as its outline.

        Args:
            pdf_bytes: The original PDF.
            toc: The edited Table of Contents; it is snapshotted on entry.
            title: Document title; falls back to the configured one.

        Returns:
            SaveResult: Encoded bytes and whether bookmarks were included.

        Raises:
            InvalidInputFileError: If pdf_bytes is not a readable PDF.
        """
        start_time = time.time()
        entries, page_offset = toc.snapshot()
        document = PdfDocument.from_bytes(pdf_bytes)

        metadata = _Metadata(
            title=title if title is not None else self.config.title,
            producer=self.config.producer,
            creator=self.config.creator,
            modified=datetime.now(timezone.utc),
        )
        metadata.apply(document)

        state = OutlineState.BUILDING
        LOG.info(f"Building outline from {len(entries)} entries (page offset {page_offset}).")
        try:
            tree = self._builder(entries, page_offset, document.page_count())
            self._writer(document, tree)
            data = document.encode()
            state = OutlineState.SERIALIZED
        except Exception as exc:
            state = OutlineState.FAILED
            self.failure_count += 1
            LOG.error("Outline construction failed; saving without bookmarks", exc_info=exc)
            data = self._encode_original(pdf_bytes, metadata)
            return SaveResult(
                data=data,
                had_outline=False,
                state=state,
                error=f"{type(exc).__name__}: {exc}",
            )

        elapsed = time.time() - start_time
        LOG.info(
            f"Saved PDF: outline_items={len(tree)}, skipped={tree.skipped}, "
            f"size={len(data)} bytes, elapsed={elapsed:.2f}s"
        )
        return SaveResult(
            data=data,
            had_outline=not tree.is_empty,
            state=state,
            node_count=len(tree),
            skipped_count=tree.skipped,
        )

    @staticmethod
    def _encode_original(pdf_bytes: bytes, metadata: _Metadata) -> bytes:
        document = PdfDocument.from_bytes(pdf_bytes)
        metadata.apply(document)
        return document.encode()
