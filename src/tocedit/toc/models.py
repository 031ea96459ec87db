"""
Pydantic models for the editable Table of Contents.

A TableOfContents is the ordered, leveled list of entries the user edits, plus a
page offset applied uniformly when the outline is built. Only type constraints are
checked here; whether a page exists depends on the target document and is left to
the outline builder.
"""

import json
import uuid
from typing import Iterable, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


TocLevel = Literal[1, 2, 3]


def new_entry_id() -> str:
    return uuid.uuid4().hex


class TocDraft(BaseModel):
    """A TOC entry as produced by a TOC source, before it has an id."""

    title: str = Field("", description="Heading text as it should appear in the bookmark.")
    page: int = Field(..., description="1-based page number as printed, before the page offset.")
    level: TocLevel = Field(1, description="1 for chapters, 2 for sections, 3 for sub-sections.")


class TocEntry(TocDraft):
    """A single editable entry of the Table of Contents."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(
        default_factory=new_entry_id,
        description="Opaque identifier, stable across edits and reorders."
    )


class TableOfContents(BaseModel):
    """Ordered sequence of TOC entries and the page offset applied to all of them."""

    model_config = ConfigDict(validate_assignment=True)

    entries: List[TocEntry] = Field(default_factory=list, description="Entries in document order.")
    page_offset: int = Field(
        0,
        description="Added to every entry's page to account for front matter before logical page 1."
    )

    @classmethod
    def from_drafts(cls, drafts: Iterable[TocDraft], page_offset: int = 0) -> "TableOfContents":
        toc = cls(page_offset=page_offset)
        toc.extend_drafts(drafts)
        return toc

    @classmethod
    def load(cls, path: str) -> "TableOfContents":
        """
        Load a TOC from a JSON file.

        The file may hold either a full TableOfContents object or a bare list of
        {title, page, level} items, in which case ids are assigned.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, list):
            return cls.from_drafts(TocDraft.model_validate(item) for item in data)
        return cls.model_validate(data)

    def dump(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2, ensure_ascii=False)

    def __len__(self) -> int:
        return len(self.entries)

    def append(self, title: str, page: int, level: TocLevel = 1) -> TocEntry:
        entry = TocEntry(title=title, page=page, level=level)
        self.entries.append(entry)
        return entry

    def extend_drafts(self, drafts: Iterable[TocDraft]) -> List[TocEntry]:
        """Ingest entries from a TOC source, assigning a fresh id to each."""
        added = [TocEntry(title=d.title, page=d.page, level=d.level) for d in drafts]
        self.entries.extend(added)
        return added

    def get(self, entry_id: str) -> TocEntry:
        return self.entries[self._index_of(entry_id)]

    def update(self, entry_id: str, **fields) -> TocEntry:
        """
        Update fields of an entry in place.

        Args:
            entry_id: Id of the entry to update.
            **fields: Any of title, page, level.

        Returns:
            TocEntry: The updated entry.

        Raises:
            KeyError: If no entry has this id.
            ValueError: If a field is unknown or a value has the wrong type.
        """
        entry = self.get(entry_id)
        unknown = set(fields) - {"title", "page", "level"}
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(entry, name, value)
        return entry

    def delete(self, entry_id: str) -> TocEntry:
        return self.entries.pop(self._index_of(entry_id))

    def move(self, entry_id: str, position: int) -> None:
        """Move an entry so that it ends up at the given index (clamped to the sequence)."""
        entry = self.entries.pop(self._index_of(entry_id))
        position = max(0, min(position, len(self.entries)))
        self.entries.insert(position, entry)

    def replace_entries(self, entries: List[TocEntry]) -> None:
        ids = [entry.id for entry in entries]
        if len(ids) != len(set(ids)):
            raise ValueError("Duplicate entry ids in reordered entries")
        self.entries = list(entries)

    def snapshot(self) -> Tuple[Tuple[TocEntry, ...], int]:
        """Return an immutable copy of the entries together with the page offset."""
        return tuple(entry.model_copy() for entry in self.entries), self.page_offset

    def _index_of(self, entry_id: str) -> int:
        for idx, entry in enumerate(self.entries):
            if entry.id == entry_id:
                return idx
        raise KeyError(entry_id)
