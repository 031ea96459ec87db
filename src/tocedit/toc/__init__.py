"""Table of Contents entry model."""

from .models import TocDraft, TocEntry, TableOfContents

__all__ = ["TocDraft", "TocEntry", "TableOfContents"]
