from io import BytesIO
from typing import List

import pytest
from PyPDF2 import PdfReader
from PyPDF2.generic import DictionaryObject

from tocedit.document.pdf_document import PdfDocument
from tocedit.exceptions import StructuralError
from tocedit.outline.serializer import write_outline
from tocedit.outline.tree import ROOT, OutlineNode, OutlineTree, build_outline_tree
from tocedit.toc.models import TocEntry


def chain(first_holder: DictionaryObject) -> List[DictionaryObject]:
    items = []
    item = first_holder.get_object()["/First"] if "/First" in first_holder else None
    while item is not None:
        items.append(item)
        item = item["/Next"] if "/Next" in item else None
    return items


def reopen(document: PdfDocument) -> PdfReader:
    return PdfReader(BytesIO(document.encode()))


def test_writes_linked_outline(pdf_factory) -> None:
    """Parent, sibling and child links of the written dictionaries mirror the tree."""
    document = PdfDocument.from_bytes(pdf_factory(10))
    entries = [
        TocEntry(title="Ch1", page=1, level=1),
        TocEntry(title="S1.1", page=2, level=2),
        TocEntry(title="Ch2", page=5, level=1),
    ]
    ref = write_outline(document, build_outline_tree(entries, 0, 10))
    assert ref is not None

    reader = reopen(document)
    catalog = reader.trailer["/Root"]
    outlines = catalog["/Outlines"]
    assert outlines["/Type"] == "/Outlines"
    assert outlines["/Count"] == 3

    top = chain(outlines)
    assert [str(item["/Title"]) for item in top] == ["Ch1", "Ch2"]
    ch1, ch2 = top
    outlines_id = catalog.raw_get("/Outlines").idnum
    assert ch1.raw_get("/Parent").idnum == outlines_id
    assert ch2.raw_get("/Parent").idnum == outlines_id
    assert "/Prev" not in ch1
    assert "/Next" not in ch2
    assert ch2.raw_get("/Prev").idnum == ch1.indirect_reference.idnum
    assert outlines.raw_get("/Last").idnum == ch2.indirect_reference.idnum

    assert ch1["/Count"] == 1
    assert ch2["/Count"] == 0
    assert "/First" not in ch2 and "/Last" not in ch2

    (section,) = chain(ch1)
    assert str(section["/Title"]) == "S1.1"
    assert section["/Count"] == 0
    assert section.raw_get("/Parent").idnum == ch1.indirect_reference.idnum
    assert ch1.raw_get("/First").idnum == ch1.raw_get("/Last").idnum


def test_destinations_point_at_pages(pdf_factory) -> None:
    document = PdfDocument.from_bytes(pdf_factory(10))
    entries = [TocEntry(title="Ch1", page=1, level=1), TocEntry(title="Ch2", page=5, level=1)]
    write_outline(document, build_outline_tree(entries, 0, 10))

    reader = reopen(document)
    page_ids = [page.indirect_reference.idnum for page in reader.pages]
    top = chain(reader.trailer["/Root"]["/Outlines"])
    for item, expected_page in zip(top, [0, 4]):
        dest = item["/Dest"]
        assert dest[0].idnum == page_ids[expected_page]
        assert dest[1] == "/XYZ"
        assert len(dest) == 5


def test_outline_readable_by_pdf_reader(pdf_factory) -> None:
    """A standard reader resolves the bookmarks to the right page numbers."""
    document = PdfDocument.from_bytes(pdf_factory(10))
    entries = [
        TocEntry(title="Ch1", page=1, level=1),
        TocEntry(title="S1.1", page=2, level=2),
        TocEntry(title="Ch2", page=5, level=1),
    ]
    write_outline(document, build_outline_tree(entries, 0, 10))
    reader = reopen(document)

    outline = reader.outline
    assert outline[0].title == "Ch1"
    assert [item.title for item in outline[1]] == ["S1.1"]
    assert outline[2].title == "Ch2"
    assert reader.get_destination_page_number(outline[2]) == 4


def test_non_ascii_titles_round_trip(pdf_factory) -> None:
    document = PdfDocument.from_bytes(pdf_factory(3))
    write_outline(document, build_outline_tree([TocEntry(title="第一章 总论", page=1, level=1)], 0, 3))
    top = chain(reopen(document).trailer["/Root"]["/Outlines"])
    assert str(top[0]["/Title"]) == "第一章 总论"


def test_empty_tree_leaves_catalog_untouched(pdf_factory) -> None:
    document = PdfDocument.from_bytes(pdf_factory(3))
    keys_before = document.catalog_keys()
    assert write_outline(document, build_outline_tree([], 0, 3)) is None
    assert document.catalog_keys() == keys_before
    assert "/Outlines" not in reopen(document).trailer["/Root"]


def test_missing_page_raises_structural_error(pdf_factory) -> None:
    """A node whose page index is outside the document cannot be serialized."""
    document = PdfDocument.from_bytes(pdf_factory(2))
    tree = OutlineTree()
    tree.add_child(ROOT, OutlineNode(title="Ghost", page_index=7, level=1))
    tree.compute_counts()
    with pytest.raises(StructuralError):
        write_outline(document, tree)
