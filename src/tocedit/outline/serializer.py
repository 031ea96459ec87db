"""
Outline serializer.

Turns an OutlineTree into /Outlines and outline-item dictionaries inside the
document's indirect-object space. Every item carries its subtree size as an
unsigned /Count, so readers open the outline expanded.
"""

from typing import Optional

from globalog import LOG
from PyPDF2.generic import (
    ArrayObject,
    DictionaryObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    TextStringObject,
)

from tocedit.document.pdf_document import PdfDocument
from tocedit.exceptions import StructuralError
from tocedit.outline.tree import OutlineTree, ROOT


OUTLINES_KEY = "/Outlines"


def write_outline(document: PdfDocument, tree: OutlineTree) -> Optional[IndirectObject]:
    """
    Write an outline tree into the document and link it from the catalog.

    Every node gets its indirect reference before any dictionary is filled in, so
    Parent/Prev/Next/First/Last can point at nodes that are written later.
    An empty tree leaves the catalog untouched.

    Args:
        document: The document to mutate.
        tree: A validated outline tree.

    Returns:
        Optional[IndirectObject]: Reference of the /Outlines dictionary, or None if
        nothing was written.

    Raises:
        StructuralError: If a node refers to a node or page that does not exist.
    """
    if tree.is_empty:
        LOG.info("Outline is empty; leaving the document catalog unchanged.")
        return None

    dictionaries = [DictionaryObject() for _ in tree.nodes]
    refs = [document.add_indirect_object(d) for d in dictionaries]

    def ref(index: Optional[int]) -> IndirectObject:
        if index is None or not 0 <= index < len(refs):
            raise StructuralError(f"Outline node reference {index} was not allocated")
        return refs[index]

    root = tree.root
    root_dict = dictionaries[ROOT]
    root_dict[NameObject("/Type")] = NameObject("/Outlines")
    root_dict[NameObject("/First")] = ref(root.first_child)
    root_dict[NameObject("/Last")] = ref(root.last_child)
    root_dict[NameObject("/Count")] = NumberObject(root.subtree_count)

    for index in range(1, len(tree.nodes)):
        node = tree.nodes[index]
        item = dictionaries[index]
        item[NameObject("/Title")] = TextStringObject(node.title)
        item[NameObject("/Parent")] = ref(node.parent)
        if node.prev is not None:
            item[NameObject("/Prev")] = ref(node.prev)
        if node.next is not None:
            item[NameObject("/Next")] = ref(node.next)
        if not node.is_leaf:
            item[NameObject("/First")] = ref(node.first_child)
            item[NameObject("/Last")] = ref(node.last_child)
        item[NameObject("/Count")] = NumberObject(node.subtree_count)
        item[NameObject("/Dest")] = _destination(document, node.page_index)

    document.set_catalog_field(OUTLINES_KEY, refs[ROOT])
    LOG.info(f"Wrote outline with {len(tree)} items.")
    return refs[ROOT]


def _destination(document: PdfDocument, page_index: Optional[int]) -> ArrayObject:
    """[page /XYZ null null null]: open the page keeping the reader's position and zoom."""
    if page_index is None:
        raise StructuralError("Outline item has no destination page")
    try:
        page_ref = document.get_page(page_index)
    except IndexError as exc:
        raise StructuralError(str(exc)) from exc
    return ArrayObject([
        page_ref,
        NameObject("/XYZ"),
        NullObject(),
        NullObject(),
        NullObject(),
    ])
