"""
Outline tree construction.

Turns the flat, leveled TOC entry sequence into a parent/child/sibling-linked tree of
outline nodes. Nodes are kept in an arena (a list) and refer to each other by index;
index 0 is the synthetic root. A node is always appended after its parent, so a
parent's index is strictly smaller than any of its children's, which makes the tree
acyclic by construction and lets subtree counts be computed in one reverse sweep.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from globalog import LOG

from tocedit.exceptions import StructuralError


MAX_DEPTH = 3
ROOT = 0


@dataclass
class OutlineNode:
    title: str
    page_index: Optional[int] = None
    level: int = 0
    entry_id: Optional[str] = None
    parent: Optional[int] = None
    prev: Optional[int] = None
    next: Optional[int] = None
    first_child: Optional[int] = None
    last_child: Optional[int] = None
    subtree_count: int = 0

    @property
    def is_leaf(self) -> bool:
        return self.first_child is None


class OutlineTree:
    """
    Arena of outline nodes rooted at index 0.
    """

    def __init__(self) -> None:
        self.nodes: List[OutlineNode] = [OutlineNode(title="")]
        self.skipped: int = 0

    @property
    def root(self) -> OutlineNode:
        return self.nodes[ROOT]

    @property
    def is_empty(self) -> bool:
        return len(self.nodes) == 1

    def __len__(self) -> int:
        """Number of content nodes, the root excluded."""
        return len(self.nodes) - 1

    def add_child(self, parent: int, node: OutlineNode) -> int:
        """
        Append a node as the new last child of parent and return its index.
        """
        if parent < 0 or parent >= len(self.nodes):
            raise StructuralError(f"Parent index {parent} does not exist")

        index = len(self.nodes)
        parent_node = self.nodes[parent]
        node.parent = parent
        node.prev = parent_node.last_child
        node.next = None
        if parent_node.last_child is None:
            parent_node.first_child = index
        else:
            self.nodes[parent_node.last_child].next = index
        parent_node.last_child = index
        self.nodes.append(node)
        return index

    def children(self, index: int) -> List[int]:
        result = []
        child = self.nodes[index].first_child
        while child is not None:
            result.append(child)
            child = self.nodes[child].next
        return result

    def depth(self, index: int) -> int:
        """Number of parent steps from a node up to the root (0 for the root)."""
        steps = 0
        while self.nodes[index].parent is not None:
            index = self.nodes[index].parent
            steps += 1
            if steps >= len(self.nodes):
                raise StructuralError(f"Parent links of node {index} form a cycle")
        return steps

    def compute_counts(self) -> None:
        for node in self.nodes:
            node.subtree_count = 0
        for index in range(len(self.nodes) - 1, ROOT, -1):
            node = self.nodes[index]
            self.nodes[node.parent].subtree_count += node.subtree_count + 1

    def validate(self) -> None:
        """
        Check every linkage invariant of the tree.

        Raises:
            StructuralError: On the first violated invariant.
        """
        root = self.root
        if root.parent is not None or root.prev is not None or root.next is not None:
            raise StructuralError("Root must not have a parent or siblings")

        seen_in_chains = set()
        for index, node in enumerate(self.nodes):
            if index != ROOT:
                if node.parent is None or not 0 <= node.parent < index:
                    raise StructuralError(f"Node {index} has invalid parent {node.parent}")
                if self.depth(index) > MAX_DEPTH:
                    raise StructuralError(f"Node {index} is nested deeper than {MAX_DEPTH} levels")

            chain = []
            child = node.first_child
            prev = None
            while child is not None:
                if child in seen_in_chains or child <= index or child >= len(self.nodes):
                    raise StructuralError(f"Node {child} linked more than once or out of order under {index}")
                seen_in_chains.add(child)
                child_node = self.nodes[child]
                if child_node.parent != index:
                    raise StructuralError(f"Node {child} is in the chain of {index} but has parent {child_node.parent}")
                if child_node.prev != prev:
                    raise StructuralError(f"Node {child} has prev {child_node.prev}, expected {prev}")
                chain.append(child)
                prev = child
                child = child_node.next
            if (chain[-1] if chain else None) != node.last_child:
                raise StructuralError(f"Sibling chain of {index} does not end at its last child")

            expected = sum(self.nodes[c].subtree_count + 1 for c in chain)
            if node.subtree_count != expected:
                raise StructuralError(
                    f"Node {index} has count {node.subtree_count}, expected {expected}"
                )

        if len(seen_in_chains) != len(self.nodes) - 1:
            raise StructuralError("Some nodes are not reachable from the root")

    def structure(self, index: int = ROOT) -> List[Dict[str, Any]]:
        """
        Describe the children of a node as nested dicts, free of any reference ids.
        """
        result = []
        for child in self.children(index):
            node = self.nodes[child]
            result.append({
                "title": node.title,
                "level": node.level,
                "page_index": node.page_index,
                "count": node.subtree_count,
                "children": self.structure(child),
            })
        return result


def effective_page_index(page: Any, page_offset: Any, page_count: int) -> Optional[int]:
    """
    Translate a user page number into a 0-based page index of the document.

    Returns None when the page, after the offset, is not an integer within
    [1, page_count].
    """
    if isinstance(page, bool) or isinstance(page_offset, bool):
        return None
    try:
        value = page + page_offset
    except TypeError:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if value < 1 or value > page_count:
        return None
    return value - 1


def build_outline_tree(entries: Iterable[Any], page_offset: int, page_count: int) -> OutlineTree:
    """
    Build an outline tree from TOC entries in document order.

    Entries whose page, after the offset, does not exist in the document are skipped.
    An entry whose nominal parent level has no open node is attached to the nearest
    open shallower ancestor, or to the root.

    Args:
        entries: Objects with title, page and level attributes (TocEntry or alike).
        page_offset: Added to every entry's page.
        page_count: Number of pages of the target document.

    Returns:
        OutlineTree: The built tree; empty if no entry survived.

    Raises:
        StructuralError: If the resulting tree violates a linkage invariant.
    """
    tree = OutlineTree()
    open_ancestors: List[Optional[int]] = [None] * MAX_DEPTH

    for position, entry in enumerate(entries):
        title = getattr(entry, "title", "") or ""
        page = getattr(entry, "page", None)
        page_index = effective_page_index(page, page_offset, page_count)
        if page_index is None:
            LOG.warning(
                f"Skipping TOC entry #{position} '{title}': page {page} with offset {page_offset} "
                f"is outside 1..{page_count}"
            )
            tree.skipped += 1
            continue

        level = getattr(entry, "level", 1)
        if not isinstance(level, int) or isinstance(level, bool) or not 1 <= level <= MAX_DEPTH:
            clamped = 1 if not isinstance(level, int) or level < 1 else MAX_DEPTH
            LOG.warning(f"TOC entry #{position} '{title}' has level {level!r}; using {clamped}")
            level = clamped

        parent = ROOT
        for ancestor_level in range(level - 1, 0, -1):
            candidate = open_ancestors[ancestor_level - 1]
            if candidate is not None:
                parent = candidate
                break
        if level > 1 and (parent == ROOT or tree.nodes[parent].level != level - 1):
            LOG.debug(f"TOC entry #{position} '{title}' (level {level}) re-parented to node {parent}")

        index = tree.add_child(parent, OutlineNode(
            title=title,
            page_index=page_index,
            level=level,
            entry_id=getattr(entry, "id", None),
        ))

        open_ancestors[level - 1] = index
        for deeper in range(level, MAX_DEPTH):
            open_ancestors[deeper] = None

    tree.compute_counts()
    tree.validate()

    if tree.is_empty:
        LOG.info("No TOC entry produced an outline node.")
    else:
        LOG.info(f"Built outline with {len(tree)} nodes ({tree.skipped} entries skipped).")
    return tree
