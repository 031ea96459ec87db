from tocedit.outline.tree import OutlineNode, OutlineTree, build_outline_tree
from tocedit.outline.serializer import write_outline
from tocedit.outline.saver import OutlineSaver, OutlineState, SaveResult
