# xgen_tableflow/core/functions/tree_editor.py
"""
Tree Editor - Read and Edit Access to lxml Trees

The grid builder only reads the tree (TreeNavigator); the synthesizer edits it
through a TreeEditor so every edit can be rolled back.

================================================================================
OVERLAY TRANSACTIONS
================================================================================

    editor = TreeEditor()
    overlay = editor.begin_overlay()
    editor.set_attribute(table, "border", "1")
    ...
    if ok:
        editor.commit(overlay)      # edits become permanent
    else:
        editor.discard(overlay)     # every edit is undone

Each edit made while an overlay is open records its inverse in that overlay's
journal. discard() replays the journal newest-first, which restores node
identity, sibling order, text, attributes and anchors exactly. Overlays nest:
committing an inner overlay hands its journal to the enclosing one, so a later
discard of the outer overlay still undoes it.

================================================================================
ANCHORS
================================================================================

An Anchor is a registered (container, offset) pair standing in for a caret or
one end of a selection. Moving a node keeps anchors inside it valid because
they reference the moved nodes themselves. Removing a node relocates anchors
inside it to the parent, at the index the node had. move_children() and
move_position() carry anchors on a container across to another element.
The offset is opaque to the editor.
"""
import logging
from typing import Any, Callable, List, Optional, Tuple

from lxml import etree

logger = logging.getLogger("xgen_tableflow.tree")


class Anchor:
    """A caret or selection end registered with a TreeEditor."""

    __slots__ = ("container", "offset")

    def __init__(self, container: Any, offset: int):
        self.container = container
        self.offset = offset

    def __repr__(self) -> str:
        return f"Anchor({etree.QName(self.container).localname if self.container is not None else None}, {self.offset})"


class Overlay:
    """Handle for one open overlay transaction."""

    def __init__(self, parent: Optional["Overlay"] = None):
        self.parent = parent
        self.journal: List[Callable[[], None]] = []
        self.closed = False

    def __len__(self) -> int:
        return len(self.journal)


class TreeNavigator:
    """Read-only queries over lxml nodes. Comments and PIs are not elements."""

    @staticmethod
    def is_element(node: Any) -> bool:
        return node is not None and isinstance(node.tag, str)

    def get_parent(self, node: Any) -> Optional[Any]:
        return node.getparent()

    def get_children(self, node: Any) -> List[Any]:
        return list(node)

    def get_element_children(self, node: Any) -> List[Any]:
        return [child for child in node if self.is_element(child)]

    def get_next_sibling(self, node: Any) -> Optional[Any]:
        return node.getnext()

    def get_attribute(self, node: Any, name: str) -> Optional[str]:
        return node.get(name)

    def get_local_name(self, node: Any) -> Optional[str]:
        if not self.is_element(node):
            return None
        return etree.QName(node).localname

    def get_namespace_uri(self, node: Any) -> Optional[str]:
        if not self.is_element(node):
            return None
        return etree.QName(node).namespace

    @staticmethod
    def has_content(node: Any) -> bool:
        """Whether the node has text or child nodes."""
        return bool(node.text) or len(node) > 0


class TreeEditor(TreeNavigator):
    """
    Mutable access to lxml trees with overlay transactions and anchors.

    All structural edits go through _relocate()/_detach() so that they can
    be journaled uniformly.
    """

    def __init__(self):
        self._overlays: List[Overlay] = []
        self._anchors: List[Anchor] = []

    # ==========================================================================
    # Overlays
    # ==========================================================================

    @property
    def in_overlay(self) -> bool:
        return bool(self._overlays)

    def begin_overlay(self) -> Overlay:
        overlay = Overlay(self._overlays[-1] if self._overlays else None)
        self._overlays.append(overlay)
        return overlay

    def commit(self, overlay: Overlay) -> None:
        self._close(overlay)
        if overlay.parent is not None:
            overlay.parent.journal.extend(overlay.journal)
        logger.debug(f"Committed overlay with {len(overlay)} edits")
        overlay.journal = []

    def discard(self, overlay: Overlay) -> None:
        self._close(overlay)
        edits = len(overlay)
        for undo in reversed(overlay.journal):
            undo()
        overlay.journal = []
        logger.debug(f"Discarded overlay, {edits} edits undone")

    def _close(self, overlay: Overlay) -> None:
        if overlay.closed:
            raise ValueError("Overlay is already closed")
        if not self._overlays or self._overlays[-1] is not overlay:
            raise ValueError("Only the innermost open overlay can be closed")
        self._overlays.pop()
        overlay.closed = True

    def _record(self, undo: Callable[[], None]) -> None:
        if self._overlays:
            self._overlays[-1].journal.append(undo)

    # ==========================================================================
    # Element creation
    # ==========================================================================

    def create_element(self, namespace_uri: Optional[str], local_name: str, context: Any = None) -> Any:
        """
        Create a detached element.

        When a context node is given, the prefix it uses for namespace_uri is
        reused so the element serializes without a redundant declaration once
        inserted under it.
        """
        tag = etree.QName(namespace_uri or None, local_name).text
        if not namespace_uri:
            return etree.Element(tag)

        prefix = None
        if context is not None:
            for candidate, uri in context.nsmap.items():
                if uri == namespace_uri:
                    prefix = candidate
                    break
        return etree.Element(tag, nsmap={prefix: namespace_uri})

    # ==========================================================================
    # Structure
    # ==========================================================================

    def append_child(self, parent: Any, child: Any) -> None:
        self._relocate(child, parent, len(parent))

    def insert_before(self, parent: Any, child: Any, reference: Optional[Any]) -> None:
        """Insert (or move) child before reference; append when reference is None."""
        if reference is None:
            self.append_child(parent, child)
            return
        if reference is child:
            return
        self._relocate(child, parent, parent.index(reference))

    def insert_after(self, parent: Any, child: Any, reference: Optional[Any]) -> None:
        """Insert (or move) child right after reference; prepend when reference is None."""
        if reference is None:
            self._relocate(child, parent, 0)
            return
        if reference is child:
            return
        self._relocate(child, parent, parent.index(reference) + 1)

    def remove_child(self, parent: Any, child: Any) -> None:
        if child.getparent() is not parent:
            raise ValueError("Node is not a child of the given parent")
        index = parent.index(child)
        self._relocate_anchors_out_of(child, parent, index)
        self._detach(child)

    def replace_child(self, parent: Any, new_child: Any, old_child: Any) -> None:
        index = parent.index(old_child)
        self._relocate_anchors_out_of(old_child, parent, index)
        self._detach(old_child)
        self._relocate(new_child, parent, index)

    def move_children(self, source: Any, target: Any) -> None:
        """
        Move all content of source to the end of target.

        Child elements are moved, not copied; anchors on source move to
        target with the same offset.
        """
        if source.text:
            text = source.text
            if len(target):
                last = target[-1]
                old_tail = last.tail
                last.tail = (old_tail or "") + text
                self._record(lambda last=last, old_tail=old_tail: setattr(last, "tail", old_tail))
            else:
                old_target_text = target.text
                target.text = (old_target_text or "") + text
                self._record(lambda: setattr(target, "text", old_target_text))
            source.text = None
            self._record(lambda: setattr(source, "text", text))

        for child in list(source):
            self._relocate(child, target, len(target))

        for anchor in self._anchors:
            if anchor.container is source:
                self._set_anchor(anchor, target, anchor.offset)

    # ==========================================================================
    # Attributes
    # ==========================================================================

    def set_attribute(self, node: Any, name: str, value: str) -> None:
        old_value = node.get(name)
        if old_value == value:
            return
        node.set(name, value)
        self._record(lambda: self._restore_attribute(node, name, old_value))

    def remove_attribute(self, node: Any, name: str) -> None:
        old_value = node.get(name)
        if old_value is None:
            return
        del node.attrib[name]
        self._record(lambda: self._restore_attribute(node, name, old_value))

    @staticmethod
    def _restore_attribute(node: Any, name: str, value: Optional[str]) -> None:
        if value is None:
            node.attrib.pop(name, None)
        else:
            node.set(name, value)

    # ==========================================================================
    # Anchors
    # ==========================================================================

    def register_anchor(self, container: Any, offset: int) -> Anchor:
        anchor = Anchor(container, offset)
        self._anchors.append(anchor)
        return anchor

    def unregister_anchor(self, anchor: Anchor) -> None:
        self._anchors.remove(anchor)

    def get_anchor_position(self, anchor: Anchor) -> Tuple[Any, int]:
        return anchor.container, anchor.offset

    def move_position(self, old_container: Any, old_offset: int, new_container: Any, new_offset: int) -> None:
        """Move every anchor at exactly (old_container, old_offset)."""
        for anchor in self._anchors:
            if anchor.container is old_container and anchor.offset == old_offset:
                self._set_anchor(anchor, new_container, new_offset)

    def _set_anchor(self, anchor: Anchor, container: Any, offset: int) -> None:
        old_container, old_offset = anchor.container, anchor.offset
        anchor.container, anchor.offset = container, offset

        def undo():
            anchor.container, anchor.offset = old_container, old_offset

        self._record(undo)

    def _relocate_anchors_out_of(self, node: Any, parent: Any, index: int) -> None:
        if not self._anchors:
            return
        inside = set(node.iter())
        for anchor in self._anchors:
            if anchor.container in inside:
                self._set_anchor(anchor, parent, index)

    # ==========================================================================
    # Journaled primitives
    # ==========================================================================

    def _detach(self, node: Any) -> None:
        parent = node.getparent()
        if parent is None:
            return
        index = parent.index(node)
        parent.remove(node)

        def undo():
            parent.insert(index, node)

        self._record(undo)

    def _relocate(self, node: Any, parent: Any, index: int) -> None:
        """Place node at index among parent's children, moving it if attached."""
        old_parent = node.getparent()
        if old_parent is not None:
            old_index = old_parent.index(node)
            if old_parent is parent:
                if old_index == index or old_index + 1 == index:
                    return
                if old_index < index:
                    index -= 1
            self._detach(node)

        parent.insert(index, node)

        def undo():
            parent.remove(node)

        self._record(undo)


def create_tree_editor() -> TreeEditor:
    """Factory function to create a TreeEditor."""
    return TreeEditor()


__all__ = [
    'Anchor',
    'Overlay',
    'TreeNavigator',
    'TreeEditor',
    'create_tree_editor',
]
