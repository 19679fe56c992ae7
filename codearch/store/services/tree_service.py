from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from PySide6.QtCore import QObject, Signal

from codearch.core.context import ProjectContext
from codearch.core.errors import DocumentError, UnsupportedFormatError, ValidationError
from codearch.store.models import Node, LABEL_KEY, ID_KEY
from codearch.store.services.tagging_service import TaggingService
from codearch.tree.decoder import Decoder
from codearch.tree.encoder import apply_edits
from codearch.tree.paths import locate, detach
from codearch.tree.synthesizer import synthesize, Synthesized

logger = logging.getLogger(__name__)


class TreeService(QObject):
    """ The document/tree engine the presentation layer talks to.
    Expansion is lazy: a node's children are only decoded when asked for. Every successful mutation writes the
    owning document and then emits treeChanged exactly once; failed operations emit nothing.
    Emits:
    - treeChanged()
    - diagnosticReported(str) for each non-fatal decode/synthesis problem
    """
    treeChanged = Signal()
    diagnosticReported = Signal(str)

    def __init__(self, ctx: ProjectContext, parent: QObject | None = None):
        super().__init__(parent)
        self.ctx = ctx
        self.tagging = TaggingService(ctx.store)
        self.decoder = Decoder(ctx.cache, ctx.resolver)

    @property
    def store(self):
        return self.ctx.store

    @property
    def cache(self):
        return self.ctx.cache

    # ---------- Expansion ----------
    def get_children(self, node: Node | None = None) -> list[Node]:
        """ Without a node: one undecoded root per document. With a node: decode it and return its visible children.

        Raises
        ------
        DocumentError
            if the owning document cannot be read or no longer contains node.path.
        """
        if node is None:
            return [self.cache.put(self._root_node(name)) for name in self.store.list()]

        document = self.store.read(node.file_path)
        value = locate(document, node.path)
        tags = self.tagging.repo.list(document)
        self._report(self.decoder.decode(node, value, tags))
        return node.children

    def get_cached_item(self, file_path: Path | str, path) -> Optional[Node]:
        return self.cache.get(file_path, path)

    def get_parent(self, node: Node) -> Optional[Node]:
        return self.cache.parent_of(node)

    def begin_edit(self, file_path: Path | str, path) -> Optional[Node]:
        """ Detached copy of a cached node for a property panel session.
        The node is always decoded again from disk first, so the copy never carries values older than the file.

        Raises
        ------
        DocumentError
            if the document no longer contains `path`.
        """
        node = self.cache.get(file_path, path)
        if node is None:
            return None
        self.get_children(node)
        return node.copy()

    def refresh(self) -> None:
        self.treeChanged.emit()

    # ---------- Creation ----------
    def create_parent(self, name: str) -> Path:
        """ Create a new document from the top-level schema, saved as <name><ext>.

        Raises
        ------
        ValidationError
            if the name is empty or taken, or the top-level schema is not an object.
        DocumentError
            if the document cannot be written.
        """
        name = self._clean_name(name, "Parent object")
        if any(part in name for part in ("/", "\\", "..")):
            raise ValidationError(f'Parent object name "{name}" must not contain path separators or ".."')
        if self.ctx.schema.get("type") != "object":
            raise ValidationError("Parent object can only be created for type object")
        target = self.store.path_for(name)
        if self.store.exists(target):
            raise ValidationError(f'A document named "{name}" already exists')

        built = self._synthesize(self.ctx.schema, name)
        document = built.value
        self.tagging.register(document, built.tags)
        self.store.write(target, document)

        logger.info("Created parent object %s at %s", name, target)
        self.treeChanged.emit()
        return target

    def create_child_from(self, parent: Node, name: str) -> None:
        """ Append a default-valued child to the array addressed by `parent`.

        Raises
        ------
        ValidationError
            if the name is empty, `parent` is not an array or its schema has no items.
        DocumentError
            if the document cannot be read, no longer holds an array at parent.path, or cannot be written.
        """
        name = self._clean_name(name, "Child object")
        if parent.type != "array":
            raise ValidationError("Child object can only be created for type array")
        self.ctx.resolver.resolve_items(parent.schema)
        items = parent.schema.get("items")
        if not items:
            raise ValidationError("Child object can only be created for array with items")
        built = self._synthesize(items, name)

        document = self.store.read(parent.file_path)
        container = locate(document, parent.path)
        if not isinstance(container, list):
            raise DocumentError(f"{parent.file_path} {parent.path} is not an array")
        container.append(built.value)
        self.tagging.register(document, built.tags)
        self.store.write(parent.file_path, document)

        logger.info("Created child object %s under %s", name, parent)
        self.treeChanged.emit()

    # ---------- Removal ----------
    def remove_item(self, node: Node, confirmed: bool = True) -> bool:
        """ Remove a node's slot from its container, along with the tag entries of everything inside it.
        A document root takes its whole file with it. Nothing happens unless the host confirmed.

        Returns
        -------
        bool
            If anything was removed.
        """
        if not confirmed:
            logger.debug("Removal of %s cancelled", node)
            return False

        if node.is_root:
            self.store.delete(node.file_path)
        else:
            document = self.store.read(node.file_path)
            value = locate(document, node.path)
            self.tagging.strip_subtree(document, value)
            detach(document, node.path)
            self.store.write(node.file_path, document)

        self.cache.discard_subtree(node.file_path, node.path)
        logger.info("Removed %s", node)
        self.treeChanged.emit()
        return True

    # ---------- Editing ----------
    def update_item(self, edited: Node) -> None:
        """ Persist an edited copy (see begin_edit) into its document. """
        apply_edits(self.store, edited)
        self.treeChanged.emit()

    def rename_item(self, node: Node, label: str) -> None:
        """ Change an object's `$label`, keeping its tag entry's label in step.

        Raises
        ------
        ValidationError
            if the label is empty or the node does not address an object.
        """
        label = self._clean_name(label, "Item")
        document = self.store.read(node.file_path)
        value = locate(document, node.path)
        if not isinstance(value, dict):
            raise ValidationError(f"{node} is not an object and cannot be renamed")

        value[LABEL_KEY] = label
        if isinstance(value.get(ID_KEY), str):
            self.tagging.relabel(document, value[ID_KEY], label)
        self.store.write(node.file_path, document)

        node.label = label
        logger.info("Renamed %s", node)
        self.treeChanged.emit()

    # ---------- helpers ----------
    def _root_node(self, file_name: str) -> Node:
        label = file_name[:-len(self.store.ext)] if file_name.endswith(self.store.ext) else file_name
        return Node(label, self.ctx.schema, self.store.root / file_name, [],
                    description=self.ctx.schema.get("title", ""))

    def _synthesize(self, schema: dict, name: str) -> Synthesized:
        try:
            built = synthesize(schema, name)
        except UnsupportedFormatError as e:
            raise ValidationError(str(e)) from e
        self._report(built.warnings)
        return built

    def _report(self, diagnostics: Iterable[str]) -> None:
        for msg in diagnostics:
            self.diagnosticReported.emit(msg)

    @staticmethod
    def _clean_name(name: str | None, what: str) -> str:
        nm = (name or "").strip()
        if not nm:
            raise ValidationError(f"{what} name must not be empty")
        return nm
