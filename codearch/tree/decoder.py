from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator

from codearch.core.errors import UnsupportedFormatError
from codearch.store.models import (
    Node, NodeFormat, Placement, Collapsible, TagEntry, TAGS_KEY, LABEL_KEY, ID_KEY,
)
from codearch.store.repositories import NodeCache
from codearch.store.schema_resolver import SchemaResolver

logger = logging.getLogger(__name__)


class Decoder:
    """ Turns the JSON value at a node's address into that node's children.
    Every child is routed by its schema `format` into exactly one bucket: the visible children that drive tree
    expansion, or the hidden children edited through the property panel. A child with an unknown format is
    reported and left out; its siblings are still decoded.
    """

    def __init__(self, cache: NodeCache, resolver: SchemaResolver | None = None):
        self.cache = cache
        self.resolver = resolver

    def decode(self, node: Node, value: Any, tags: Iterable[TagEntry] = ()) -> list[str]:
        """ Decode one level below `node`, plus any sub-object levels under it.

        Parameters
        ----------
        node : Node
            The node being expanded. Its children and hidden children are replaced.
        value : Any
            The JSON value currently stored at node.path.
        tags : iterable of TagEntry
            The owning document's tag registry, used for tag-aware option lists.

        Returns
        -------
        list of str
            Non-fatal diagnostics, one per child that was left out.
        """
        tags = list(tags)
        diagnostics: list[str] = []
        node.value = value
        node.children = []
        node.hidden_children = []

        for child in self._candidates(node, value):
            try:
                fmt = NodeFormat.of(child.schema)
            except UnsupportedFormatError as e:
                msg = f"{child.file_path} {child.path}: {e}"
                logger.warning("Skipping child: %s", msg)
                diagnostics.append(msg)
                continue

            self._annotate(child, fmt, tags)
            self.cache.put(child)

            match fmt.placement:
                case Placement.VISIBLE:
                    node.children.append(child)
                case Placement.NESTED:
                    diagnostics.extend(self.decode(child, child.value, tags))
                    node.hidden_children.append(child)
                case Placement.HIDDEN:
                    node.hidden_children.append(child)

        node.decoded = True
        if not node.children:
            node.collapsible = Collapsible.NONE
        logger.debug("Decoded %s: %d children, %d hidden", node, len(node.children), len(node.hidden_children))
        return diagnostics

    # --- helpers --------------------------------------------------------------
    def _candidates(self, node: Node, value: Any) -> Iterator[Node]:
        """ Yield one undecoded child node per element / own key of `value`. """
        if isinstance(value, list):
            if self.resolver is not None:
                self.resolver.resolve_items(node.schema)
            items = node.schema.get("items")
            if not isinstance(items, dict):
                items = {}
            for i, element in enumerate(value):
                label = element.get(LABEL_KEY) if isinstance(element, dict) else None
                yield self._make_child(label if label is not None else str(i), items, node, i, element)

        elif isinstance(value, dict):
            properties = node.schema.get("properties") or {}
            for key, element in value.items():
                if node.is_root and key == TAGS_KEY:
                    continue
                schema = properties.get(key)
                if not isinstance(schema, dict):
                    schema = None
                elif schema.get("readOnly") is True:
                    continue
                label = (schema or {}).get("title") or key
                yield self._make_child(label, schema, node, key, element)

    def _make_child(self, label: str, schema: dict | None, parent: Node, key, value: Any) -> Node:
        child = Node(label, schema, parent.file_path, parent.path + [key], value=value)
        if child.type == "array" and self.resolver is not None:
            self.resolver.resolve_items(child.schema)
        return child

    @staticmethod
    def _annotate(child: Node, fmt: NodeFormat, tags: list[TagEntry]) -> None:
        """ Fill presentation state, the node's own tag entry and its selectable options. """
        child.collapsible = Collapsible.COLLAPSED if fmt.placement is Placement.VISIBLE else Collapsible.NONE

        if isinstance(child.value, dict) and ID_KEY in child.value:
            own_id = child.value[ID_KEY]
            child.tags = [t for t in tags if t.id == own_id]

        schema = child.schema
        items = schema.get("items") or {}
        match fmt:
            case NodeFormat.DROPDOWN_SELECT:
                child.options = list(schema.get("enum") or [])
            case NodeFormat.POOL_DROPDOWN_SELECT:
                child.options = list(items.get("enum") or [])
            case NodeFormat.DROPDOWN_SELECT_TAG:
                child.options = [t for t in tags if t.matches(schema.get("const"))]
            case NodeFormat.POOL_DROPDOWN_SELECT_TAG:
                child.options = [t for t in tags if t.matches(items.get("const"))]
