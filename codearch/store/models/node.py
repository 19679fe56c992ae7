from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, List, Tuple

from codearch.store.models.formats import Collapsible
from codearch.store.models.tag import TagEntry

PathKey = str | int
CacheKey = Tuple[str, Tuple[PathKey, ...]]


class Node:
    """ An addressable point in a decoded document tree.
    The pair (file_path, path) is the node's only identity. Children are split into the structurally visible
    ones (children) and the property-panel-only ones (hidden_children).
    """

    def __init__(self, label: str, schema: dict | None, file_path: str | Path, path=(), value: Any = None,
                 description: str = ""):
        self.label = label
        self.schema: dict = schema if schema is not None else {}
        self.file_path = str(file_path)
        self.path: List[PathKey] = list(path)
        self.value = value
        self.description = description
        self.children: List[Node] = []
        self.hidden_children: List[Node] = []
        self.tags: List[TagEntry] = []
        self.options: list = []
        self.collapsible = Collapsible.COLLAPSED
        self.decoded = False

    # --- derived -------------------------------------------------------------
    @property
    def type(self) -> str:
        """ The JSON type, always taken from the schema. """
        return self.schema.get("type", "object")

    @property
    def key(self) -> CacheKey:
        return node_key(self.file_path, self.path)

    @property
    def is_root(self) -> bool:
        return not self.path

    @property
    def icon(self) -> str:
        return self.schema.get("contentMediaType") or f"symbol-{self.type}"

    @property
    def context_value(self) -> str:
        return f"item-{self.type}"

    @property
    def fields(self) -> List[Node]:
        """ Everything the property panel shows: visible children then hidden ones. """
        return self.children + self.hidden_children

    # --- editing -------------------------------------------------------------
    def copy(self) -> Node:
        """ Deep, detached copy for an edit session; edits to it never reach the original. """
        return copy.deepcopy(self)

    def find(self, path) -> Node | None:
        """ Find a node by absolute path within this subtree. """
        path = list(path)
        if self.path == path:
            return self
        for child in self.fields:
            if path[:len(child.path)] == child.path:
                found = child.find(path)
                if found is not None:
                    return found
        return None

    def iter_subtree(self):
        yield self
        for child in self.fields:
            yield from child.iter_subtree()

    def __iter__(self):
        return iter(self.children)

    def __repr__(self) -> str:
        return f"<Node {self.label!r} {self.file_path}:{self.path}>"


def node_key(file_path: str | Path, path) -> CacheKey:
    return str(file_path), tuple(path)
