from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from codearch.store.models import Node, node_key

logger = logging.getLogger(__name__)


class NodeCache:
    """ Maps (file_path, path) to the node last materialised for that address.
    Parents are found by truncating the path, so nodes never hold a pointer to their parent.
    """

    def __init__(self):
        self._nodes: dict = {}

    # ---------- reads ----------
    def get(self, file_path: str | Path, path) -> Optional[Node]:
        return self._nodes.get(node_key(file_path, path))

    def parent_of(self, node: Node) -> Optional[Node]:
        """ The cached node one path segment up, or None for a document root. """
        if node.is_root:
            return None
        return self.get(node.file_path, node.path[:-1])

    def nodes_in(self, file_path: str | Path) -> list[Node]:
        fp = str(file_path)
        return [n for (f, _), n in self._nodes.items() if f == fp]

    # ---------- writes ----------
    def put(self, node: Node) -> Node:
        """ Register a node, replacing whatever was cached at its address. """
        self._nodes[node.key] = node
        return node

    def discard_subtree(self, file_path: str | Path, path) -> int:
        """ Drop the node at `path` and everything below it. Returns count removed. """
        fp, prefix = node_key(file_path, path)
        stale = [k for k in self._nodes if k[0] == fp and k[1][:len(prefix)] == prefix]
        for k in stale:
            del self._nodes[k]
        if stale:
            logger.debug("Discarded %d cached nodes under %s:%s", len(stale), fp, list(prefix))
        return len(stale)

    def clear(self) -> None:
        self._nodes.clear()

    def __contains__(self, key) -> bool:
        return key in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)
