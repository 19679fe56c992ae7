from __future__ import annotations

import copy
import logging

from codearch.core.errors import DocumentError
from codearch.store.documents import DocumentStore
from codearch.store.models import Node, TAGS_KEY
from codearch.tree.paths import assign

logger = logging.getLogger(__name__)


def apply_edits(store: DocumentStore, edited: Node) -> dict:
    """ Write an edited node subtree back into its document and persist it in one write.

    The document is loaded fresh, every node of the subtree with a value is assigned at its absolute path
    (parents before children, missing containers created on the way) and the result replaces the file.

    Parameters
    ----------
    store : DocumentStore
        Where the owning document lives.
    edited : Node
        The edited copy, usually from a property panel session.

    Returns
    -------
    dict
        The document as written.

    Raises
    ------
    DocumentError
        if the document cannot be read or written; the file on disk is then unchanged.
    """
    document = store.read(edited.file_path)
    if not isinstance(document, dict):
        raise DocumentError(f"Document {edited.file_path} is not a JSON object")

    count = write_back(document, edited)
    store.write(edited.file_path, document)
    logger.info("Applied %d edited values to %s", count, edited.file_path)
    return document


def write_back(document: dict, node: Node) -> int:
    """ Assign the values of `node` and its subtree into `document`. Returns count of values assigned. """
    count = 0
    if node.value is not None:
        value = copy.deepcopy(node.value)
        if not node.path and isinstance(value, dict) and TAGS_KEY in document:
            # the registry on disk is newer than any edited copy of the root
            value[TAGS_KEY] = document[TAGS_KEY]
        assign(document, node.path, value)
        count += 1
    for child in node.children + node.hidden_children:
        count += write_back(document, child)
    return count
