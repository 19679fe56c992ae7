from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from codearch.store.documents import DocumentStore
from codearch.store.models import TagEntry, ID_KEY
from codearch.store.repositories import TagRepo

logger = logging.getLogger(__name__)


def collect_tag_ids(value: Any) -> list[str]:
    """ Every `$id` found anywhere inside `value`, depth first. Only tag-bearing ones have registry entries. """
    found: list[str] = []
    if isinstance(value, dict):
        if isinstance(value.get(ID_KEY), str):
            found.append(value[ID_KEY])
        for v in value.values():
            found.extend(collect_tag_ids(v))
    elif isinstance(value, list):
        for v in value:
            found.extend(collect_tag_ids(v))
    return found


class TaggingService:
    """Business logic for the per-document tag registry and references into it."""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.repo = TagRepo()

    # ---------- Queries ----------
    def list_tags(self, file_path: Path | str) -> list[TagEntry]:
        return self.repo.list(self.store.read(file_path))

    def tags_matching(self, file_path: Path | str, categories: str | Iterable[str]) -> list[TagEntry]:
        """ Entries of the document's registry whose category is one of `categories`. """
        return self.repo.matching(self.store.read(file_path), categories)

    def resolve(self, file_path: Path | str, ids: str | Iterable[str]) -> list[TagEntry]:
        """ Map stored `$id` references to their tag entries, in the order given. Dangling ids are skipped. """
        if isinstance(ids, str):
            ids = [ids]
        by_id = {t.id: t for t in self.list_tags(file_path)}
        out = []
        for i in ids:
            if i in by_id:
                out.append(by_id[i])
            else:
                logger.debug("Dangling tag reference %s in %s", i, file_path)
        return out

    # ---------- Mutations on a loaded document ----------
    def register(self, document: dict, entries: Iterable[TagEntry]) -> int:
        """ Append the entries of newly created tag-bearing objects. """
        count = 0
        for entry in entries:
            self.repo.add(document, entry)
            count += 1
        return count

    def strip_subtree(self, document: dict, value: Any) -> int:
        """ Remove the registry entries owned by the objects inside `value`. Returns count removed. """
        ids = collect_tag_ids(value)
        removed = self.repo.remove(document, ids)
        if removed:
            logger.debug("Removed %d tag entries", removed)
        return removed

    def relabel(self, document: dict, tag_id: str, label: str) -> bool:
        return self.repo.relabel(document, tag_id, label)
