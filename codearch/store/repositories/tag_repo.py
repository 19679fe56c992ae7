from __future__ import annotations

from typing import Iterable, Optional

from jsonschema.validators import Draft202012Validator

from codearch.core.errors import DocumentError
from codearch.store.models import TagEntry, TAGS_KEY, TAGS_SCHEMA, ID_KEY, LABEL_KEY

_validator = Draft202012Validator(TAGS_SCHEMA)


def validate_tags(raw) -> None:
    """ Validates a `$tags` value against the tag registry schema.

    Parameters
    ----------
    raw : list
        The `$tags` value of a document.

    Raises
    ------
    DocumentError
        if the registry is malformed.
    """
    errors = sorted(_validator.iter_errors(raw), key=lambda e: list(e.path))
    if errors:
        lines = []
        for e in errors:
            loc = "/".join(map(str, e.path)) or "<root>"
            lines.append(f"- at {loc}: {e.message}")
        raise DocumentError("Invalid tag registry:\n" + "\n".join(lines))


class TagRepo:
    """ Low-level access to the `$tags` registry embedded in a loaded document. """

    # ---------- reads ----------
    def list(self, document: dict) -> list[TagEntry]:
        raw = document.get(TAGS_KEY, []) if isinstance(document, dict) else []
        validate_tags(raw)
        return [TagEntry.model_validate(t) for t in raw]

    def get(self, document: dict, tag_id: str) -> Optional[TagEntry]:
        return next((t for t in self.list(document) if t.id == tag_id), None)

    def matching(self, document: dict, categories) -> list[TagEntry]:
        """ Entries whose category intersects `categories`, in registry order. """
        return [t for t in self.list(document) if t.matches(categories)]

    # ---------- writes ----------
    def add(self, document: dict, entry: TagEntry) -> TagEntry:
        document.setdefault(TAGS_KEY, []).append(entry.to_json())
        return entry

    def remove(self, document: dict, tag_ids: Iterable[str]) -> int:
        """ Delete every entry whose `$id` is in `tag_ids`. Returns count deleted. """
        ids = set(tag_ids)
        raw = document.get(TAGS_KEY)
        if not ids or not raw:
            return 0
        keep = [t for t in raw if t.get(ID_KEY) not in ids]
        removed = len(raw) - len(keep)
        document[TAGS_KEY] = keep
        return removed

    def relabel(self, document: dict, tag_id: str, label: str) -> bool:
        for t in document.get(TAGS_KEY, []):
            if t.get(ID_KEY) == tag_id:
                t[LABEL_KEY] = label
                return True
        return False
