from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any

from codearch.core.errors import UnsupportedFormatError
from codearch.store.models import JsonType, TagEntry, LABEL_KEY, ID_KEY, TAG_KEY

logger = logging.getLogger(__name__)


@dataclass
class Synthesized:
    """ A freshly built default value plus the tag entries its tag-bearing objects need registered. """
    value: Any = None
    tags: list[TagEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def new_id() -> str:
    return str(uuid.uuid4())


def synthesize(schema: dict, name: str = "") -> Synthesized:
    """ Build a default-valued instance of `schema`.

    string -> "", number -> 0, boolean -> False, array -> [], object -> one default per property. The reserved
    keys get `$label` = name, `$id` = a new uuid and `$tag` = the schema's const. Properties of an unsupported
    type are skipped with a warning. Nested objects are labelled with their property key.

    Parameters
    ----------
    schema : dict
        A fully resolved schema.
    name : str
        Label for the top-level object.

    Returns
    -------
    Synthesized

    Raises
    ------
    UnsupportedFormatError
        if the top-level schema itself has an unsupported type.
    """
    out = Synthesized()
    out.value = _build(schema, name, out)
    return out


def _build(schema: dict, name: str, out: Synthesized) -> Any:
    match JsonType.of(schema):
        case JsonType.STRING:
            return ""
        case JsonType.NUMBER:
            return 0
        case JsonType.BOOLEAN:
            return False
        case JsonType.ARRAY:
            return []
        case JsonType.OBJECT:
            return _build_object(schema, name, out)


def _build_object(schema: dict, name: str, out: Synthesized) -> dict:
    obj: dict[str, Any] = {}
    for key, sub in (schema.get("properties") or {}).items():
        sub = sub or {}
        if key == LABEL_KEY:
            obj[key] = name
        elif key == ID_KEY:
            obj[key] = new_id()
        elif key == TAG_KEY:
            if sub.get("const") is None:
                _warn(out, f"Property {TAG_KEY} has no const; object is not tagged")
                continue
            obj[key] = sub["const"]
        else:
            try:
                obj[key] = _build(sub, key, out)
            except UnsupportedFormatError:
                _warn(out, f"Type {sub.get('type')!r} in property {key!r} is not supported")

    if TAG_KEY in obj:
        # A tag entry needs an identifier even when the schema forgot to declare one
        obj.setdefault(ID_KEY, new_id())
        out.tags.append(TagEntry(category=obj[TAG_KEY], label=obj.get(LABEL_KEY, name), id=obj[ID_KEY]))
    return obj


def _warn(out: Synthesized, msg: str) -> None:
    logger.warning(msg)
    out.warnings.append(msg)
