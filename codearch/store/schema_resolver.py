"""
Schema `$ref` resolution.

Supports references of the forms:
    - "weapon.schema.json"                 (whole file, relative to the referring file)
    - "defs.schema.json#/$defs/stats"      (JSON pointer into another file)
    - "#/$defs/stats"                      (JSON pointer into the referring file)

Keys written next to a `$ref` are kept and win over the referenced schema, so a property may carry its own
`format` or `title`. Reference cycles are not detected.
"""
from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from codearch.core.errors import SchemaError

logger = logging.getLogger(__name__)

REF_KEY = "$ref"


def _unescape(token: str) -> str:
    return token.replace("~1", "/").replace("~0", "~")


def navigate_pointer(document: Any, pointer: str, where: str = "") -> Any:
    """ Follow an RFC 6901 JSON pointer ("/a/0/b") inside a document.

    Raises
    ------
    SchemaError
        if any step of the pointer does not exist.
    """
    if pointer in ("", "/"):
        return document
    if not pointer.startswith("/"):
        raise SchemaError(f"Invalid JSON pointer {pointer!r} in {where}")

    current = document
    for raw in pointer[1:].split("/"):
        token = _unescape(raw)
        if isinstance(current, dict) and token in current:
            current = current[token]
        elif isinstance(current, list) and token.isdigit() and int(token) < len(current):
            current = current[int(token)]
        else:
            raise SchemaError(f"Pointer {pointer!r} does not resolve in {where}")
    return current


class SchemaResolver:
    """ Loads schema files and substitutes every `$ref` with its (recursively resolved) target. """

    def __init__(self, base_path: Path):
        self.base_path = Path(base_path)
        self._files: dict[Path, Any] = {}

    def load(self, path: Path | str) -> Any:
        """ Read and parse a schema file, caching the parsed content by absolute path. """
        p = Path(path)
        if not p.is_absolute():
            p = self.base_path / p
        p = p.resolve()
        if p in self._files:
            return self._files[p]
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as e:
            raise SchemaError(f"Cannot read schema {p}: {e}") from e
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise SchemaError(f"Schema {p} is not valid JSON: {e}") from e
        self._files[p] = data
        logger.debug("Loaded schema %s", p)
        return data

    def resolve(self, schema: Any, base_path: Path | str | None = None, _root: Any = None) -> Any:
        """ Return a copy of `schema` with every `$ref` replaced by its target.

        Parameters
        ----------
        schema : Any
            The schema (or schema fragment) to walk.
        base_path : Path or str, optional
            Directory relative file references are resolved against. Defaults to the resolver's base path.

        Raises
        ------
        SchemaError
            if a reference target is unreadable, invalid JSON or a pointer that leads nowhere.
        """
        base = Path(base_path) if base_path is not None else self.base_path
        root = schema if _root is None else _root

        if isinstance(schema, list):
            return [self.resolve(s, base, root) for s in schema]
        if not isinstance(schema, dict):
            return schema

        if isinstance(schema.get(REF_KEY), str):
            target, target_base, target_root = self._lookup(schema[REF_KEY], base, root)
            resolved = self.resolve(target, target_base, target_root)
            siblings = {k: self.resolve(v, base, root) for k, v in schema.items() if k != REF_KEY}
            if isinstance(resolved, dict):
                return {**resolved, **siblings}
            return resolved

        return {k: self.resolve(v, base, root) for k, v in schema.items()}

    def resolve_items(self, schema: dict, base_path: Path | str | None = None) -> dict:
        """ Resolve an array schema's `items.$ref` in place, the first time it is needed. """
        items = schema.get("items")
        if isinstance(items, dict) and REF_KEY in items:
            logger.debug("Resolving items reference %s", items[REF_KEY])
            schema["items"] = self.resolve(items, base_path)
        return schema

    def _lookup(self, ref: str, base: Path, root: Any) -> tuple[Any, Path, Any]:
        """ Find the raw target of a reference, with the directory and document it came from. """
        file_part, _, pointer = ref.partition("#")
        if not file_part:
            return copy.deepcopy(navigate_pointer(root, pointer, "local schema")), base, root

        target_path = (base / file_part).resolve()
        document = self.load(target_path)
        target = navigate_pointer(document, pointer, str(target_path))
        return copy.deepcopy(target), target_path.parent, document

    def clear(self) -> None:
        self._files.clear()
