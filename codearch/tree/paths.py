""" Walking a loaded document along a node path (object keys and array indices). """
from __future__ import annotations

from typing import Any

from codearch.core.errors import DocumentError


def _step(container: Any, key) -> Any:
    if isinstance(container, list) and isinstance(key, str) and key.isdigit():
        key = int(key)
    if isinstance(container, dict) and not isinstance(key, int) and key in container:
        return container[key]
    if isinstance(container, list) and isinstance(key, int) and -len(container) <= key < len(container):
        return container[key]
    raise KeyError(key)


def locate(document: Any, path) -> Any:
    """ Return the value addressed by `path`.

    Raises
    ------
    DocumentError
        if some segment of the path does not exist in the document.
    """
    current = document
    for i, key in enumerate(path):
        try:
            current = _step(current, key)
        except KeyError:
            raise DocumentError(f"Path {list(path[:i + 1])} not found in document") from None
    return current


def _check_index(container: list, index: int) -> None:
    if not 0 <= index <= len(container):
        raise DocumentError(f"Index {index} is out of range for an array of {len(container)}")


def assign(document: dict, path, value: Any) -> dict:
    """ Set `value` at `path`, creating any missing intermediate containers on the way.
    An array index may address an existing element or the slot just past the end; arrays are never padded.
    An empty path replaces the whole (object) document in place.
    """
    path = list(path)
    if not path:
        if not isinstance(value, dict):
            raise DocumentError("A document root must be an object")
        document.clear()
        document.update(value)
        return document

    current = document
    for key, nxt in zip(path[:-1], path[1:]):
        fresh = [] if isinstance(nxt, int) else {}
        if isinstance(current, dict):
            child = current.get(key)
            if not isinstance(child, (dict, list)):
                child = current[key] = fresh
        elif isinstance(current, list) and isinstance(key, int):
            _check_index(current, key)
            if key == len(current):
                current.append(fresh)
            child = current[key]
            if not isinstance(child, (dict, list)):
                child = current[key] = fresh
        else:
            raise DocumentError(f"Cannot descend into {type(current).__name__} with key {key!r}")
        current = child

    last = path[-1]
    if isinstance(current, dict):
        current[last] = value
    elif isinstance(current, list) and isinstance(last, int):
        _check_index(current, last)
        if last == len(current):
            current.append(value)
        else:
            current[last] = value
    else:
        raise DocumentError(f"Cannot assign into {type(current).__name__} with key {last!r}")
    return document


def detach(document: Any, path) -> Any:
    """ Remove the slot addressed by `path` from its parent container and return its value.
    Arrays are spliced by index, objects lose the key.
    """
    path = list(path)
    if not path:
        raise DocumentError("Cannot detach the document root")
    parent = locate(document, path[:-1])
    last = path[-1]
    try:
        value = _step(parent, last)
    except KeyError:
        raise DocumentError(f"Path {path} not found in document") from None
    if isinstance(parent, list):
        last = int(last)
    del parent[last]
    return value
