from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from codearch.core.errors import DocumentError

logger = logging.getLogger(__name__)


class DocumentStore:
    """ Reads and writes whole JSON documents living in one project directory.
    Writes go to a temporary sibling file which then replaces the target, so a reader never sees a half-written
    document and a failed write leaves the previous content in place.
    """

    def __init__(self, root: Path, ext: str = ".json"):
        self.root = Path(root)
        self.ext = ext if ext.startswith(".") else f".{ext}"

    # ---------- Paths ----------
    def path_for(self, name: str) -> Path:
        """ The file a document called `name` lives in. """
        return self.root / f"{name}{self.ext}"

    def list(self) -> list[str]:
        """ Sorted file names in the project directory with the document extension. """
        try:
            names = os.listdir(self.root)
        except OSError as e:
            raise DocumentError(f"Cannot list documents in {self.root}: {e}") from e
        return sorted(n for n in names if n.endswith(self.ext) and (self.root / n).is_file())

    def exists(self, path: Path | str) -> bool:
        return Path(path).exists()

    # ---------- Read / Write ----------
    def read(self, path: Path | str) -> Any:
        """ Load the JSON document at `path`.

        Raises
        ------
        DocumentError
            if the file is missing, unreadable or not valid JSON.
        """
        p = Path(path)
        try:
            text = p.read_text(encoding="utf-8")
        except OSError as e:
            raise DocumentError(f"Cannot read document {p}: {e}") from e
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentError(f"Document {p} is not valid JSON: {e}") from e

    def write(self, path: Path | str, value: Any) -> None:
        """ Replace the document at `path` with `value` in one step.

        Raises
        ------
        DocumentError
            if serialising or writing fails; the previous file content is kept.
        """
        p = Path(path)
        try:
            text = json.dumps(value, indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise DocumentError(f"Cannot serialise document {p}: {e}") from e

        try:
            fd, tmp = tempfile.mkstemp(prefix=f".{p.name}.", suffix=".tmp", dir=p.parent)
        except OSError as e:
            raise DocumentError(f"Cannot write document {p}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, p)
        except OSError as e:
            Path(tmp).unlink(missing_ok=True)
            raise DocumentError(f"Cannot write document {p}: {e}") from e
        logger.debug("Wrote %s", p)

    def delete(self, path: Path | str) -> None:
        p = Path(path)
        try:
            p.unlink()
        except OSError as e:
            raise DocumentError(f"Cannot delete document {p}: {e}") from e
        logger.debug("Deleted %s", p)
