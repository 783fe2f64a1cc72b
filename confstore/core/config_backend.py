"""Low-level JSON parsing helpers for configuration storage."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping

from confstore.utils.atomic_write import write_file_atomic
from confstore.utils.paths import ensure_dir

log = logging.getLogger(__name__)

JSON_INDENT = "\t"


class JsonConfigBackend:
    """Encapsulates reading and atomic persistence of one JSON document."""

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).resolve()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Dict[str, Any]:
        """Return a fresh copy of the document's top-level object.

        Missing, undecodable or non-object documents read as ``{}`` and are
        left on disk as they are.  Other OS errors propagate.
        """

        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            ensure_dir(self._path.parent)
            return {}
        except UnicodeDecodeError as exc:
            log.warning("Ignoring %s: not valid UTF-8 (%s)", self._path, exc)
            return {}

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("Ignoring %s: malformed JSON (%s)", self._path, exc)
            return {}

        if not isinstance(payload, dict):
            log.warning(
                "Ignoring %s: expected a JSON object, found %s",
                self._path,
                type(payload).__name__,
            )
            return {}

        data: Dict[str, Any] = {}
        data.update(payload)
        return data

    def dumps(self, mapping: Mapping[str, Any]) -> str:
        """Serialize *mapping* as strict JSON.

        ``NaN``/``Infinity`` and circular references are reported as
        :class:`TypeError`, like any other value JSON cannot represent.
        """

        try:
            return json.dumps(
                dict(mapping),
                indent=JSON_INDENT,
                ensure_ascii=False,
                allow_nan=False,
            )
        except ValueError as exc:
            raise TypeError(f"Value is not JSON serializable: {exc}") from exc

    def save(self, mapping: Mapping[str, Any]) -> None:
        """Replace the document with *mapping*."""

        # The directory may have been removed since the last access.
        ensure_dir(self._path.parent)
        text = self.dumps(mapping)
        write_file_atomic(self._path, text)
        log.debug("Saved %d key(s) to %s", len(mapping), self._path)


__all__ = ["JSON_INDENT", "JsonConfigBackend"]
