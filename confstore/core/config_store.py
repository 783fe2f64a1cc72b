"""QObject-based key-value store persisted as a single JSON document."""

from __future__ import annotations

import logging
import math
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Tuple

from PyQt5 import QtCore

from confstore.core.change_notifier import ChangeCallback, ChangeNotifier, Unsubscribe
from confstore.core.config_backend import JsonConfigBackend
from confstore.utils import paths

log = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config"
DEFAULT_FILE_EXTENSION = "json"

_UNSET: Any = object()


def is_blank(value: Any) -> bool:
    """True for values :meth:`ConfigStore.get` treats as absent.

    ``None``, ``False``, zero, NaN and ``""`` count as blank.  Empty lists and
    objects do not.
    """

    if value is None or isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0 or math.isnan(value)
    if isinstance(value, str):
        return value == ""
    return False


def _check_keys(mapping: Mapping) -> None:
    for key in mapping:
        if not isinstance(key, str):
            raise TypeError(
                f"Expected keys to be of type `str`, got {type(key).__name__}"
            )


class ConfigStore(QtCore.QObject):
    """Flat settings mapping whose only source of truth is the file on disk.

    Every read parses the file again and every mutation rewrites it
    atomically before ``changed`` is emitted.
    """

    changed = QtCore.pyqtSignal()

    def __init__(
        self,
        *,
        cwd: Optional[Path | str] = None,
        config_name: str = DEFAULT_CONFIG_NAME,
        project_name: Optional[str] = None,
        defaults: Optional[Mapping[str, Any]] = None,
        file_extension: str = DEFAULT_FILE_EXTENSION,
        backend: Optional[JsonConfigBackend] = None,
    ) -> None:
        super().__init__()
        self._backend = backend or JsonConfigBackend(
            self._resolve_path(cwd, config_name, project_name, file_extension)
        )
        self._defaults: Dict[str, Any] = dict(defaults or {})
        _check_keys(self._defaults)
        self._notifier = ChangeNotifier(self)
        log.debug("Config store at %s", self.path)

        if self._defaults:
            current = self.store
            merged = {**self._defaults, **current}
            if merged != current:
                self.store = merged

    @staticmethod
    def _resolve_path(
        cwd: Optional[Path | str],
        config_name: str,
        project_name: Optional[str],
        file_extension: str,
    ) -> Path:
        if project_name is None and not cwd:
            project_name = paths.find_project_name()
        if not project_name and not cwd:
            raise ValueError(
                "Project name could not be inferred. "
                "Please specify the `project_name` option."
            )

        if cwd:
            directory = Path(os.fspath(cwd))
        else:
            directory = paths.default_config_dir(project_name)

        extension = file_extension.lstrip(".")
        return directory / f"{config_name}.{extension}"

    # ------------------------------------------------------------------
    # Whole-document access
    # ------------------------------------------------------------------
    @property
    def path(self) -> Path:
        return self._backend.path

    @property
    def defaults(self) -> Dict[str, Any]:
        return dict(self._defaults)

    @property
    def store(self) -> Dict[str, Any]:
        return self._backend.load()

    @store.setter
    def store(self, value: Mapping[str, Any]) -> None:
        if not isinstance(value, Mapping):
            raise TypeError(
                f"Expected `store` to be a mapping, got {type(value).__name__}"
            )
        _check_keys(value)
        self._backend.save(value)
        self.changed.emit()

    @property
    def size(self) -> int:
        return len(self.store)

    def __len__(self) -> int:
        return self.size

    def __bool__(self) -> bool:
        # An empty store is still a usable store.
        return True

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        snapshot = self.store
        for key, value in snapshot.items():
            yield key, value

    # ------------------------------------------------------------------
    # Key access
    # ------------------------------------------------------------------
    def get(self, key: Any, default: Any = None) -> Any:
        """Return the value for *key*, or *default* when missing or blank.

        A stored ``False``, ``0`` or ``""`` yields *default* too; see
        :func:`is_blank`.
        """

        data = self.store
        try:
            value = data.get(key)
        except TypeError:  # unhashable key
            return default
        return default if is_blank(value) else value

    def has(self, key: Any) -> bool:
        data = self.store
        try:
            return key in data
        except TypeError:
            return False

    def __contains__(self, key: object) -> bool:
        return self.has(key)

    def set(self, key: str | Mapping[str, Any], value: Any = _UNSET) -> None:
        """Store one value, or merge every pair of a mapping.

        ``set("theme", "dark")`` and ``set({"theme": "dark", "size": 3})``
        are both accepted.  ``None`` is stored as JSON ``null``; removing a
        key is done with :meth:`delete`.
        """

        if isinstance(key, str):
            self.set_one(key, value)
        elif isinstance(key, Mapping):
            self.set_many(key)
        else:
            raise TypeError(
                "Expected `key` to be of type `str` or a mapping, "
                f"got {type(key).__name__}"
            )

    def set_one(self, key: str, value: Any = _UNSET) -> None:
        if not isinstance(key, str):
            raise TypeError(
                f"Expected `key` to be of type `str`, got {type(key).__name__}"
            )
        if value is _UNSET:
            raise TypeError("Use `delete()` to clear values")
        data = self.store
        data[key] = value
        self.store = data

    def set_many(self, values: Mapping[str, Any]) -> None:
        if not isinstance(values, Mapping):
            raise TypeError(
                f"Expected a mapping of values, got {type(values).__name__}"
            )
        _check_keys(values)
        data = self.store
        data.update(values)
        self.store = data

    def delete(self, key: str) -> None:
        data = self.store
        data.pop(key, None)
        self.store = data

    def clear(self) -> None:
        self.store = {}

    def reset(self, *keys: str) -> None:
        """Restore *keys* to their construction-time defaults.

        Keys without a default keep their current value.
        """

        data = self.store
        for key in keys:
            if key in self._defaults:
                data[key] = self._defaults[key]
        self.store = data

    # ------------------------------------------------------------------
    # Change notification
    # ------------------------------------------------------------------
    def on_did_change(self, key: str, callback: ChangeCallback) -> Unsubscribe:
        return self._notifier.subscribe(key, callback)

    def on_did_any_change(self, callback: ChangeCallback) -> Unsubscribe:
        return self._notifier.subscribe_any(callback)

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier


__all__ = [
    "ConfigStore",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_FILE_EXTENSION",
    "is_blank",
]
