"""Persistent key-value settings backed by a single JSON file."""

from confstore.core.change_notifier import ChangeNotifier
from confstore.core.config_backend import JsonConfigBackend
from confstore.core.config_store import ConfigStore, is_blank

__version__ = "1.0.0"

__all__ = ["ChangeNotifier", "ConfigStore", "JsonConfigBackend", "is_blank"]
