"""Filesystem location helpers used when constructing a store."""

from __future__ import annotations

import configparser
import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Optional

from PyQt5 import QtCore

log = logging.getLogger(__name__)


def ensure_dir(path: Path | str) -> Path:
    """Create *path* and any missing parents; existing directories are fine."""

    directory = Path(path)
    directory.mkdir(parents=True, exist_ok=True)
    return directory


def script_dir() -> Path:
    """Directory of the running script, or the working directory if unknown."""

    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        return Path.cwd()
    return Path(os.path.dirname(os.path.abspath(argv0)))


def _name_from_pyproject(pyproject: Path) -> Optional[str]:
    with pyproject.open("rb") as handle:
        data = tomllib.load(handle)
    name = data.get("project", {}).get("name")
    if not name:
        name = data.get("tool", {}).get("poetry", {}).get("name")
    return name or None


def _name_from_setup_cfg(setup_cfg: Path) -> Optional[str]:
    parser = configparser.ConfigParser()
    parser.read(setup_cfg, encoding="utf-8")
    name = parser.get("metadata", "name", fallback="").strip()
    return name or None


def find_project_name(start: Path | str | None = None) -> Optional[str]:
    """Return the project name declared by the nearest packaging manifest.

    Walks from *start* (default: :func:`script_dir`) towards the filesystem
    root.  The first directory holding ``pyproject.toml`` or ``setup.cfg``
    decides the result, even when that manifest carries no name.
    """

    directory = Path(start) if start is not None else script_dir()
    directory = directory.resolve()
    for candidate in (directory, *directory.parents):
        pyproject = candidate / "pyproject.toml"
        if pyproject.is_file():
            name = _name_from_pyproject(pyproject)
            log.debug("Project name %r from %s", name, pyproject)
            return name
        setup_cfg = candidate / "setup.cfg"
        if setup_cfg.is_file():
            name = _name_from_setup_cfg(setup_cfg)
            log.debug("Project name %r from %s", name, setup_cfg)
            return name
    return None


def default_config_dir(project_name: str) -> Path:
    """Per-user config directory for *project_name* following OS conventions.

    ``~/.config/<name>`` on Linux (honoring ``XDG_CONFIG_HOME``),
    ``~/Library/Preferences/<name>`` on macOS and
    ``%LOCALAPPDATA%\\<name>`` on Windows.
    """

    base = QtCore.QStandardPaths.writableLocation(
        QtCore.QStandardPaths.GenericConfigLocation
    )
    if not base:
        base = str(Path.home() / ".config")
    return Path(base) / project_name


__all__ = ["default_config_dir", "ensure_dir", "find_project_name", "script_dir"]
