"""Write files via a temporary sibling and ``os.replace``.

Readers of the target path only ever see the previous contents or the new
contents, never a partially written file.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


def write_file_atomic(path: Path | str, text: str, encoding: str = "utf-8") -> None:
    """Replace *path* with *text* in one rename.

    The temporary file lives in the target directory so the final
    ``os.replace`` never crosses a filesystem boundary.  Permission bits of
    an existing target are carried over; new files get the usual ``0o666``
    masked by the process umask.
    """

    target = Path(path)
    try:
        mode = stat.S_IMODE(os.stat(target).st_mode)
    except FileNotFoundError:
        mode = 0o666 & ~_current_umask()

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
    )
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_name, mode)
        os.replace(tmp_name, target)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


__all__ = ["write_file_atomic"]
