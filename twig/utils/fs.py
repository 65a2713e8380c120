"""Filesystem helpers."""

import os
import tempfile
from pathlib import Path
from typing import Union


def atomic_write(path: Union[str, Path], data: bytes) -> None:
    """
    Write data to path so readers see either the old or the new content.

    The bytes go to a temporary file in the same directory, which is then
    renamed over the target. Parent directories are created as needed.

    Args:
        path: Destination file
        data: Full new content
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=f'.{path.name}.', suffix='.tmp')
    try:
        with os.fdopen(fd, 'wb') as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


def atomic_write_text(path: Union[str, Path], text: str) -> None:
    """Text variant of atomic_write (UTF-8)."""
    atomic_write(path, text.encode('utf-8'))
