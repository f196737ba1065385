"""
Copier — copy one file into the install tree.

Creates the destination directory on demand, logs a progress line and
copies bytes.  Both failure modes are fatal and carry the paths involved.
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Optional

from pgext_installer.errors import CopyError, DestinationCreateError

logger = logging.getLogger(__name__)


def ensure_dir(path: Path) -> Path:
    """Create *path* (and parents) unless it already exists."""
    if not path.is_dir():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationCreateError(path, str(e)) from e
    return path


def display_path(path: Path, base: Optional[Path] = None) -> str:
    """Show *path* relative to *base* when it lives under it."""
    if base is not None:
        try:
            return str(Path(path).relative_to(base))
        except ValueError:
            pass
    return str(path)


def copy_file(src: Path, dest: Path, what: str, base: Optional[Path] = None) -> Path:
    """Copy *src* to *dest*, creating ``dest.parent`` first."""
    ensure_dir(dest.parent)
    logger.info("Copying %s to `%s`", what, display_path(dest, base))
    try:
        shutil.copyfile(src, dest)
    except OSError as e:
        raise CopyError(src, dest, str(e)) from e
    return dest
