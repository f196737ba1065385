"""
Relocate — re-target absolute install paths under a staging root.

pg_config reports absolute directories (/usr/lib/postgresql/15/lib).
Stripping the anchor turns them into paths relative to a logical root,
so joining the result onto any staging directory yields the layout
"as if installed at that root".
"""
from __future__ import annotations

from pathlib import Path, PurePath
from typing import Optional, Union

PathLike = Union[str, PurePath]


def relocate(path: PathLike) -> Path:
    """Return *path* relative to its root; relative input is returned as is."""
    p = Path(path)
    if not p.anchor:
        return p
    return Path(*p.parts[1:])


def rebase(path: PathLike, staging_root: Optional[PathLike] = None) -> Path:
    """Place *path* under *staging_root* (the filesystem root when None)."""
    root = Path(staging_root) if staging_root is not None else Path(Path.cwd().anchor)
    return root / relocate(path)
