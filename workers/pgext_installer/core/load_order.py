"""
Load order — read sql/load-order.txt.

One fragment file name per line, relative to the fragments directory.
Blank lines and ``#`` comments are skipped; everything else is kept
verbatim and in file order.  The returned list is authoritative.
"""
from __future__ import annotations

from pathlib import Path
from typing import List

from pgext_installer.errors import LoadOrderError


def parse_load_order(text: str) -> List[str]:
    entries: List[str] = []
    for line in text.splitlines():
        name = line.strip()
        if not name or name.startswith("#"):
            continue
        entries.append(name)
    return entries


def read_load_order(manifest_path: Path) -> List[str]:
    """Return the fragment names listed in *manifest_path*, in order."""
    try:
        text = Path(manifest_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadOrderError(f"could not read {manifest_path}: {e}") from e
    return parse_load_order(text)
