"""
Assembler — build the versioned install script and stage upgrade scripts.

Concatenation
    Every fragment named by the load order is written, in that order, as

        --
        -- sql/<fragment>
        --
        <fragment contents>
        <three newlines>

    The banner path is relative to the extension project, never absolute.
    Banners use ``\\n``; fragment bytes are copied untranslated (CRLF and
    lone CR survive), so the script is a byte-for-byte function of
    (load order, fragment contents).

Upgrade staging
    Files named ``{extname}--*.sql`` in the fragments directory are
    migration scripts between versions.  They are copied verbatim, never
    concatenated.
"""
from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

from pgext_installer.core.copier import copy_file, display_path, ensure_dir
from pgext_installer.errors import FragmentReadError

logger = logging.getLogger(__name__)

BANNER_RULE = "--\n"
FRAGMENT_TRAILER = "\n\n\n"


@dataclass
class AssemblyResult:
    """What ``assemble`` wrote."""
    output_path: Path
    fragments: List[str] = field(default_factory=list)
    sha256: str = ""
    size_bytes: int = 0


def fragment_label(fragments_dir: Path, name: str) -> str:
    """Banner label for a fragment: ``<fragments dir name>/<name>``."""
    return f"{Path(fragments_dir).name}/{name}"


def read_fragment(fragments_dir: Path, name: str) -> str:
    """Fragment text exactly as on disk; no newline translation."""
    path = Path(fragments_dir) / name
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FragmentReadError(path, str(e)) from e


def render_fragment(label: str, contents: str) -> str:
    return f"{BANNER_RULE}-- {label}\n{BANNER_RULE}{contents}{FRAGMENT_TRAILER}"


def iter_rendered(
    ordered_fragments: Sequence[str],
    fragments_dir: Path,
) -> Iterator[Tuple[str, bytes]]:
    """Yield ``(name, bannered bytes)`` per fragment, in load order."""
    for name in ordered_fragments:
        chunk = render_fragment(
            fragment_label(fragments_dir, name),
            read_fragment(fragments_dir, name),
        )
        yield name, chunk.encode("utf-8")


def render_fragments(ordered_fragments: Sequence[str], fragments_dir: Path) -> str:
    """Concatenate *ordered_fragments* into script text, in the given order."""
    return b"".join(
        data for _, data in iter_rendered(ordered_fragments, fragments_dir)
    ).decode("utf-8")


def assemble(
    ordered_fragments: Sequence[str],
    fragments_dir: Path,
    output_path: Path,
    base: Optional[Path] = None,
) -> AssemblyResult:
    """
    Write the versioned script at *output_path*.

    The file is truncated first and written fragment by fragment; a
    FragmentReadError part-way through leaves a partial file behind.
    """
    fragments_dir = Path(fragments_dir)
    output_path = Path(output_path)
    ensure_dir(output_path.parent)

    logger.info("Writing extension schema to `%s`", display_path(output_path, base))

    h = hashlib.sha256()
    size = 0
    with open(output_path, "wb") as out:
        for name, data in iter_rendered(ordered_fragments, fragments_dir):
            out.write(data)
            h.update(data)
            size += len(data)
            logger.debug("Appended fragment %s", name)

    return AssemblyResult(
        output_path=output_path,
        fragments=list(ordered_fragments),
        sha256=h.hexdigest(),
        size_bytes=size,
    )


def is_upgrade_script(filename: str, extname: str) -> bool:
    return filename.startswith(f"{extname}--") and filename.endswith(".sql")


def find_upgrade_scripts(fragments_dir: Path, extname: str) -> List[Path]:
    """Upgrade scripts in *fragments_dir*, sorted by name."""
    fragments_dir = Path(fragments_dir)
    try:
        entries = list(fragments_dir.iterdir())
    except OSError as e:
        raise FragmentReadError(fragments_dir, str(e)) from e

    return sorted(
        (p for p in entries if p.is_file() and is_upgrade_script(p.name, extname)),
        key=lambda p: p.name,
    )


def stage_upgrades(
    fragments_dir: Path,
    extname: str,
    dest_dir: Path,
    base: Optional[Path] = None,
) -> List[Path]:
    """Copy every ``{extname}--*.sql`` file into *dest_dir*; return the copies."""
    scripts = find_upgrade_scripts(fragments_dir, extname)
    ensure_dir(Path(dest_dir))

    staged: List[Path] = []
    for src in scripts:
        staged.append(
            copy_file(src, Path(dest_dir) / src.name, "extension schema file", base)
        )
    return staged
