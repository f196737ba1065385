"""
Library — file metadata for the located shared library.

Records hash and size for every artifact, and for ELF objects the
header type, machine and GNU build-id (pyelftools).  Mach-O and PE
libraries are reported as non-ELF.  Nothing here gates the install.
"""
from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Optional

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from pgext_installer.io.schema import LibraryMeta

logger = logging.getLogger(__name__)


def hash_file(path: Path) -> str:
    """SHA-256 of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def _read_build_id(elf: ELFFile) -> Optional[str]:
    section = elf.get_section_by_name(".note.gnu.build-id")
    if section is None:
        return None
    for note in section.iter_notes():
        if note["n_type"] == "NT_GNU_BUILD_ID":
            return note["n_desc"]
    return None


def inspect_library(path: Path) -> LibraryMeta:
    """Collect metadata for the shared library at *path*."""
    meta = LibraryMeta(
        filename=path.name,
        path=str(path),
        sha256=hash_file(path),
        size_bytes=path.stat().st_size,
    )

    with open(path, "rb") as f:
        try:
            elf = ELFFile(f)
        except ELFError:
            logger.debug("%s is not an ELF object", path)
            return meta

        meta.is_elf = True
        meta.elf_type = elf.header["e_type"]
        meta.machine = elf.header["e_machine"]
        try:
            meta.build_id = _read_build_id(elf)
        except ELFError as e:
            logger.warning("Could not read build-id from %s: %s", path, e)

    if meta.elf_type != "ET_DYN":
        logger.warning("%s is an ELF %s, not a shared object", path.name, meta.elf_type)
    return meta
