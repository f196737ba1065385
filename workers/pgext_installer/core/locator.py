"""
Locator — find the compiled shared library among cargo build outputs.

The search directory is ``{target_dir}/{debug|release}``.  A file is a
candidate when its name starts with the library prefix, ends with one of
the platform suffixes and contains the extension name anywhere; the
substring match tolerates ABI/version decorations such as
``libfoo-1a2b3c.so``.  A different extension whose name contains this
one (``foo`` vs ``foobar``) also matches.  The first candidate in name
order is returned with a warning; strict profiles raise AmbiguousArtifact.

Directory listings are treated as unordered sets: candidates are sorted
before any decision is made.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from pgext_installer.errors import (
    AmbiguousArtifact,
    ArtifactNotFound,
    InvalidExtensionName,
    MissingBuildOutput,
)
from pgext_installer.policy.profile import BuildProfile, InstallProfile

logger = logging.getLogger(__name__)


def validate_extension_name(extname: str) -> str:
    """Return *extname* if usable as a file name stem, else raise."""
    if not extname:
        raise InvalidExtensionName("extension name is empty")
    if "/" in extname or "\\" in extname:
        raise InvalidExtensionName(
            f"extension name `{extname}` contains a path separator"
        )
    return extname


def is_library_candidate(filename: str, extname: str, profile: InstallProfile) -> bool:
    """True if *filename* looks like the shared library for *extname*."""
    return (
        extname in filename
        and filename.startswith(profile.library_prefix)
        and filename.endswith(profile.library_suffixes)
    )


def find_candidates(
    search_dir: Path,
    extname: str,
    profile: InstallProfile,
) -> List[Path]:
    """All library candidates in *search_dir*, sorted by file name."""
    try:
        entries = list(search_dir.iterdir())
    except OSError as e:
        raise MissingBuildOutput(f"Unable to read {search_dir}: {e}") from e

    return sorted(
        (
            entry for entry in entries
            if entry.is_file() and is_library_candidate(entry.name, extname, profile)
        ),
        key=lambda p: p.name,
    )


def locate_artifact(
    target_dir: Path,
    build_profile: BuildProfile,
    extname: str,
    profile: InstallProfile | None = None,
) -> Path:
    """
    Return the shared library built for *extname*.

    Raises
    ------
    MissingBuildOutput
        ``target_dir/{profile}`` does not exist or cannot be listed.
    ArtifactNotFound
        No file matches.
    AmbiguousArtifact
        Several files match and the profile is strict.
    """
    if profile is None:
        profile = InstallProfile.v1()
    validate_extension_name(extname)

    search_dir = Path(target_dir) / build_profile.value
    if not search_dir.is_dir():
        raise MissingBuildOutput(f"target directory does not exist: {search_dir}")

    candidates = find_candidates(search_dir, extname, profile)
    if not candidates:
        raise ArtifactNotFound(f"library file not found in: `{search_dir}`")

    if len(candidates) > 1:
        if profile.strict_artifact:
            raise AmbiguousArtifact(search_dir, candidates)
        logger.warning(
            "%d library files match `%s` in %s, using %s",
            len(candidates), extname, search_dir, candidates[0].name,
        )

    logger.debug("Located shared library %s", candidates[0])
    return candidates[0]
