"""
Profile — build profile enum and the frozen install profile.

The install profile holds every naming convention the pipeline relies
on (library prefix and suffixes, fragment directory, manifest path) so
that core functions carry no hard-coded layout opinions.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple


@unique
class BuildProfile(str, Enum):
    """Cargo build profile; the value is the target/ subdirectory name."""
    DEBUG = "debug"
    RELEASE = "release"

    @classmethod
    def from_release_flag(cls, is_release: bool) -> "BuildProfile":
        return cls.RELEASE if is_release else cls.DEBUG


@dataclass(frozen=True)
class InstallProfile:
    """Naming conventions and tunables for one install run."""

    profile_id: str

    # Shared-library discovery
    library_prefix: str = "lib"
    library_suffixes: Tuple[str, ...] = (".so", ".dylib", ".dll")
    # The server's loader always looks for {extname}.so
    installed_library_suffix: str = ".so"
    # raise AmbiguousArtifact instead of taking the sorted-first match
    strict_artifact: bool = False

    # Extension project layout
    control_glob: str = "*.control"
    fragments_dir: str = "sql"
    load_order_file: str = "load-order.txt"
    extension_subdir: str = "extension"

    # Control-file property holding the version
    version_property: str = "default_version"

    @property
    def load_order_path(self) -> str:
        return f"{self.fragments_dir}/{self.load_order_file}"

    @classmethod
    def v1(cls, strict_artifact: bool = False) -> "InstallProfile":
        """The default profile: cargo target layout, pg_config share/extension."""
        return cls(
            profile_id="pgx-cargo-v1",
            strict_artifact=strict_artifact,
        )
