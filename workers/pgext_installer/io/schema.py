"""
Schema — Pydantic models for the install receipt.

One receipt per install run, describing every file written into the
install tree plus the build and library facts it was derived from.

Runtime contract fields (present in every receipt):
  package_name, installer_version, schema_version, profile_id.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum, unique
from typing import List, Optional

from pydantic import BaseModel, Field

from pgext_installer import INSTALLER_VERSION, PACKAGE_NAME, SCHEMA_VERSION


@unique
class InstallStage(str, Enum):
    """Linear install state machine; each member is reached only on success."""
    START = "START"
    BUILD_INVOKED = "BUILD_INVOKED"
    CONFIG_QUERIED = "CONFIG_QUERIED"
    ARTIFACT_LOCATED = "ARTIFACT_LOCATED"
    CONTROL_FILE_COPIED = "CONTROL_FILE_COPIED"
    LIBRARY_COPIED = "LIBRARY_COPIED"
    SCHEMA_GENERATED = "SCHEMA_GENERATED"
    SQL_ASSEMBLED = "SQL_ASSEMBLED"
    UPGRADES_STAGED = "UPGRADES_STAGED"
    DONE = "DONE"


@unique
class FileRole(str, Enum):
    CONTROL_FILE = "control_file"
    SHARED_LIBRARY = "shared_library"
    VERSIONED_SCRIPT = "versioned_script"
    UPGRADE_SCRIPT = "upgrade_script"


class BuildInvocation(BaseModel):
    """The external build command that was run."""
    command: List[str]
    profile: str             # debug | release
    features: str = ""
    exit_code: int = 0


class LibraryMeta(BaseModel):
    """The located shared library, before it is renamed to {extname}.so."""
    filename: str
    path: str
    sha256: str
    size_bytes: int
    is_elf: bool = False
    elf_type: Optional[str] = None     # ET_DYN for a proper shared object
    machine: Optional[str] = None      # e.g. EM_X86_64
    build_id: Optional[str] = None


class InstalledFile(BaseModel):
    """One file written into the install tree."""
    role: FileRole
    source: Optional[str] = None       # None for generated files
    dest: str
    sha256: str
    size_bytes: int


class InstallReceipt(BaseModel):
    """Wrapper for install_receipt.json."""

    package_name: str = PACKAGE_NAME
    installer_version: str = INSTALLER_VERSION
    schema_version: str = SCHEMA_VERSION
    profile_id: str

    extension: str
    version: str
    build_profile: str
    staging_root: str
    pkglibdir: str
    extensiondir: str

    build: Optional[BuildInvocation] = None
    library: Optional[LibraryMeta] = None
    fragments: List[str] = Field(default_factory=list)
    files: List[InstalledFile] = Field(default_factory=list)

    stage: InstallStage = InstallStage.START
    started_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    finished_at: Optional[str] = None

    def files_with_role(self, role: FileRole) -> List[InstalledFile]:
        return [f for f in self.files if f.role == role]
