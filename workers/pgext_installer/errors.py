"""
Errors — every failure the install pipeline can raise.

All errors are fatal to the pipeline.  The runner records the last
stage it completed on ``InstallError.stage`` before re-raising, so
callers (the CLI, tests) can report where the install stopped.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from pgext_installer.io.schema import InstallStage


class InstallError(Exception):
    """Base class for all install pipeline failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.stage: Optional[InstallStage] = None

    def __str__(self) -> str:
        return self.message


class ControlFileError(InstallError):
    """No usable ``*.control`` file in the extension project."""


class InvalidExtensionName(InstallError):
    """Extension name is empty or contains a path separator."""


class MissingVersionProperty(InstallError):
    """The control file does not declare ``default_version``."""

    def __init__(self, control_file: Path):
        super().__init__(
            "cannot determine extension version number. Is the "
            f"`default_version` property declared in {control_file}?"
        )
        self.control_file = control_file


class BuildFailed(InstallError):
    """The external build process could not be spawned or exited non-zero."""

    def __init__(self, message: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.exit_code = exit_code


class ConfigProbeFailed(InstallError):
    """pg_config failed or returned unusable output."""


class MissingBuildOutput(InstallError):
    """The build-profile output directory does not exist."""


class ArtifactNotFound(InstallError):
    """No shared library in the build output matches the extension."""


class AmbiguousArtifact(InstallError):
    """More than one shared library in the build output matches."""

    def __init__(self, directory: Path, candidates: Sequence[Path]):
        names = ", ".join(p.name for p in candidates)
        super().__init__(
            f"multiple library files match in `{directory}`: {names}"
        )
        self.candidates = list(candidates)


class LoadOrderError(InstallError):
    """The load-order manifest could not be read."""


class FragmentReadError(InstallError):
    """A SQL fragment named in the load order could not be read."""

    def __init__(self, file: Path, reason: str = ""):
        message = f"could not open {file}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.file = file


class DestinationCreateError(InstallError):
    """A destination directory could not be created."""

    def __init__(self, path: Path, reason: str = ""):
        message = f"failed to create destination directory {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.path = path


class CopyError(InstallError):
    """Copying a file into the install tree failed."""

    def __init__(self, src: Path, dest: Path, reason: str = ""):
        message = f"failed copying `{src}` to `{dest}`"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.src = src
        self.dest = dest


class SchemaGenerationError(InstallError):
    """The schema generation hook failed."""
