"""
pg_config — query the PostgreSQL installation layout.

Each query runs ``pg_config <flag>`` and returns the trimmed first line
of its output.  Install destinations are derived from ``--pkglibdir``
and ``--sharedir``; the build features from the major version in
``--version``.
"""
from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional

from pgext_installer.errors import ConfigProbeFailed

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"PostgreSQL\s+(\d+)")


def parse_major_version(output: str) -> int:
    """``PostgreSQL 12.3`` / ``PostgreSQL 16devel`` -> major version."""
    match = _VERSION_RE.search(output)
    if match is None:
        raise ConfigProbeFailed(f"unable to parse PostgreSQL version from `{output}`")
    return int(match.group(1))


class PgConfig:
    """Thin wrapper around one pg_config executable."""

    def __init__(self, path: Optional[str] = None, extension_subdir: str = "extension"):
        self.path = path or "pg_config"
        self.extension_subdir = extension_subdir

    def run(self, flag: str) -> str:
        cmd = [self.path, flag]
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ConfigProbeFailed(f"failed to run {self.path}: {e}") from e

        if result.returncode != 0:
            raise ConfigProbeFailed(
                f"`{self.path} {flag}` exited with code {result.returncode}: "
                f"{result.stderr.strip()}"
            )

        value = result.stdout.strip()
        if not value:
            raise ConfigProbeFailed(f"`{self.path} {flag}` returned no output")
        logger.debug("%s %s -> %s", self.path, flag, value)
        return value

    def major_version(self) -> int:
        return parse_major_version(self.run("--version"))

    def pkglibdir(self) -> Path:
        return Path(self.run("--pkglibdir"))

    def sharedir(self) -> Path:
        return Path(self.run("--sharedir"))

    def extensiondir(self) -> Path:
        return self.sharedir() / self.extension_subdir
