"""
Cargo — invoke `cargo build` for the extension.

The build inherits the caller's stdout/stderr and blocks until cargo
exits.  There is no timeout.  Only the exit status is inspected.
"""
from __future__ import annotations

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional

from pgext_installer.config import BuildSettings
from pgext_installer.errors import BuildFailed
from pgext_installer.io.schema import BuildInvocation
from pgext_installer.policy.profile import BuildProfile

logger = logging.getLogger(__name__)


class CargoBuilder:
    """Builds the extension crate with features derived from the pg version."""

    def __init__(self, settings: Optional[BuildSettings] = None):
        self.settings = settings or BuildSettings()

    def command(self, profile: BuildProfile, major_version: int) -> List[str]:
        """The argv for ``cargo build``."""
        features = self.settings.features_for(major_version)

        cmd = [self.settings.CARGO, "build"]
        if profile == BuildProfile.RELEASE:
            cmd.append("--release")

        if features.strip():
            cmd.extend(["--features", features, "--no-default-features"])

        cmd.extend(self.settings.build_flags)
        return cmd

    def build(self, profile: BuildProfile, major_version: int, cwd: Path) -> BuildInvocation:
        """Run the build; raise BuildFailed unless cargo exits 0."""
        cmd = self.command(profile, major_version)
        features = self.settings.features_for(major_version)
        command_str = shlex.join(cmd)

        logger.info("building extension with features `%s`", features)
        logger.info("%s", command_str)

        try:
            result = subprocess.run(cmd, cwd=str(cwd))
        except OSError as e:
            raise BuildFailed(f"failed to spawn cargo: {command_str}: {e}") from e

        if result.returncode != 0:
            raise BuildFailed(
                f"failed to build extension (exit code {result.returncode})",
                exit_code=result.returncode,
            )

        return BuildInvocation(
            command=cmd,
            profile=profile.value,
            features=features,
            exit_code=result.returncode,
        )
