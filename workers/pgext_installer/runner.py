"""
Install runner — top-level orchestration: extension project → install tree.

The pipeline is linear (see ``InstallStage``):

    START → BUILD_INVOKED → CONFIG_QUERIED → ARTIFACT_LOCATED
          → CONTROL_FILE_COPIED → LIBRARY_COPIED → SCHEMA_GENERATED
          → SQL_ASSEMBLED → UPGRADES_STAGED → DONE

The first failure aborts the run.  Files already copied stay where they
are; there is no rollback.  The build and pg_config collaborators can be
injected so the pipeline runs without spawning processes.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from pgext_installer.config import BuildSettings
from pgext_installer.core.assembler import assemble, stage_upgrades
from pgext_installer.core.control import (
    ExtensionIdentity,
    find_control_file,
    resolve_identity,
)
from pgext_installer.core.copier import copy_file
from pgext_installer.core.library import hash_file, inspect_library
from pgext_installer.core.load_order import read_load_order
from pgext_installer.core.locator import locate_artifact
from pgext_installer.core.relocate import rebase
from pgext_installer.errors import InstallError, SchemaGenerationError
from pgext_installer.io.schema import (
    FileRole,
    InstalledFile,
    InstallReceipt,
    InstallStage,
)
from pgext_installer.io.writer import write_receipt
from pgext_installer.policy.profile import BuildProfile, InstallProfile
from pgext_installer.toolchain.cargo import CargoBuilder
from pgext_installer.toolchain.pg_config import PgConfig

logger = logging.getLogger(__name__)

SchemaGenerator = Callable[[Path], None]


def _installed(role: FileRole, dest: Path, source: Optional[Path] = None) -> InstalledFile:
    return InstalledFile(
        role=role,
        source=str(source) if source is not None else None,
        dest=str(dest),
        sha256=hash_file(dest),
        size_bytes=dest.stat().st_size,
    )


class InstallPlanner:
    """
    One install run for one extension project.

    Parameters
    ----------
    project_dir:
        Crate directory holding the ``.control`` file and ``sql/``.
    is_release:
        Build and install the release profile instead of debug.
    staging_root:
        Directory the install layout is placed under.  None installs
        into the real filesystem root.
    builder:
        Object with ``build(profile, major_version, cwd)``.  Defaults to
        ``CargoBuilder``.
    pg_layout:
        Object with ``major_version()``, ``pkglibdir()`` and
        ``extensiondir()``.  Defaults to ``PgConfig``.
    schema_generator:
        Optional hook called with *project_dir* before the versioned
        script is assembled.
    """

    def __init__(
        self,
        project_dir: Path,
        pg_config: Optional[str] = None,
        is_release: bool = False,
        staging_root: Optional[Path] = None,
        *,
        settings: Optional[BuildSettings] = None,
        profile: Optional[InstallProfile] = None,
        builder=None,
        pg_layout=None,
        schema_generator: Optional[SchemaGenerator] = None,
    ):
        self.project_dir = Path(project_dir)
        self.build_profile = BuildProfile.from_release_flag(is_release)
        self.staging_root = Path(staging_root) if staging_root is not None else None
        self.settings = settings or BuildSettings()
        self.profile = profile or InstallProfile.v1()
        self.builder = builder or CargoBuilder(self.settings)
        self.pg_layout = pg_layout or PgConfig(
            pg_config or self.settings.PGX_PG_CONFIG_PATH,
            extension_subdir=self.profile.extension_subdir,
        )
        self.schema_generator = schema_generator
        self.stage = InstallStage.START

    def _advance(self, stage: InstallStage, receipt: Optional[InstallReceipt] = None):
        self.stage = stage
        if receipt is not None:
            receipt.stage = stage
        logger.debug("Install stage: %s", stage.value)

    def run(self) -> InstallReceipt:
        """Execute the whole pipeline; raise InstallError on the first failure."""
        try:
            return self._run()
        except InstallError as e:
            e.stage = self.stage
            logger.debug("Install aborted after %s", self.stage.value)
            raise

    def _run(self) -> InstallReceipt:
        project_dir = self.project_dir
        profile = self.profile

        # ── Identity: resolved before any side effect ────────────────────
        control_file, extname = find_control_file(project_dir, profile)
        identity: ExtensionIdentity = resolve_identity(control_file, extname, profile)
        logger.debug("Build settings: %s", self.settings.describe())

        # ── Build ────────────────────────────────────────────────────────
        major_version = self.pg_layout.major_version()
        invocation = self.builder.build(self.build_profile, major_version, project_dir)
        self._advance(InstallStage.BUILD_INVOKED)

        logger.info("installing extension")

        # ── pg_config layout ─────────────────────────────────────────────
        pkglibdir = self.pg_layout.pkglibdir()
        extensiondir = self.pg_layout.extensiondir()
        lib_dest_dir = rebase(pkglibdir, self.staging_root)
        ext_dest_dir = rebase(extensiondir, self.staging_root)

        receipt = InstallReceipt(
            profile_id=profile.profile_id,
            extension=identity.name,
            version=identity.version,
            build_profile=self.build_profile.value,
            staging_root=str(self.staging_root or Path(lib_dest_dir.anchor)),
            pkglibdir=str(pkglibdir),
            extensiondir=str(extensiondir),
            build=invocation,
        )
        self._advance(InstallStage.CONFIG_QUERIED, receipt)

        # ── Shared library ───────────────────────────────────────────────
        shlib = locate_artifact(
            self.settings.target_dir(project_dir),
            self.build_profile,
            identity.name,
            profile,
        )
        receipt.library = inspect_library(shlib)
        self._advance(InstallStage.ARTIFACT_LOCATED, receipt)

        # ── Control file ─────────────────────────────────────────────────
        dest = copy_file(
            control_file, ext_dest_dir / control_file.name, "control file", project_dir
        )
        receipt.files.append(_installed(FileRole.CONTROL_FILE, dest, control_file))
        self._advance(InstallStage.CONTROL_FILE_COPIED, receipt)

        dest = copy_file(
            shlib,
            lib_dest_dir / f"{identity.name}{profile.installed_library_suffix}",
            "shared library",
            project_dir,
        )
        receipt.files.append(_installed(FileRole.SHARED_LIBRARY, dest, shlib))
        self._advance(InstallStage.LIBRARY_COPIED, receipt)

        # ── Schema generation hook ───────────────────────────────────────
        if self.schema_generator is not None:
            try:
                self.schema_generator(project_dir)
            except InstallError:
                raise
            except Exception as e:
                raise SchemaGenerationError(f"failed to generate SQL schema: {e}") from e
        self._advance(InstallStage.SCHEMA_GENERATED, receipt)

        # ── Versioned script ─────────────────────────────────────────────
        fragments_dir = project_dir / profile.fragments_dir
        load_order = read_load_order(project_dir / profile.load_order_path)
        result = assemble(
            load_order, fragments_dir, ext_dest_dir / identity.script_name, project_dir
        )
        receipt.fragments = result.fragments
        receipt.files.append(
            InstalledFile(
                role=FileRole.VERSIONED_SCRIPT,
                dest=str(result.output_path),
                sha256=result.sha256,
                size_bytes=result.size_bytes,
            )
        )
        self._advance(InstallStage.SQL_ASSEMBLED, receipt)

        # ── Upgrade scripts ──────────────────────────────────────────────
        for dest in stage_upgrades(fragments_dir, identity.name, ext_dest_dir, project_dir):
            receipt.files.append(
                _installed(FileRole.UPGRADE_SCRIPT, dest, fragments_dir / dest.name)
            )
        self._advance(InstallStage.UPGRADES_STAGED, receipt)

        receipt.finished_at = datetime.now(timezone.utc).isoformat()
        self._advance(InstallStage.DONE, receipt)
        logger.info("Finished installing %s", identity.name)
        return receipt


def run_install(
    project_dir: Path,
    pg_config: Optional[str] = None,
    is_release: bool = False,
    staging_root: Optional[Path] = None,
    *,
    settings: Optional[BuildSettings] = None,
    profile: Optional[InstallProfile] = None,
    builder=None,
    pg_layout=None,
    schema_generator: Optional[SchemaGenerator] = None,
    receipt_path: Optional[Path] = None,
) -> InstallReceipt:
    """
    Build and install the extension in *project_dir*.

    Returns the InstallReceipt; when *receipt_path* is given it is also
    written there as JSON.
    """
    planner = InstallPlanner(
        project_dir,
        pg_config=pg_config,
        is_release=is_release,
        staging_root=staging_root,
        settings=settings,
        profile=profile,
        builder=builder,
        pg_layout=pg_layout,
        schema_generator=schema_generator,
    )
    receipt = planner.run()

    if receipt_path is not None:
        write_receipt(receipt, receipt_path)
        logger.info("Wrote install receipt to %s", receipt_path)

    return receipt
