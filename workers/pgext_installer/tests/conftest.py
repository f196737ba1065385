"""
Shared pytest fixtures for pgext_installer tests.

Builds a minimal extension crate on disk (control file, sql/ fragments,
load order, fake cargo target output) and provides in-process stand-ins
for cargo and pg_config so the full install pipeline runs without
spawning processes.
"""
from pathlib import Path
from typing import List, Tuple

import pytest

from pgext_installer.config import BuildSettings
from pgext_installer.errors import BuildFailed
from pgext_installer.io.schema import BuildInvocation
from pgext_installer.policy.profile import BuildProfile

PKGLIBDIR = "/usr/lib/postgresql/15/lib"
SHAREDIR = "/usr/share/postgresql/15"
EXTENSIONDIR = SHAREDIR + "/extension"

LIBRARY_BYTES = b"\x00fake shared object\x00"
INIT_SQL = "CREATE TABLE t();"


class FakeBuilder:
    """Records build calls instead of running cargo."""

    def __init__(self, exit_code: int = 0):
        self.exit_code = exit_code
        self.calls: List[Tuple[BuildProfile, int, Path]] = []

    def build(self, profile: BuildProfile, major_version: int, cwd: Path) -> BuildInvocation:
        self.calls.append((profile, major_version, cwd))
        if self.exit_code != 0:
            raise BuildFailed("failed to build extension", exit_code=self.exit_code)
        return BuildInvocation(
            command=["cargo", "build"],
            profile=profile.value,
            features=f"pg{major_version}",
        )


class FakePgConfig:
    """Answers pg_config queries from fixed values."""

    def __init__(self, pkglibdir: str = PKGLIBDIR, extensiondir: str = EXTENSIONDIR,
                 major: int = 15):
        self._pkglibdir = pkglibdir
        self._extensiondir = extensiondir
        self._major = major
        self.queries: List[str] = []

    def major_version(self) -> int:
        self.queries.append("--version")
        return self._major

    def pkglibdir(self) -> Path:
        self.queries.append("--pkglibdir")
        return Path(self._pkglibdir)

    def extensiondir(self) -> Path:
        self.queries.append("--sharedir")
        return Path(self._extensiondir)


def write_project(
    root: Path,
    name: str = "myext",
    version: str = "1.2",
    load_order: Tuple[str, ...] = ("init.sql",),
    fragments: dict | None = None,
    library: str | None = None,
    profile: str = "debug",
) -> Path:
    """Lay out an extension crate under *root* and return its directory."""
    project = root / name
    sql = project / "sql"
    sql.mkdir(parents=True)

    control = [f"comment = '{name} extension'"]
    if version is not None:
        control.append(f"default_version = '{version}'")
    control += ["relocatable = false", "superuser = false"]
    (project / f"{name}.control").write_text("\n".join(control) + "\n")

    (sql / "load-order.txt").write_text("\n".join(load_order) + "\n")
    if fragments is None:
        fragments = {"init.sql": INIT_SQL}
    for fname, contents in fragments.items():
        (sql / fname).write_text(contents)

    target = project / "target" / profile
    target.mkdir(parents=True)
    (target / (library or f"lib{name}.so")).write_bytes(LIBRARY_BYTES)
    return project


@pytest.fixture
def project(tmp_path) -> Path:
    """A buildable `myext` crate at version 1.2 with one fragment."""
    return write_project(tmp_path / "src")


@pytest.fixture
def staging(tmp_path) -> Path:
    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def settings() -> BuildSettings:
    """Settings isolated from the caller's environment and .env file."""
    return BuildSettings(
        _env_file=None,
        PGX_BUILD_FEATURES=None,
        PGX_BUILD_FLAGS="",
        CARGO="cargo",
        CARGO_TARGET_DIR=None,
        PGX_PG_CONFIG_PATH=None,
    )


@pytest.fixture
def builder() -> FakeBuilder:
    return FakeBuilder()


@pytest.fixture
def pg_layout() -> FakePgConfig:
    return FakePgConfig()
