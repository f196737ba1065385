"""
Installer configuration

Environment overrides are read once, here, into named fields.  Nothing
else in the package looks at os.environ.
"""
import shlex
from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings


class BuildSettings(BaseSettings):
    """Build and pg_config settings"""

    # Cargo features; unset means "pg{major_version}"
    PGX_BUILD_FEATURES: Optional[str] = None
    # Extra arguments appended to `cargo build`, whitespace separated
    PGX_BUILD_FLAGS: str = ""

    # Cargo
    CARGO: str = "cargo"
    CARGO_TARGET_DIR: Optional[str] = None

    # pg_config executable; unset means `pg_config` on PATH
    PGX_PG_CONFIG_PATH: Optional[str] = None

    def features_for(self, major_version: int) -> str:
        """Feature string for the build, defaulting to the pg major version."""
        if self.PGX_BUILD_FEATURES is None:
            return f"pg{major_version}"
        return self.PGX_BUILD_FEATURES

    @property
    def build_flags(self) -> List[str]:
        return self.PGX_BUILD_FLAGS.split()

    def target_dir(self, project_dir: Path) -> Path:
        """Cargo target directory for *project_dir*."""
        if self.CARGO_TARGET_DIR:
            # relative to the crate directory
            return Path(project_dir) / self.CARGO_TARGET_DIR
        return Path(project_dir) / "target"

    def describe(self) -> str:
        return " ".join(
            f"{k}={shlex.quote(str(v))}" for k, v in self.model_dump().items() if v
        )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"
