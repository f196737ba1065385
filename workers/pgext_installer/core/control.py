"""
Control file — locate the extension's ``.control`` file and read properties.

The control file is a ``key = value`` descriptor.  Its file-name stem is
the extension name; ``default_version`` gives the version used for the
generated ``{extname}--{version}.sql`` script.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from pgext_installer.core.locator import validate_extension_name
from pgext_installer.errors import ControlFileError, MissingVersionProperty
from pgext_installer.policy.profile import InstallProfile


@dataclass(frozen=True)
class ExtensionIdentity:
    """Name and version of the extension being installed."""
    name: str
    version: str

    @property
    def script_name(self) -> str:
        return f"{self.name}--{self.version}.sql"

    @property
    def upgrade_prefix(self) -> str:
        return f"{self.name}--"


def find_control_file(
    project_dir: Path,
    profile: InstallProfile | None = None,
) -> Tuple[Path, str]:
    """Return (control file path, extension name) for *project_dir*."""
    if profile is None:
        profile = InstallProfile.v1()

    matches = sorted(p for p in Path(project_dir).glob(profile.control_glob) if p.is_file())
    if not matches:
        raise ControlFileError(f"no control file found in {project_dir}")
    if len(matches) > 1:
        names = ", ".join(p.name for p in matches)
        raise ControlFileError(f"multiple control files found in {project_dir}: {names}")

    control_file = matches[0]
    return control_file, validate_extension_name(control_file.stem)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_properties(text: str) -> Dict[str, str]:
    props: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        props[key.strip()] = _unquote(value.strip())
    return props


def read_properties(control_file: Path) -> Dict[str, str]:
    """Parse *control_file* into a property dict."""
    try:
        text = Path(control_file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ControlFileError(f"could not read {control_file}: {e}") from e
    return parse_properties(text)


def get_property(control_file: Path, name: str) -> Optional[str]:
    return read_properties(control_file).get(name)


def resolve_identity(
    control_file: Path,
    extname: str,
    profile: InstallProfile | None = None,
) -> ExtensionIdentity:
    """Build the ExtensionIdentity, requiring a declared version."""
    if profile is None:
        profile = InstallProfile.v1()
    version = get_property(control_file, profile.version_property)
    if not version:
        raise MissingVersionProperty(control_file)
    return ExtensionIdentity(name=validate_extension_name(extname), version=version)
