"""
test_locator — shared-library discovery in cargo target output.

Invariants:
  - Only lib-prefixed files with a platform suffix containing the
    extension name are candidates.
  - Missing profile directory → MissingBuildOutput.
  - No candidate → ArtifactNotFound.  Several → the sorted-first one,
    or AmbiguousArtifact under a strict profile.
"""
import pytest

from pgext_installer.core.locator import (
    is_library_candidate,
    locate_artifact,
    validate_extension_name,
)
from pgext_installer.errors import (
    AmbiguousArtifact,
    ArtifactNotFound,
    InvalidExtensionName,
    MissingBuildOutput,
)
from pgext_installer.policy.profile import BuildProfile, InstallProfile


def _target(tmp_path, profile="debug", names=()):
    d = tmp_path / "target" / profile
    d.mkdir(parents=True)
    for n in names:
        (d / n).write_bytes(b"x")
    return tmp_path / "target"


class TestCandidatePredicate:

    @pytest.mark.parametrize("name", ["libfoo.so", "libfoo.dylib", "libfoo.dll", "libfoo-abc123.so"])
    def test_accepted(self, name):
        assert is_library_candidate(name, "foo", InstallProfile.v1())

    @pytest.mark.parametrize("name", ["libfoo.d", "foo.so", "libbar.so", "libfoo.rlib", "libfoo.so.1"])
    def test_rejected(self, name):
        assert not is_library_candidate(name, "foo", InstallProfile.v1())


class TestLocateArtifact:

    def test_picks_matching_library(self, tmp_path):
        target = _target(tmp_path, names=["libfoo.so", "libfoo.d", "libbar.so"])
        found = locate_artifact(target, BuildProfile.DEBUG, "foo")
        assert found == target / "debug" / "libfoo.so"

    def test_release_profile_directory(self, tmp_path):
        target = _target(tmp_path, "release", ["libfoo.dylib"])
        found = locate_artifact(target, BuildProfile.RELEASE, "foo")
        assert found.name == "libfoo.dylib"
        assert found.parent.name == "release"

    def test_not_found(self, tmp_path):
        target = _target(tmp_path, names=["libbar.so"])
        with pytest.raises(ArtifactNotFound):
            locate_artifact(target, BuildProfile.DEBUG, "foo")

    def test_missing_profile_dir(self, tmp_path):
        target = _target(tmp_path, "debug", ["libfoo.so"])
        with pytest.raises(MissingBuildOutput):
            locate_artifact(target, BuildProfile.RELEASE, "foo")

    def test_directories_are_ignored(self, tmp_path):
        target = _target(tmp_path)
        (target / "debug" / "libfoo.so").mkdir()
        with pytest.raises(ArtifactNotFound):
            locate_artifact(target, BuildProfile.DEBUG, "foo")

    def test_ambiguous_takes_sorted_first(self, tmp_path, caplog):
        target = _target(tmp_path, names=["libfoobar.so", "libfoo.so"])
        with caplog.at_level("WARNING"):
            found = locate_artifact(target, BuildProfile.DEBUG, "foo")
        assert found.name == "libfoo.so"
        assert "2 library files match" in caplog.text

    def test_ambiguous_is_error_when_strict(self, tmp_path):
        target = _target(tmp_path, names=["libfoo.so", "libfoobar.so"])
        with pytest.raises(AmbiguousArtifact) as exc:
            locate_artifact(
                target, BuildProfile.DEBUG, "foo",
                InstallProfile.v1(strict_artifact=True),
            )
        assert [p.name for p in exc.value.candidates] == ["libfoo.so", "libfoobar.so"]

    def test_single_match_when_strict(self, tmp_path):
        target = _target(tmp_path, names=["libfoo.so", "libbar.so"])
        found = locate_artifact(
            target, BuildProfile.DEBUG, "foo",
            InstallProfile.v1(strict_artifact=True),
        )
        assert found.name == "libfoo.so"


class TestExtensionName:

    @pytest.mark.parametrize("name", ["", "a/b", "a\\b"])
    def test_invalid(self, name):
        with pytest.raises(InvalidExtensionName):
            validate_extension_name(name)

    def test_valid(self):
        assert validate_extension_name("pg_foo") == "pg_foo"
