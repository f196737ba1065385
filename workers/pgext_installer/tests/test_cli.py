"""
test_cli — argument handling and exit status.
"""
from pathlib import Path

import pytest

from pgext_installer import cli
from pgext_installer.errors import BuildFailed
from pgext_installer.io.schema import InstallReceipt


class TestCli:

    def test_arguments_forwarded(self, monkeypatch, capsys):
        seen = {}

        def fake_run_install(project_dir, **kwargs):
            seen["project_dir"] = project_dir
            seen.update(kwargs)
            return InstallReceipt(
                profile_id="pgx-cargo-v1", extension="myext", version="1.2",
                build_profile="release", staging_root="/tmp/stage",
                pkglibdir="/lib", extensiondir="/share/extension",
            )

        monkeypatch.setattr(cli, "run_install", fake_run_install)
        code = cli.main([
            "ext", "--release", "--pg-config", "/opt/pg_config",
            "--base-directory", "/tmp/stage", "--strict-artifact",
        ])

        assert code == 0
        assert seen["project_dir"] == Path("ext")
        assert seen["is_release"] is True
        assert seen["pg_config"] == "/opt/pg_config"
        assert seen["staging_root"] == Path("/tmp/stage")
        assert seen["profile"].strict_artifact is True
        assert "Installed myext 1.2" in capsys.readouterr().out

    def test_install_error_exit_status(self, monkeypatch):
        def failing(project_dir, **kwargs):
            raise BuildFailed("failed to build extension", exit_code=101)

        monkeypatch.setattr(cli, "run_install", failing)
        assert cli.main([]) == 1

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])
        assert exc.value.code == 0

    def test_lenient_artifact_by_default(self, monkeypatch):
        seen = {}

        def failing(project_dir, **kwargs):
            seen.update(kwargs)
            raise BuildFailed("failed to build extension", exit_code=101)

        monkeypatch.setattr(cli, "run_install", failing)
        cli.main(["ext"])
        assert seen["profile"].strict_artifact is False
