"""CLI 端到端测试 - 本地源码目录驱动，不访问网络"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from depwrap.cli import main
from depwrap.utils.logger import reset_logging


@pytest.fixture(autouse=True)
def _clean_logging():
    yield
    reset_logging()


@pytest.fixture()
def project(tmp_path: Path, versions_file: Path) -> Path:
    cfg = tmp_path / "depwrap.yml"
    cfg.write_text(yaml.safe_dump({
        "versions_file": str(versions_file),
        "cache_dir": str(tmp_path / "_deps"),
        "build_dir": str(tmp_path / "build"),
        "install_prefix": str(tmp_path / "install"),
        "install_libdir": "lib",
    }))
    src = tmp_path / "libX-checkout"
    (src / "include" / "libX").mkdir(parents=True)
    (src / "include" / "libX" / "libX.h").write_text("#pragma once\n")
    return tmp_path


class TestAcquireCommand:
    def test_acquire_with_both_exports(self, project: Path) -> None:
        result = CliRunner().invoke(main, [
            "acquire", "libX",
            "--config", str(project / "depwrap.yml"),
            "--source-dir", str(project / "libX-checkout"),
            "--build-export", "proj-exports",
            "--install-export", "proj-exports",
        ])
        assert result.exit_code == 0, result.output
        assert "libX_ADDED=ON" in result.output
        assert "libX_VERSION=1.2.0" in result.output
        assert (project / "build" / "libX-config.yml").is_file()
        assert (project / "install" / "lib" / "cmake" / "libX" / "libX-config.yml").is_file()
        assert (project / "install" / "include" / "libX" / "libX" / "libX" / "libX.h").is_file()

    def test_unknown_package_reports_code(self, project: Path) -> None:
        result = CliRunner().invoke(main, [
            "acquire", "nope", "--config", str(project / "depwrap.yml"),
        ])
        assert result.exit_code != 0
        assert "RESOLUTION_ERROR" in result.output


class TestOtherCommands:
    def test_packages(self, project: Path) -> None:
        result = CliRunner().invoke(main, ["packages", "--config", str(project / "depwrap.yml")])
        assert result.exit_code == 0, result.output
        assert "libX" in result.output
        assert "v1.2.0" in result.output
        assert "libcudacxx" in result.output

    def test_show_export(self, project: Path) -> None:
        runner = CliRunner()
        runner.invoke(main, [
            "acquire", "libX",
            "--config", str(project / "depwrap.yml"),
            "--source-dir", str(project / "libX-checkout"),
            "--build-export", "proj-exports",
        ])
        result = runner.invoke(main, ["show-export", str(project / "build" / "libX-config.yml")])
        assert result.exit_code == 0, result.output
        assert "libX::libX -> libX_includes" in result.output
        assert "libX-checkout/include" in result.output

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.3.0" in result.output
