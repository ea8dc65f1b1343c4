"""版本清单测试 - 解析、占位符、覆盖"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from depwrap.core.exceptions import ConfigError, ResolutionError
from depwrap.core.registry import VersionRegistry


class TestResolve:
    def test_resolve_expands_tag(self, versions_file: Path) -> None:
        ident = VersionRegistry(versions_file).resolve("libX")
        assert ident.version == "1.2.0"
        assert ident.repository == "https://example.com/libX.git"
        assert ident.tag == "v1.2.0"
        assert ident.shallow is True

    def test_brace_placeholder(self, versions_file: Path) -> None:
        ident = VersionRegistry(versions_file).resolve("libcudacxx")
        assert ident.tag == "1.8.1"
        assert ident.shallow is False

    def test_unknown_raises(self, versions_file: Path) -> None:
        with pytest.raises(ResolutionError, match="不在版本清单中"):
            VersionRegistry(versions_file).resolve("nope")

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        reg = VersionRegistry(tmp_path / "missing.yml")
        assert reg.list_packages() == []
        with pytest.raises(ResolutionError):
            reg.resolve("libX")

    def test_missing_version_raises(self, tmp_path: Path, versions_writer) -> None:
        path = versions_writer(tmp_path / "v.yml", {"bad": {"git_url": "https://x"}})
        with pytest.raises(ResolutionError, match="version"):
            VersionRegistry(path).resolve("bad")

    def test_tag_defaults_to_version(self, tmp_path: Path, versions_writer) -> None:
        path = versions_writer(tmp_path / "v.yml", {"lib": {"version": "2.0"}})
        assert VersionRegistry(path).resolve("lib").tag == "2.0"

    @pytest.mark.parametrize(("raw", "expected"), [
        ("OFF", False), ("false", False), (0, False), ("ON", True), ("1", True), (True, True),
    ])
    def test_shallow_values(self, tmp_path: Path, versions_writer, raw, expected: bool) -> None:
        path = versions_writer(tmp_path / "v.yml", {"lib": {"version": "1", "git_shallow": raw}})
        assert VersionRegistry(path).resolve("lib").shallow is expected

    def test_reads_versions_json(self, tmp_path: Path) -> None:
        path = tmp_path / "versions.json"
        path.write_text(json.dumps({"packages": {"lib": {
            "version": "3.1", "git_url": "https://e.com/lib.git", "git_tag": "branch-${version}",
        }}}))
        assert VersionRegistry(path).resolve("lib").tag == "branch-3.1"

    def test_invalid_yaml_raises_config_error(self, tmp_path: Path) -> None:
        path = tmp_path / "v.yml"
        path.write_text("packages: [unclosed\n")
        with pytest.raises(ConfigError, match="读取失败"):
            VersionRegistry(path)


class TestOverrides:
    def test_override_replaces_fields(self, tmp_path: Path, versions_file: Path, versions_writer) -> None:
        override = versions_writer(tmp_path / "override.yml", {
            "libX": {"version": "1.3.0"},
            "extra": {"version": "0.1", "git_url": "https://e.com/extra.git"},
        })
        reg = VersionRegistry(versions_file)
        assert reg.apply_overrides(override) == 2

        ident = reg.resolve("libX")
        assert ident.version == "1.3.0"
        assert ident.tag == "v1.3.0"
        assert ident.repository == "https://example.com/libX.git"
        assert reg.resolve("extra").version == "0.1"

    def test_list_packages(self, versions_file: Path) -> None:
        names = [p["name"] for p in VersionRegistry(versions_file).list_packages()]
        assert names == ["libX", "libcudacxx"]
