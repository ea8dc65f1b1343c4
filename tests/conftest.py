"""测试共享 fixture - 假 git 执行器 + 版本清单 + 配置过程

FakeGit 代替真实子进程：收到 git clone 时在目标目录生成 .git 和头文件树，
测试全程不访问网络。
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from depwrap.core.acquire import ConfigureRun
from depwrap.core.config import Config
from depwrap.utils.shell import CommandResult


class FakeGit:
    """记录命令并模拟 clone 结果的执行器"""

    def __init__(self, *, fail: bool = False, extra_roots: tuple[str, ...] = ()) -> None:
        self.fail = fail
        self.extra_roots = extra_roots
        self.calls: list[list[str]] = []

    def execute(self, cmd, *, cwd=".", env=None, timeout=None) -> CommandResult:
        args = list(cmd)
        self.calls.append(args)
        if self.fail:
            return CommandResult(returncode=128, stdout="", stderr="fatal: unable to access")
        if args[:2] == ["git", "clone"]:
            dest = Path(args[-1])
            (dest / ".git").mkdir(parents=True, exist_ok=True)
            for root in ("include", *self.extra_roots):
                (dest / root).mkdir(parents=True, exist_ok=True)
                (dest / root / "header.h").write_text("#pragma once\n")
        return CommandResult(returncode=0, stdout="", stderr="")

    @property
    def clone_count(self) -> int:
        return sum(1 for c in self.calls if c[:2] == ["git", "clone"])


def write_versions(path: Path, packages: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump({"packages": packages}), encoding="utf-8")
    return path


@pytest.fixture()
def versions_file(tmp_path: Path) -> Path:
    return write_versions(tmp_path / "versions.yml", {
        "libX": {
            "version": "1.2.0",
            "git_url": "https://example.com/libX.git",
            "git_tag": "v${version}",
            "git_shallow": True,
        },
        "libcudacxx": {
            "version": "1.8.1",
            "git_url": "https://example.com/libcudacxx.git",
            "git_tag": "{version}",
            "git_shallow": False,
        },
    })


@pytest.fixture()
def config(tmp_path: Path, versions_file: Path) -> Config:
    return Config(
        versions_file=str(versions_file),
        cache_dir=str(tmp_path / "_deps"),
        build_dir=str(tmp_path / "build"),
        install_prefix=str(tmp_path / "install"),
        install_libdir="lib",
    )


@pytest.fixture()
def fake_git() -> FakeGit:
    return FakeGit(extra_roots=("libcxx/include",))


@pytest.fixture()
def make_run(config: Config, fake_git: FakeGit):
    """每次调用生成一个新的配置过程（模拟重新执行配置）"""

    def _make(executor=None) -> ConfigureRun:
        return ConfigureRun.from_config(config, executor=executor or fake_git)

    return _make


@pytest.fixture()
def failing_git() -> FakeGit:
    return FakeGit(fail=True)


@pytest.fixture()
def versions_writer():
    return write_versions
