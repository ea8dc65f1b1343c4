"""依赖拉取 - Fetch-Or-Reuse

职责:
- 按依赖身份把源码放到 cache_dir/<name>-src（git clone 或本地源码目录）
- 同一次配置过程内每个依赖最多拉取一次，之后的调用直接复用
- 磁盘上已有的 checkout 不重复 clone，只 fetch 并切换到解析出的 tag

缓存策略:
  - 以依赖名为键，记录首次获取的 FetchOutcome
  - 第二次起返回相同目录，added=False
  - 拉取失败不记录，调用方可在下一次配置过程重试
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from depwrap.core.exceptions import AcquisitionError, ExecutionError
from depwrap.core.models import DependencyIdentity, FetchOptions
from depwrap.utils.shell import CommandExecutor, LocalExecutor, run_cmd

logger = logging.getLogger(__name__)

_SAFE_REF_RE = re.compile(r"^[a-zA-Z0-9_./@\-+]+$")


@dataclass
class FetchOutcome:
    """Fetch-Or-Reuse 的返回值"""

    source_dir: str
    binary_dir: str
    added: bool
    global_targets: list[str] = field(default_factory=list)


class DependencyFetcher:
    """依赖拉取器 - 每次配置过程一个实例"""

    def __init__(
        self,
        cache_dir: str | Path,
        executor: CommandExecutor | None = None,
    ) -> None:
        self.cache_dir = Path(cache_dir)
        self.executor = executor or LocalExecutor()
        self._fetched: dict[str, FetchOutcome] = {}

    def is_fetched(self, name: str) -> bool:
        return name in self._fetched

    def acquire(
        self,
        identity: DependencyIdentity,
        options: FetchOptions | None = None,
    ) -> FetchOutcome:
        """获取依赖源码目录，本次配置过程内第二次起只复用"""
        opts = options or FetchOptions()
        if not opts.download_only:
            raise AcquisitionError(
                f"{identity.name} 为头文件库，只支持 download_only 获取"
            )
        cached = self._fetched.get(identity.name)
        if cached is not None:
            logger.info("复用已获取的依赖: %s -> %s", identity.name, cached.source_dir)
            return FetchOutcome(
                source_dir=cached.source_dir,
                binary_dir=cached.binary_dir,
                added=False,
                global_targets=list(cached.global_targets),
            )

        source = self._materialize(identity, opts)
        binary = self.cache_dir / f"{identity.name}-build"
        try:
            binary.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise AcquisitionError(f"无法创建 binary 目录 {binary}: {e}") from e

        outcome = FetchOutcome(
            source_dir=str(source),
            binary_dir=str(binary),
            added=True,
            global_targets=list(opts.global_targets),
        )
        self._fetched[identity.name] = outcome
        logger.info(
            "依赖就绪: %s@%s -> %s", identity.name, identity.version, source,
        )
        return outcome

    def _materialize(self, identity: DependencyIdentity, opts: FetchOptions) -> Path:
        """准备源码目录：本地源码 > 已有 checkout > git clone"""
        if opts.source_dir:
            local = Path(opts.source_dir)
            if not local.is_dir():
                raise AcquisitionError(
                    f"本地源码目录不存在: {identity.name} -> {local}"
                )
            logger.info("使用本地源码: %s -> %s", identity.name, local)
            return local.resolve()

        if not identity.repository:
            raise AcquisitionError(f"依赖 '{identity.name}' 未指定 git_url")
        if not _SAFE_REF_RE.match(identity.tag):
            raise AcquisitionError(f"git_tag 包含非法字符: {identity.name} -> {identity.tag}")

        dest = self.cache_dir / f"{identity.name}-src"
        if (dest / ".git").exists():
            logger.info("本地 checkout 已存在，切换到 %s: %s", identity.tag, dest)
            try:
                self._fetch_existing(identity, dest)
            except (ExecutionError, OSError) as e:
                raise AcquisitionError(
                    f"更新已有 checkout 失败: {identity.name}@{identity.tag} ({dest}) - {e}"
                ) from e
            return dest.resolve()

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            self._clone(identity, dest)
        except (ExecutionError, OSError) as e:
            shutil.rmtree(dest, ignore_errors=True)
            raise AcquisitionError(
                f"拉取失败: {identity.name}@{identity.tag} ({identity.repository}) - {e}"
            ) from e
        return dest.resolve()

    def _fetch_existing(self, identity: DependencyIdentity, dest: Path) -> None:
        """已有 checkout: fetch 指定 tag 后检出 FETCH_HEAD"""
        cmd = ["git", "fetch"]
        if identity.shallow:
            cmd += ["--depth", "1"]
        cmd += ["origin", identity.tag]
        run_cmd(self.executor, cmd, cwd=str(dest), label="git fetch")
        run_cmd(
            self.executor,
            ["git", "checkout", "FETCH_HEAD"],
            cwd=str(dest), label="git checkout",
        )

    def _clone(self, identity: DependencyIdentity, dest: Path) -> None:
        """clone 指定 tag；浅克隆失败时回退为完整 clone + checkout"""
        cmd = ["git", "clone"]
        if identity.shallow:
            cmd += ["--depth", "1"]
        cmd += ["--branch", identity.tag, identity.repository, str(dest)]
        try:
            run_cmd(self.executor, cmd, label="git clone")
            return
        except ExecutionError as e:
            logger.warning("按 tag clone 失败，回退为完整 clone: %s", e)
            shutil.rmtree(dest, ignore_errors=True)

        # tag 可能是 commit SHA，--branch 不支持
        run_cmd(
            self.executor,
            ["git", "clone", identity.repository, str(dest)],
            label="git clone",
        )
        run_cmd(
            self.executor,
            ["git", "checkout", identity.tag],
            cwd=str(dest), label="git checkout",
        )
