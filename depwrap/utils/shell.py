"""外部命令执行 - 统一子进程调用

git clone 等外部命令都经过 CommandExecutor 协议，测试时注入假实现，
无需 patch subprocess。
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Protocol

from depwrap.core.exceptions import ExecutionError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """命令执行结果（与 subprocess 解耦）"""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandExecutor(Protocol):
    """命令执行器协议"""

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """执行命令并返回结果"""
        ...


class LocalExecutor:
    """本地子进程执行器（默认实现）"""

    def execute(
        self,
        cmd: str | list[str],
        *,
        cwd: str = ".",
        env: dict[str, str] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        args = shlex.split(cmd) if isinstance(cmd, str) else cmd
        try:
            r = subprocess.run(
                args, capture_output=True, text=True,
                cwd=cwd, env=env, check=False, timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            return CommandResult(returncode=-1, stdout="", stderr=f"超时: {e}")
        return CommandResult(
            returncode=r.returncode,
            stdout=r.stdout,
            stderr=r.stderr,
        )


def run_cmd(
    executor: CommandExecutor,
    cmd: list[str], *,
    cwd: str = ".",
    label: str = "cmd",
) -> CommandResult:
    """执行命令，失败抛 ExecutionError

    Args:
        executor: 命令执行器
        cmd: 参数列表
        cwd: 工作目录
        label: 日志标签
    """
    logger.info("  %s: %s (cwd=%s)", label, shlex.join(cmd), cwd)
    r = executor.execute(cmd, cwd=cwd)
    if not r.success:
        raise ExecutionError(f"{label} 失败 (rc={r.returncode}): {r.stderr[:500]}")
    return r
