"""安装目录计算与安装规则

职责:
- 计算库安装目录 (lib / lib64)
- 记录目标的安装规则（目标、目的目录、所属导出集）
- 把依赖的头文件树复制到安装前缀下
"""

from __future__ import annotations

import logging
import platform
import shutil
from dataclasses import dataclass
from pathlib import Path

from depwrap.core.config import Config
from depwrap.core.exceptions import ExportWriteError
from depwrap.core.targets import PublicFacade

logger = logging.getLogger(__name__)


def install_lib_dir(config: Config, *, sys_root: str = "/") -> str:
    """计算库安装目录

    规则:
      - 配置了 install_libdir 直接使用
      - 64 位 Linux、非 Debian 系、且存在 /usr/lib64 时为 lib64
      - 其余为 lib
    """
    if config.install_libdir:
        return config.install_libdir
    root = Path(sys_root)
    if (
        platform.system() == "Linux"
        and platform.architecture()[0] == "64bit"
        and not (root / "etc" / "debian_version").exists()
        and (root / "usr" / "lib64").is_dir()
    ):
        return "lib64"
    return "lib"


@dataclass
class InstallRule:
    """目标安装规则"""

    target: str
    destination: str
    export_set: str


class InstallManifest:
    """安装清单 - 记录规则并执行目录安装"""

    def __init__(self, prefix: str | Path) -> None:
        self.prefix = Path(prefix)
        self.rules: list[InstallRule] = []
        self.installed_dirs: list[Path] = []

    def install_target(self, facade: PublicFacade, destination: str, export_set: str) -> InstallRule:
        rule = InstallRule(target=facade.name, destination=destination, export_set=export_set)
        self.rules.append(rule)
        logger.info("安装规则: %s -> %s (export %s)", facade.name, destination, export_set)
        return rule

    def install_directory(self, src: str | Path, destination: str) -> Path:
        """复制目录内容到 <prefix>/<destination>"""
        src_path = Path(src)
        dest = self.prefix / destination
        if not src_path.is_dir():
            raise ExportWriteError(f"待安装目录不存在: {src_path}")
        try:
            shutil.copytree(src_path, dest, dirs_exist_ok=True)
        except OSError as e:
            raise ExportWriteError(f"安装目录失败: {src_path} -> {dest} - {e}") from e
        self.installed_dirs.append(dest)
        logger.info("已安装: %s -> %s", src_path, dest)
        return dest

    def install_directories(self, pairs: list[tuple[str, str]]) -> list[Path]:
        """安装一组目录；先确认全部源目录存在，再逐个复制"""
        missing = [src for src, _ in pairs if not Path(src).is_dir()]
        if missing:
            raise ExportWriteError(f"待安装目录不存在: {', '.join(missing)}")
        return [self.install_directory(src, dest) for src, dest in pairs]
