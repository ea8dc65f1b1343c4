"""集中配置管理

一次配置过程用到的目录与清单路径，支持从 YAML 文件加载 + 编程式覆盖。
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any

import yaml

from depwrap.core.exceptions import ConfigError
from depwrap.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Config:
    """配置过程全局配置"""

    # 清单
    versions_file: str = "deps/versions.yml"
    overrides_file: str = ""

    # 目录
    cache_dir: str = "_deps"          # 依赖源码与 binary 目录
    build_dir: str = "build"          # 构建树导出文件所在目录
    install_prefix: str = "install"
    install_libdir: str = ""          # 为空时自动探测 lib / lib64
    include_dir: str = "include"      # 安装前缀下的头文件目录

    # 放不到字段里的配置项
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_file(cls, path: str = "configs/depwrap.yml") -> Config:
        """从 YAML 文件加载配置，不存在则返回默认"""
        try:
            data = load_yaml(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"配置文件读取失败: {path} - {e}") from e
        if not data:
            return cls()
        known = {f.name for f in fields(cls)} - {"extra"}
        matched = {k: str(v) for k, v in data.items() if k in known and v is not None}
        extra = {k: v for k, v in data.items() if k not in known}
        cfg = cls(**matched)
        cfg.extra = extra
        return cfg

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# 进程默认配置，首次 import 时不读文件；由 CLI 入口显式初始化
_current: Config | None = None


def get_config() -> Config:
    """获取当前配置（未初始化则返回默认值）"""
    global _current  # noqa: PLW0603
    if _current is None:
        _current = Config()
    return _current


def init_config(path: str = "configs/depwrap.yml") -> Config:
    """从文件初始化进程默认配置"""
    global _current  # noqa: PLW0603
    _current = Config.from_file(path)
    logger.info("配置已加载: %s", path)
    return _current
