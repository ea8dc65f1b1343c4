"""版本清单 - Registry Lookup

职责:
- 从 versions 清单加载依赖身份 (version / git_url / git_tag / git_shallow)
- 支持覆盖清单，替换已有条目的字段
- git_tag 中的 {version} / ${version} 占位符按解析出的版本展开

清单格式 (YAML，也兼容同结构的 versions.json):

    packages:
      libcudacxx:
        version: "1.8.1"
        git_url: https://github.com/NVIDIA/libcudacxx.git
        git_tag: "${version}"
        git_shallow: true
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from depwrap.core.exceptions import ConfigError, ResolutionError
from depwrap.core.models import DependencyIdentity
from depwrap.utils.yaml_io import load_yaml

logger = logging.getLogger(__name__)

_ENTRY_KEYS = ("version", "git_url", "git_tag", "git_shallow")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().upper() not in ("", "0", "OFF", "FALSE", "NO", "N")


class VersionRegistry:
    """依赖版本清单"""

    def __init__(self, registry_path: str | Path) -> None:
        self.registry_path = Path(registry_path)
        self._entries: dict[str, dict[str, Any]] = {}
        self._load(self.registry_path, replace=True)

    def _load(self, path: Path, *, replace: bool) -> int:
        if not path.exists():
            logger.warning("版本清单不存在: %s", path)
            return 0
        try:
            data = load_yaml(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"版本清单读取失败: {path} - {e}") from e

        count = 0
        for name, info in (data.get("packages") or {}).items():
            if not isinstance(info, dict):
                continue
            entry = {k: info[k] for k in _ENTRY_KEYS if k in info}
            if replace or name not in self._entries:
                self._entries[name] = entry
            else:
                self._entries[name].update(entry)
            count += 1
        return count

    def apply_overrides(self, override_path: str | Path) -> int:
        """应用覆盖清单，返回被覆盖/新增的条目数"""
        count = self._load(Path(override_path), replace=False)
        if count:
            logger.info("已应用 %d 个版本覆盖: %s", count, override_path)
        return count

    def resolve(self, name: str) -> DependencyIdentity:
        """解析依赖身份，清单中没有则抛 ResolutionError"""
        entry = self._entries.get(name)
        if entry is None:
            raise ResolutionError(
                f"依赖 '{name}' 不在版本清单中。"
                f"可用: {sorted(self._entries)}"
            )
        version = str(entry.get("version", ""))
        if not version:
            raise ResolutionError(f"依赖 '{name}' 未指定 version")
        tag = str(entry.get("git_tag", version))
        tag = tag.replace("${version}", version).replace("{version}", version)
        return DependencyIdentity(
            name=name,
            version=version,
            repository=str(entry.get("git_url", "")),
            tag=tag,
            shallow=_to_bool(entry.get("git_shallow", True)),
        )

    def list_packages(self) -> list[dict[str, str]]:
        """格式化清单条目用于查询"""
        results = []
        for name in sorted(self._entries):
            try:
                ident = self.resolve(name)
            except ResolutionError as e:
                logger.warning("跳过无效条目 %s: %s", name, e)
                continue
            results.append({
                "name": ident.name,
                "version": ident.version,
                "git_url": ident.repository,
                "git_tag": ident.tag,
                "git_shallow": "true" if ident.shallow else "false",
            })
        return results
