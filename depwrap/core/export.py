"""导出集登记 - Export Registrar

职责:
- 按 (scope, package) 累积导出记录
- 登记只进入暂存区，commit 时成组写出：全部写入或一个都不写
- 下游按导出文件重建目标 (import_export)

文件位置:
  - BUILD:   <build_dir>/<package>-config.yml
  - INSTALL: <prefix>/<lib_dir>/cmake/<package>/<package>-config.yml

BUILD 导出写构建树绝对路径，INSTALL 导出写相对安装前缀的路径。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from depwrap.core.exceptions import ExportWriteError, ValidationError
from depwrap.core.models import ExportRecord, ExportScope, IncludePath, SetupSnippet
from depwrap.core.targets import (
    ISOLATE_INCLUDES,
    PublicFacade,
    RawIncludes,
    WrappedTarget,
    isolate_includes,
)
from depwrap.utils.yaml_io import dump_yaml, load_yaml, write_files_atomic

logger = logging.getLogger(__name__)

EXPORT_FORMAT_VERSION = 1


class ExportRegistrar:
    """导出集登记器"""

    def __init__(
        self,
        build_dir: str | Path,
        install_prefix: str | Path,
        lib_dir: str = "lib",
    ) -> None:
        self.build_dir = Path(build_dir)
        self.install_prefix = Path(install_prefix)
        self.lib_dir = lib_dir
        self._sets: dict[tuple[ExportScope, str], list[ExportRecord]] = {}
        self._pending: dict[tuple[ExportScope, str], list[ExportRecord]] = {}
        self._written: dict[ExportScope, list[Path]] = {s: [] for s in ExportScope}

    def export_path(self, scope: ExportScope, package: str) -> Path:
        if scope is ExportScope.BUILD:
            return self.build_dir / f"{package}-config.yml"
        return self.install_prefix / self.lib_dir / "cmake" / package / f"{package}-config.yml"

    def records(self, scope: ExportScope, package: str) -> list[ExportRecord]:
        """已写出的记录（不含暂存）"""
        return list(self._sets.get((scope, package), []))

    def pending(self) -> list[tuple[ExportScope, str]]:
        return list(self._pending)

    def written(self, scope: ExportScope) -> list[Path]:
        """本次配置过程写出的导出文件"""
        return list(self._written[scope])

    def written_all(self) -> list[Path]:
        return [p for scope in ExportScope for p in self._written[scope]]

    def register(self, scope: ExportScope, record: ExportRecord) -> Path:
        """登记一条记录到暂存区，返回 commit 后的文件位置"""
        self._pending.setdefault((scope, record.package), []).append(record)
        logger.debug("暂存导出 %s: %s", scope.value, record.target.alias)
        return self.export_path(scope, record.package)

    def commit(self) -> list[Path]:
        """写出全部暂存记录

        所有涉及的导出文件先渲染、再成组原子写出。任一文件失败时
        没有文件被替换，暂存记录全部丢弃。

        Raises:
            ExportWriteError: 渲染或写入失败
        """
        if not self._pending:
            return []
        pending, self._pending = self._pending, {}

        merged = {key: self._sets.get(key, []) + recs for key, recs in pending.items()}
        try:
            files = {
                self.export_path(*key): dump_yaml(self._render(key[0], recs))
                for key, recs in merged.items()
            }
            paths = write_files_atomic(files)
        except (OSError, yaml.YAMLError) as e:
            names = ", ".join(f"{s.value}:{p}" for s, p in pending)
            raise ExportWriteError(f"导出文件写入失败 ({names}): {e}") from e

        self._sets.update(merged)
        for (scope, package), recs in merged.items():
            path = self.export_path(scope, package)
            if path not in self._written[scope]:
                self._written[scope].append(path)
            last = recs[-1]
            logger.info(
                "已导出 %s: %s@%s -> %s",
                scope.value, last.target.alias, last.version, path,
            )
        return paths

    def discard(self) -> None:
        """丢弃暂存记录（配置失败时）"""
        if self._pending:
            logger.debug("丢弃 %d 组暂存导出", len(self._pending))
        self._pending.clear()

    @staticmethod
    def _render(scope: ExportScope, records: list[ExportRecord]) -> dict[str, Any]:
        last = records[-1]
        targets = []
        for rec in records:
            facade: PublicFacade = rec.target
            includes = list(facade.include_directories)
            for raw in facade.links:
                includes.extend(raw.include_directories)
            targets.append({
                "name": facade.export_name,
                "alias": facade.alias,
                "include_directories": [p.for_scope(scope) for p in includes],
                "setup": rec.setup.to_dict() if rec.setup else None,
            })
        return {
            "format": EXPORT_FORMAT_VERSION,
            "scope": scope.value,
            "package": last.package,
            "version": last.version,
            "namespace": last.namespace,
            "export_set": last.export_set,
            "targets": targets,
        }


def import_export(path: str | Path) -> list[WrappedTarget]:
    """读取导出文件，按下游视角重建目标

    导入时目录先直接挂在外层（导入目标的默认行为），
    再执行文件中记录的 setup 步骤，得到与上游一致的两层结构。
    """
    p = Path(path)
    if not p.is_file():
        raise ValidationError(f"导出文件不存在: {p}")
    try:
        data = load_yaml(p)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ValidationError(f"导出文件无法读取: {p} - {e}") from e
    namespace = str(data.get("namespace", ""))

    result: list[WrappedTarget] = []
    for entry in data.get("targets") or []:
        export_name = str(entry.get("name", ""))
        dirs = [str(d) for d in entry.get("include_directories") or []]
        facade = PublicFacade(
            name=f"{namespace}::{export_name}",
            export_name=export_name,
            namespace=namespace,
            include_directories=[IncludePath(build=d, install=d) for d in dirs],
        )
        raw = RawIncludes(name="")
        setup = entry.get("setup")
        if setup:
            snippet = SetupSnippet.from_dict(setup)
            if snippet.kind != ISOLATE_INCLUDES:
                raise ValidationError(f"未知的 setup 步骤: {snippet.kind} ({p})")
            raw.name = snippet.raw_target
            isolate_includes(facade, raw)
        result.append(WrappedTarget(facade=facade, raw=raw))
    logger.debug("已导入 %d 个目标: %s", len(result), p)
    return result
