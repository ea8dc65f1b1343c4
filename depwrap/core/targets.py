"""包装目标：内层 RawIncludes + 外层 PublicFacade

编译器会把导入目标上声明的头文件目录当作低优先级的 system include，
工具链自带的同名库因此会遮蔽我们拉取的版本。
做法是两层组合：真实路径只放在内层 RawIncludes 上，
外层 PublicFacade 自身不声明任何目录，只通过 links 链接内层。

TargetRegistry 记录本次配置过程已创建的包装目标，是幂等检查的唯一依据。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from depwrap.core.exceptions import ValidationError
from depwrap.core.models import IncludePath, SetupSnippet

logger = logging.getLogger(__name__)

ISOLATE_INCLUDES = "isolate_includes"

_ISOLATE_COMMENT = (
    "工具链自带的头文件目录排在导入目标的 system include 之前，"
    "且导入目标上的目录一律按 system include 处理；"
    "真实路径须放在链接的非 system 目标上。"
)


@dataclass
class RawIncludes:
    """内层实体，持有真实头文件目录"""

    name: str
    include_directories: list[IncludePath] = field(default_factory=list)


@dataclass
class PublicFacade:
    """外层可别名、可导出的目标"""

    name: str
    export_name: str
    namespace: str
    exportable: bool = False
    include_directories: list[IncludePath] = field(default_factory=list)
    links: list[RawIncludes] = field(default_factory=list)

    @property
    def alias(self) -> str:
        return f"{self.namespace}::{self.export_name}"

    def link(self, raw: RawIncludes) -> None:
        if raw not in self.links:
            self.links.append(raw)


@dataclass
class WrappedTarget:
    """组合后的包装目标"""

    facade: PublicFacade
    raw: RawIncludes

    @property
    def alias(self) -> str:
        return self.facade.alias

    def all_includes(self) -> list[IncludePath]:
        """外层自身目录 + 经 links 传递得到的目录"""
        result = list(self.facade.include_directories)
        for linked in self.facade.links:
            result.extend(linked.include_directories)
        return result


def isolate_includes(facade: PublicFacade, raw: RawIncludes) -> None:
    """把外层直接声明的目录移到内层，并建立链接"""
    raw.include_directories.extend(facade.include_directories)
    facade.include_directories = []
    facade.link(raw)


def isolate_snippet(facade: PublicFacade, raw: RawIncludes) -> SetupSnippet:
    """生成随导出文件下发的 isolate_includes 步骤"""
    return SetupSnippet(
        kind=ISOLATE_INCLUDES,
        facade=facade.alias,
        raw_target=raw.name,
        comment=_ISOLATE_COMMENT,
    )


def wrap_header_target(
    name: str,
    export_name: str,
    namespace: str,
    raw_name: str,
    includes: list[IncludePath],
) -> WrappedTarget:
    """构造包装目标

    先按普通目标把目录挂到外层，再执行与下游相同的 isolate_includes，
    保证本地目标和导入目标的结构一致。
    """
    facade = PublicFacade(
        name=name, export_name=export_name, namespace=namespace,
        exportable=True, include_directories=list(includes),
    )
    raw = RawIncludes(name=raw_name)
    isolate_includes(facade, raw)
    logger.debug("包装目标: %s -> %s (%d 个目录)", facade.alias, raw.name, len(raw.include_directories))
    return WrappedTarget(facade=facade, raw=raw)


class TargetRegistry:
    """本次配置过程内已创建的包装目标"""

    def __init__(self) -> None:
        self._targets: dict[str, WrappedTarget] = {}

    def exists(self, name: str) -> bool:
        return name in self._targets

    def get(self, name: str) -> WrappedTarget | None:
        return self._targets.get(name)

    def add(self, target: WrappedTarget) -> None:
        name = target.facade.name
        if name in self._targets:
            raise ValidationError(f"目标已存在: {name}")
        self._targets[name] = target
        logger.info("目标已创建: %s (alias %s)", name, target.alias)

    def names(self) -> list[str]:
        return list(self._targets)
