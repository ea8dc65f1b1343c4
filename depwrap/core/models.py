"""核心数据模型

依赖身份、获取结果、导出记录及头文件库描述集中定义于此，
其余模块统一从这里导入。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from depwrap.core.targets import PublicFacade


class ExportScope(str, Enum):
    """导出范围：构建树 / 安装树"""

    BUILD = "BUILD"
    INSTALL = "INSTALL"


@dataclass(frozen=True)
class DependencyIdentity:
    """由版本清单解析出的依赖身份，解析后不可变"""

    name: str
    version: str
    repository: str
    tag: str
    shallow: bool = True


@dataclass
class AcquisitionResult:
    """一次获取调用向调用方返回的四个值

    added 仅在本次配置过程中真正执行拉取的那一次调用为 True。
    """

    source_dir: str
    binary_dir: str
    added: bool
    version: str


@dataclass
class FetchOptions:
    """透传给 Fetch-Or-Reuse 的选项

    头文件库只下载不构建，download_only=False 会被拉取器拒绝。
    """

    download_only: bool = True
    global_targets: list[str] = field(default_factory=list)
    source_dir: str = ""  # 本地源码目录，指定时不 clone


@dataclass(frozen=True)
class IncludePath:
    """双路径头文件目录：构建树绝对路径 + 安装树相对路径"""

    build: str
    install: str

    def for_scope(self, scope: ExportScope) -> str:
        return self.build if scope is ExportScope.BUILD else self.install


@dataclass(frozen=True)
class SetupSnippet:
    """导出文件中携带的固定后处理步骤

    下游导入目标后按 kind 执行对应步骤。目前只有 isolate_includes：
    把外层目标上直接声明的头文件目录移到内层 raw_target 上并建立链接，
    使这些目录不被编译器当作 system include。
    """

    kind: str
    facade: str
    raw_target: str
    comment: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind,
            "facade": self.facade,
            "raw_target": self.raw_target,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SetupSnippet:
        return cls(
            kind=str(data.get("kind", "")),
            facade=str(data.get("facade", "")),
            raw_target=str(data.get("raw_target", "")),
            comment=str(data.get("comment", "")),
        )


@dataclass
class ExportRecord:
    """导出集中的一条记录"""

    package: str
    export_set: str
    target: PublicFacade
    namespace: str
    version: str
    setup: SetupSnippet | None = None


@dataclass(frozen=True)
class IncludeRoot:
    """依赖源码中的一个头文件根目录及其安装位置"""

    subdir: str           # 相对源码目录，如 "include"
    install_subdir: str   # 相对安装头文件目录，如 "rapids/libcudacxx"


@dataclass(frozen=True)
class PackageSpec:
    """头文件库依赖的静态描述

    include_roots[0] 为主头文件目录，会写入目标的 include 路径；
    其余为附带的头文件树，只在安装导出时一并安装。
    """

    name: str
    namespace: str
    include_roots: tuple[IncludeRoot, ...]

    @property
    def alias(self) -> str:
        return f"{self.namespace}::{self.name}"

    @property
    def facade_name(self) -> str:
        return f"depwrap_{self.name}"

    @property
    def raw_name(self) -> str:
        return f"{self.name}_includes"

    @property
    def export_set(self) -> str:
        return f"{self.name}-targets"

    @property
    def primary(self) -> IncludeRoot:
        return self.include_roots[0]

    @classmethod
    def header_only(cls, name: str, namespace: str = "") -> PackageSpec:
        """单头文件目录的默认描述：include/ -> include/<ns>/<name>"""
        ns = namespace or name
        return cls(
            name=name,
            namespace=ns,
            include_roots=(IncludeRoot("include", f"{ns}/{name}"),),
        )


LIBCUDACXX = PackageSpec(
    name="libcudacxx",
    namespace="libcudacxx",
    include_roots=(
        IncludeRoot("include", "rapids/libcudacxx"),
        IncludeRoot("libcxx/include", "rapids/libcxx/include"),
    ),
)
