"""依赖获取与导出编排

把头文件库依赖以稳定别名 <ns>::<name> 引入当前项目，每次配置过程只做一次：

  1. 版本清单解析依赖身份
  2. Fetch-Or-Reuse 获取源码目录（仅下载，不构建）
  3. 首次获取时构造包装目标（RawIncludes + PublicFacade）
  4. 按调用方要求登记 BUILD / INSTALL 导出

用法:
    from depwrap.core.acquire import ConfigureRun, acquire_and_export
    from depwrap.core.models import PackageSpec

    run = ConfigureRun.from_config()
    res = acquire_and_export(
        run, PackageSpec.header_only("libX"), build_export_set="proj-exports",
    )
    res.source_dir, res.binary_dir, res.added, res.version

同一次配置过程中，包装目标一旦创建，后续调用一律跳过第 3、4 步，
即使后续调用带了先前没有的导出标记，也不会补登记。
"""

from __future__ import annotations

import logging
from dataclasses import replace

from depwrap.core.config import Config, get_config
from depwrap.core.exceptions import DepwrapError
from depwrap.core.export import ExportRegistrar
from depwrap.core.fetch import DependencyFetcher
from depwrap.core.install import InstallManifest, install_lib_dir
from depwrap.core.models import (
    LIBCUDACXX,
    AcquisitionResult,
    ExportRecord,
    ExportScope,
    FetchOptions,
    IncludePath,
    PackageSpec,
)
from depwrap.core.registry import VersionRegistry
from depwrap.core.targets import TargetRegistry, WrappedTarget, isolate_snippet, wrap_header_target
from depwrap.utils.shell import CommandExecutor

logger = logging.getLogger(__name__)


class ConfigureRun:
    """一次配置过程的上下文

    持有本次过程内的全部可变状态：已获取的依赖、已创建的目标、
    导出集与安装规则。过程结束即丢弃，跨过程只通过导出文件传递。
    """

    def __init__(
        self,
        config: Config,
        registry: VersionRegistry,
        fetcher: DependencyFetcher,
        *,
        lib_dir: str = "lib",
        exports: ExportRegistrar | None = None,
        installs: InstallManifest | None = None,
    ) -> None:
        self.config = config
        self.registry = registry
        self.fetcher = fetcher
        self.lib_dir = lib_dir
        self.targets = TargetRegistry()
        self.exports = exports or ExportRegistrar(
            config.build_dir, config.install_prefix, lib_dir,
        )
        self.installs = installs or InstallManifest(config.install_prefix)
        self.results: dict[str, AcquisitionResult] = {}
        # 调用方导出集 -> 其依赖的包
        self.export_dependencies: dict[tuple[ExportScope, str], list[str]] = {}

    @classmethod
    def from_config(
        cls,
        config: Config | None = None,
        executor: CommandExecutor | None = None,
    ) -> ConfigureRun:
        cfg = config or get_config()
        registry = VersionRegistry(cfg.versions_file)
        if cfg.overrides_file:
            registry.apply_overrides(cfg.overrides_file)
        fetcher = DependencyFetcher(cfg.cache_dir, executor)
        return cls(cfg, registry, fetcher, lib_dir=install_lib_dir(cfg))

    def record_dependency(self, scope: ExportScope, export_set: str, package: str) -> None:
        deps = self.export_dependencies.setdefault((scope, export_set), [])
        if package not in deps:
            deps.append(package)

    def dependencies_of(self, scope: ExportScope, export_set: str) -> list[str]:
        return list(self.export_dependencies.get((scope, export_set), []))


def acquire_and_export(
    run: ConfigureRun,
    package: PackageSpec,
    *,
    build_export_set: str | None = None,
    install_export_set: str | None = None,
    options: FetchOptions | None = None,
) -> AcquisitionResult:
    """获取依赖、首次时包装并导出，返回四个结果值

    Raises:
        ResolutionError: 版本清单中没有该依赖
        AcquisitionError: 拉取失败，此时不会创建任何目标
        ExportWriteError: 导出文件或安装目录写入失败
    """
    build_export = build_export_set is not None
    install_export = install_export_set is not None

    identity = run.registry.resolve(package.name)

    base = options or FetchOptions()
    fetch_opts = replace(
        base,
        download_only=True,
        global_targets=[*base.global_targets, package.alias],
    )
    outcome = run.fetcher.acquire(identity, fetch_opts)

    if build_export_set is not None:
        run.record_dependency(ExportScope.BUILD, build_export_set, package.name)
    if install_export_set is not None:
        run.record_dependency(ExportScope.INSTALL, install_export_set, package.name)

    if outcome.added and not run.targets.exists(package.facade_name):
        _wrap_and_export(
            run, package, outcome.source_dir, identity.version,
            build_export=build_export, install_export=install_export,
        )
    elif install_export and not run.exports.records(ExportScope.INSTALL, package.name):
        # 包装目标已在更早的调用中创建，导出标记不追溯生效
        logger.info("%s 已在本次配置中创建，忽略新的 INSTALL 导出请求", package.alias)

    result = AcquisitionResult(
        source_dir=outcome.source_dir,
        binary_dir=outcome.binary_dir,
        added=outcome.added,
        version=identity.version,
    )
    run.results[package.name] = result
    return result


def _wrap_and_export(
    run: ConfigureRun,
    package: PackageSpec,
    source_dir: str,
    version: str,
    *,
    build_export: bool,
    install_export: bool,
) -> WrappedTarget:
    include_dir = run.config.include_dir
    primary = package.primary
    includes = [IncludePath(
        build=f"{source_dir}/{primary.subdir}",
        install=f"{include_dir}/{primary.install_subdir}",
    )]
    target = wrap_header_target(
        name=package.facade_name,
        export_name=package.name,
        namespace=package.namespace,
        raw_name=package.raw_name,
        includes=includes,
    )
    record = ExportRecord(
        package=package.name,
        export_set=package.export_set,
        target=target.facade,
        namespace=package.namespace,
        version=version,
        setup=isolate_snippet(target.facade, target.raw),
    )

    # 导出文件在全部步骤成功后一次写出，失败时不留下导出文件和目标
    try:
        if build_export:
            run.exports.register(ExportScope.BUILD, record)
        if install_export:
            run.installs.install_directories([
                (f"{source_dir}/{root.subdir}", f"{include_dir}/{root.install_subdir}")
                for root in package.include_roots
            ])
            run.exports.register(ExportScope.INSTALL, record)
        run.exports.commit()
    except DepwrapError:
        run.exports.discard()
        raise

    run.installs.install_target(target.facade, run.lib_dir, package.export_set)
    run.targets.add(target)
    return target


def acquire_libcudacxx(
    run: ConfigureRun,
    *,
    build_export_set: str | None = None,
    install_export_set: str | None = None,
    options: FetchOptions | None = None,
) -> AcquisitionResult:
    """libcudacxx 的固定调用入口（含 libcxx 附带头文件树）"""
    return acquire_and_export(
        run, LIBCUDACXX,
        build_export_set=build_export_set,
        install_export_set=install_export_set,
        options=options,
    )
