"""CLI - 依赖获取与导出命令"""

from __future__ import annotations

import click

from depwrap.core.exceptions import DepwrapError


def register(group: click.Group) -> None:
    group.add_command(acquire)
    group.add_command(list_packages)
    group.add_command(show_export)


@click.command()
@click.argument("name")
@click.option("--config", "-c", "config_path", default="", help="配置文件路径")
@click.option("--build-export", default=None, help="登记到构建树导出集")
@click.option("--install-export", default=None, help="登记到安装树导出集")
@click.option("--namespace", default="", help="目标命名空间（默认与包名相同）")
@click.option("--source-dir", default="", help="使用本地源码目录，不执行 clone")
def acquire(
    name: str, config_path: str,
    build_export: str | None, install_export: str | None,
    namespace: str, source_dir: str,
) -> None:
    """获取头文件库依赖并按需登记导出"""
    from depwrap.cli import _load_config
    from depwrap.core.acquire import ConfigureRun, acquire_and_export
    from depwrap.core.models import LIBCUDACXX, FetchOptions, PackageSpec

    try:
        run = ConfigureRun.from_config(_load_config(config_path))
        if name == LIBCUDACXX.name and not namespace:
            spec = LIBCUDACXX
        else:
            spec = PackageSpec.header_only(name, namespace)
        res = acquire_and_export(
            run, spec,
            build_export_set=build_export,
            install_export_set=install_export,
            options=FetchOptions(source_dir=source_dir),
        )
    except DepwrapError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e

    click.echo(f"{name}_SOURCE_DIR={res.source_dir}")
    click.echo(f"{name}_BINARY_DIR={res.binary_dir}")
    click.echo(f"{name}_ADDED={'ON' if res.added else 'OFF'}")
    click.echo(f"{name}_VERSION={res.version}")
    for path in run.exports.written_all():
        click.echo(f"导出: {path}")


@click.command(name="packages")
@click.option("--config", "-c", "config_path", default="", help="配置文件路径")
def list_packages(config_path: str) -> None:
    """列出版本清单中的依赖"""
    from depwrap.cli import _load_config
    from depwrap.core.registry import VersionRegistry

    try:
        cfg = _load_config(config_path)
        reg = VersionRegistry(cfg.versions_file)
        if cfg.overrides_file:
            reg.apply_overrides(cfg.overrides_file)
    except DepwrapError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e

    packages = reg.list_packages()
    if not packages:
        click.echo("版本清单为空。")
        return
    for p in packages:
        shallow = " shallow" if p["git_shallow"] == "true" else ""
        click.echo(f"  {p['name']:20s} {p['version']:12s} {p['git_url']} @{p['git_tag']}{shallow}")


@click.command(name="show-export")
@click.argument("path", type=click.Path(dir_okay=False))
def show_export(path: str) -> None:
    """读取导出文件并显示重建后的目标"""
    from depwrap.core.export import import_export

    try:
        targets = import_export(path)
    except DepwrapError as e:
        raise click.ClickException(f"[{e.code}] {e}") from e

    for t in targets:
        click.echo(f"{t.alias} -> {t.raw.name or '(无)'}")
        for inc in t.all_includes():
            click.echo(f"  {inc.build}")
