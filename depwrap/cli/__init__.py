"""depwrap 命令行接口

CLI 按领域拆分为子模块，每个模块注册自己的命令到 main group。
"""

import os

import click

from depwrap import __version__
from depwrap.core.config import Config, init_config
from depwrap.utils.logger import setup_logging


def _load_config(path: str) -> Config:
    """加载配置文件，未指定时使用默认值"""
    if not path:
        return Config()
    return init_config(path)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """depwrap - 头文件库依赖获取与导出登记"""
    setup_logging(
        level=os.getenv("DEPWRAP_LOG_LEVEL", "INFO"),
        json_output=os.getenv("DEPWRAP_LOG_JSON", "") == "1",
    )


from depwrap.cli.cmd_deps import register as _reg_deps  # noqa: E402

_reg_deps(main)
