"""清单与导出文件读写

版本清单、配置文件、导出文件都经由这里读写。

- 读取: .json 后缀按 JSON 解析（versions.json 常用 tab 缩进，YAML 不接受），
  其余按 YAML 解析；空文件、缺失文件、顶层不是字典时返回空字典
- 写出: 一组文件先全部写入同目录临时文件，全部成功后再逐个 rename；
  任一临时文件写入失败则删除已写的临时文件，目标文件保持原样
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# 清单文件最大大小限制 (10MB)
MAX_MANIFEST_SIZE = 10 * 1024 * 1024


def dump_yaml(data: Any) -> str:
    """序列化为 YAML 文本，保持键顺序"""
    return yaml.safe_dump(
        data, default_flow_style=False,
        allow_unicode=True, sort_keys=False,
    )


def write_files_atomic(files: dict[Path, str]) -> list[Path]:
    """成组写出文件：要么全部替换，要么一个都不动

    Returns:
        写出的目标路径，顺序同 files

    Raises:
        OSError: 创建目录或写临时文件失败（此时没有目标文件被替换）
    """
    staged: list[tuple[str, Path]] = []
    try:
        for path, content in files.items():
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
            staged.append((tmp, path))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
    except OSError:
        for tmp, _ in staged:
            _unlink_quiet(tmp)
        raise

    for tmp, path in staged:
        os.replace(tmp, str(path))
    return [path for _, path in staged]


def _unlink_quiet(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("临时文件清理失败: %s (%s)", path, e)


def load_yaml(path: str | Path) -> dict[str, Any]:
    """读取 YAML / JSON 清单

    Raises:
        yaml.YAMLError: YAML 格式错误
        ValueError: JSON 格式错误（json.JSONDecodeError），或文件超过 MAX_MANIFEST_SIZE
        OSError: IO 错误
    """
    p = Path(path)
    if not p.exists():
        return {}

    file_size = p.stat().st_size
    if file_size > MAX_MANIFEST_SIZE:
        raise ValueError(
            f"清单文件过大: {p} ({file_size} 字节), "
            f"超过限制 {MAX_MANIFEST_SIZE} 字节"
        )

    text = p.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        result = json.loads(text) if p.suffix == ".json" else yaml.safe_load(text)
    except (yaml.YAMLError, ValueError) as e:
        logger.error("解析失败: %s, 错误: %s", p, e)
        raise

    if not isinstance(result, dict):
        logger.warning(
            "%s 顶层不是字典 (实际类型: %s)，按空处理",
            p, type(result).__name__,
        )
        return {}
    return result


def save_yaml(path: str | Path, data: Any) -> None:
    """原子写入单个 YAML 文件"""
    write_files_atomic({Path(path): dump_yaml(data)})
