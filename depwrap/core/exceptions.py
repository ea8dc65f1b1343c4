"""统一异常体系

所有业务异常继承 DepwrapError，每类异常带一个稳定的 code。
配置过程中的异常一律不在本地恢复，直接中止当前配置流程；
CLI 层据此输出带 code 的友好提示。
"""

from __future__ import annotations


class DepwrapError(Exception):
    """基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(DepwrapError):
    """配置文件缺失或内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(DepwrapError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class ResolutionError(DepwrapError):
    """版本清单中没有该依赖"""

    code = "RESOLUTION_ERROR"


class AcquisitionError(DepwrapError):
    """依赖拉取失败（网络 / 文件系统）"""

    code = "ACQUISITION_ERROR"


class ExportWriteError(DepwrapError):
    """导出文件或安装目录写入失败"""

    code = "EXPORT_WRITE_ERROR"


class ExecutionError(DepwrapError):
    """外部命令执行失败"""

    code = "EXECUTION_ERROR"
