"""depwrap - 头文件库依赖获取与导出登记工具"""

__version__ = "0.3.0"
