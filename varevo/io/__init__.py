"""
I/O 模块 - 文件读写、KernelHaven 存在条件表与变体配置
"""

from .file_ops import (
    read_json,
    write_json,
    read_jsonl,
    write_jsonl,
    read_lines,
    write_lines,
    read_id_list,
)
from .configuration import read_configuration, write_configuration

__all__ = [
    "read_json",
    "write_json",
    "read_jsonl",
    "write_jsonl",
    "read_lines",
    "write_lines",
    "read_id_list",
    "read_configuration",
    "write_configuration",
]
