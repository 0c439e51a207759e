"""
JMdict 解码错误类型。

约定：
- 全部继承 ValueError：调用方（例如 API 层）可以统一按 ValueError 处理为 400。
- 解码失败只抛异常，不返回部分结果。
"""

from __future__ import annotations


class JMdictDecodeError(ValueError):
    """JMdict 文档无法解码（结构错误、流读取失败、未定义引用等）。"""


class UndefinedEntityError(JMdictDecodeError):
    """文档使用了引用表中不存在的命名引用（&name;）。"""

    def __init__(self, name: str, *, line: int | None = None, column: int | None = None) -> None:
        self.name = name
        self.line = line
        self.column = column
        where = f": line {line}, column {column}" if line is not None else ""
        super().__init__(f"undefined entity &{name};{where}")


class MalformedDocumentError(JMdictDecodeError):
    """XML 结构不合法（含空文档、截断文档、根元素不符等）。"""

    def __init__(self, message: str, *, line: int | None = None, column: int | None = None) -> None:
        self.line = line
        self.column = column
        super().__init__(message)
