"""
命名引用解析层：在字节流进入 XML 解析器之前，按引用表替换 `&name;`。

定位：
- expat 只认 DTD 里声明的实体；JMdict 的展开文本需要由我们自己的引用表决定（覆盖 DTD 中的声明）。
- 因此在 XMLPullParser 之前放一个流式过滤器：逐块读入、替换、再 feed 给解析器（单遍，不预扫描）。

规则：
- `&name;` 且 name 在引用表中：替换为展开文本（XML 转义 + ASCII 字符引用，文本/属性值中都合法）。
- `&name;` 且 name 为 XML 预定义实体（amp/lt/gt/quot/apos）或字符引用（&#...;）：原样交给解析器。
- `&name;` 但 name 未定义：无论严格/宽松模式都失败（UndefinedEntityError，带行列号）。
- 不构成完整引用的 `&`：宽松模式视为字面量 `&`；严格模式原样交给解析器（由解析器报错）。
- 注释、CDATA、处理指令、整个 `<!DOCTYPE ...>`（含内部子集）内不做替换。

限制：
- 只支持 expat 能解码的 ASCII 兼容单字节扩展编码（实践中即 UTF-8）；UTF-16/32 直接失败。
- 列号为行内字节偏移（从 0 开始），行号从 1 开始。
"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from typing import BinaryIO
from xml.sax.saxutils import escape

from .errors import JMdictDecodeError, UndefinedEntityError


PREDEFINED_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})

_REFERENCE = re.compile(rb"&(?:#(?:x[0-9A-Fa-f]+|[0-9]+)|([A-Za-z_:][A-Za-z0-9_.:\-]*));")
_PARTIAL_REFERENCE = re.compile(rb"&(?:#x?[0-9A-Fa-f]*|[A-Za-z_:][A-Za-z0-9_.:\-]*)?")
_TEXT_SPECIAL = re.compile(rb"[&<]")
_DTD_SPECIAL = re.compile(rb"[\"'<\[\]>]")

# 跨块保留的未完成引用长度上限；超过即按“不构成引用”处理
_MAX_PENDING_REFERENCE = 256

_UNSUPPORTED_BOMS = (
    (b"\x00\x00\xfe\xff", "UTF-32"),
    (b"\xff\xfe\x00\x00", "UTF-32"),
    (b"\xfe\xff", "UTF-16"),
    (b"\xff\xfe", "UTF-16"),
)

TEXT = "text"
COMMENT = "comment"
CDATA = "cdata"
PI = "pi"
DOCTYPE = "doctype"

_OPENERS: tuple[tuple[bytes, str], ...] = (
    (b"<!DOCTYPE", DOCTYPE),
    (b"<![CDATA[", CDATA),
    (b"<!--", COMMENT),
    (b"<?", PI),
)
_LONGEST_OPENER = max(len(m) for m, _ in _OPENERS)

_CLOSERS = {
    COMMENT: b"-->",
    CDATA: b"]]>",
    PI: b"?>",
}


def _expand(value: str) -> bytes:
    return escape(value, {'"': "&quot;", "'": "&apos;"}).encode("ascii", "xmlcharrefreplace")


class EntityResolvingReader:
    """把字节流包装成“引用已解析”的字节块迭代器。"""

    def __init__(
        self,
        stream: BinaryIO,
        entities: Mapping[str, str],
        *,
        strict: bool = False,
        chunk_size: int = 1 << 16,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size 必须为正整数：{chunk_size}")
        self._stream = stream
        self._entities = entities
        self._strict = strict
        self._chunk_size = chunk_size
        self._expanded: dict[str, bytes] = {}

        self._mode = TEXT
        self._pending = b""
        self._dtd_subset = False
        self._dtd_quote = 0
        self._dtd_comment = False
        self._stalled = False

        # 位置对应 _pending 的起点
        self._line = 1
        self._col = 0

        self.stray_ampersands = 0
        self.bytes_read = 0

    def __iter__(self) -> Iterator[bytes]:
        first = True
        while True:
            try:
                data = self._stream.read(self._chunk_size)
            except (OSError, ValueError) as e:
                # 已关闭的文件对象抛 ValueError
                raise JMdictDecodeError(f"读取输入流失败：{e}") from e
            if not isinstance(data, (bytes, bytearray)):
                raise TypeError(f"stream.read() 必须返回 bytes，收到：{type(data).__name__}")
            if first and data:
                self._check_bom(bytes(data[:4]))
                first = False
            if not data:
                break
            self.bytes_read += len(data)
            out = self._process(bytes(data), final=False)
            if out:
                yield out
        out = self._process(b"", final=True)
        if out:
            yield out

    @staticmethod
    def _check_bom(head: bytes) -> None:
        for bom, name in _UNSUPPORTED_BOMS:
            if head.startswith(bom):
                raise JMdictDecodeError(f"不支持的文档编码：{name}（仅支持 ASCII 兼容编码）")

    def _position(self, buf: bytes, p: int) -> tuple[int, int]:
        line = self._line + buf.count(b"\n", 0, p)
        last_nl = buf.rfind(b"\n", 0, p)
        col = p - last_nl - 1 if last_nl >= 0 else self._col + p
        return line, col

    def _advance(self, buf: bytes, consumed: int) -> None:
        nl = buf.count(b"\n", 0, consumed)
        if nl:
            self._line += nl
            self._col = consumed - buf.rfind(b"\n", 0, consumed) - 1
        else:
            self._col += consumed

    def _expansion(self, name: str) -> bytes:
        b = self._expanded.get(name)
        if b is None:
            b = _expand(self._entities[name])
            self._expanded[name] = b
        return b

    def _process(self, data: bytes, *, final: bool) -> bytes:
        """处理 pending + data；无法在本块内判定的尾部留到下一块（final 时全部吐出）。"""

        buf = self._pending + data
        n = len(buf)
        out = bytearray()
        i = 0
        self._stalled = False

        while i < n and not self._stalled:
            if self._mode == TEXT:
                m = _TEXT_SPECIAL.search(buf, i)
                if m is None:
                    out += buf[i:]
                    i = n
                    break
                j = m.start()
                out += buf[i:j]
                i = j
                if buf[i] == 0x26:  # '&'
                    i = self._reference(buf, i, out, final=final)
                else:
                    i = self._open_markup(buf, i, out, final=final)
            elif self._mode == DOCTYPE:
                i = self._doctype(buf, i, out, final=final)
            else:
                i = self._skip_until_closer(buf, i, out, final=final)

        self._advance(buf, i)
        self._pending = buf[i:]
        return bytes(out)

    def _stall(self, i: int) -> int:
        self._stalled = True
        return i

    def _reference(self, buf: bytes, i: int, out: bytearray, *, final: bool) -> int:
        m = _REFERENCE.match(buf, i)
        if m is not None:
            name_b = m.group(1)
            if name_b is None:
                out += m.group(0)
                return m.end()
            name = name_b.decode("ascii")
            if name in self._entities:
                out += self._expansion(name)
            elif name in PREDEFINED_ENTITIES:
                out += m.group(0)
            else:
                line, col = self._position(buf, i)
                raise UndefinedEntityError(name, line=line, column=col)
            return m.end()

        partial = _PARTIAL_REFERENCE.match(buf, i)
        if not final and partial is not None and partial.end() == len(buf) and len(buf) - i <= _MAX_PENDING_REFERENCE:
            return self._stall(i)

        self.stray_ampersands += 1
        out += b"&" if self._strict else b"&amp;"
        return i + 1

    def _open_markup(self, buf: bytes, i: int, out: bytearray, *, final: bool) -> int:
        for marker, mode in _OPENERS:
            if buf.startswith(marker, i):
                out += marker
                self._mode = mode
                if mode == DOCTYPE:
                    self._dtd_subset = False
                    self._dtd_quote = 0
                    self._dtd_comment = False
                return i + len(marker)

        rest = buf[i : i + _LONGEST_OPENER]
        if not final and len(rest) < _LONGEST_OPENER and any(marker.startswith(rest) for marker, _ in _OPENERS):
            return self._stall(i)

        out += b"<"
        return i + 1

    def _skip_until_closer(self, buf: bytes, i: int, out: bytearray, *, final: bool) -> int:
        closer = _CLOSERS[self._mode] if not self._dtd_comment else b"-->"
        n = len(buf)
        k = buf.find(closer, i)
        if k >= 0:
            end = k + len(closer)
            out += buf[i:end]
            if self._dtd_comment:
                self._dtd_comment = False
            else:
                self._mode = TEXT
            return end
        if final:
            out += buf[i:]
            return n
        # closer 可能被切在块尾：保留 len(closer)-1 字节
        cut = max(i, n - (len(closer) - 1))
        out += buf[i:cut]
        return self._stall(cut)

    def _doctype(self, buf: bytes, i: int, out: bytearray, *, final: bool) -> int:
        n = len(buf)
        while i < n:
            if self._dtd_comment:
                i = self._skip_until_closer(buf, i, out, final=final)
                if self._stalled:
                    return i
                continue

            if self._dtd_quote:
                k = buf.find(bytes((self._dtd_quote,)), i)
                if k < 0:
                    out += buf[i:]
                    return n
                out += buf[i : k + 1]
                i = k + 1
                self._dtd_quote = 0
                continue

            m = _DTD_SPECIAL.search(buf, i)
            if m is None:
                out += buf[i:]
                return n
            j = m.start()
            out += buf[i:j]
            i = j
            c = buf[i]

            if c in (0x22, 0x27):
                self._dtd_quote = c
                out.append(c)
                i += 1
            elif c == 0x3C:  # '<'
                if self._dtd_subset and buf.startswith(b"<!--", i):
                    out += b"<!--"
                    i += 4
                    self._dtd_comment = True
                    continue
                if self._dtd_subset and not final and n - i < 4 and b"<!--".startswith(buf[i:]):
                    return self._stall(i)
                out.append(c)
                i += 1
            elif c == 0x5B:  # '['
                self._dtd_subset = True
                out.append(c)
                i += 1
            elif c == 0x5D:  # ']'
                self._dtd_subset = False
                out.append(c)
                i += 1
            else:  # '>'
                out.append(c)
                i += 1
                if not self._dtd_subset:
                    self._mode = TEXT
                    return i
        return i
