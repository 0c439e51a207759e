"""
JMdict 解码入口：字节流 → JMdict 对象模型。

定位：
- 把“引用表 + 宽松模式”两个配置接到 XML 解析管线上：
  stream → EntityResolvingReader（按引用表替换 &name;）→ XMLPullParser → 对象模型。
- 单遍解码：每读完一个顶层 entry 就映射为 Entry 并释放其子树；整本词典解码完成后一次性返回。

约束（正确地失败）：
- 未定义的命名引用、XML 结构错误、空/截断文档、流读取失败：一律抛 JMdictDecodeError 子类，不返回部分结果。
- 宽松模式只放宽“不构成引用的 &”（视为字面量）；其余结构问题由 expat 判定，两种模式下都致命。
- 不做 DTD 校验，不做词性继承等内容规范化；未知子元素忽略。
"""

from __future__ import annotations

import io
import logging
import re
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, BinaryIO
import xml.etree.ElementTree as ET

from .entities import ENTITIES
from .errors import JMdictDecodeError, MalformedDocumentError
from .model import Entry, Example, ExampleSentence, Gloss, JMdict, KanjiElement, LanguageSource, ReadingElement, Sense
from .reader import EntityResolvingReader


logger = logging.getLogger(__name__)

ROOT_TAG = "JMdict"
XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"
DEFAULT_LANG = "eng"

_CREATED = re.compile(r"JMdict created:\s*(\S+)")


def _text(el: ET.Element | None) -> str:
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def _texts(parent: ET.Element, tag: str) -> tuple[str, ...]:
    return tuple(_text(el) for el in parent.findall(tag))


def _parse_ent_seq(entry: ET.Element) -> int | None:
    raw = entry.findtext("ent_seq")
    if raw is None:
        return None
    raw = raw.strip()
    try:
        return int(raw)
    except ValueError as e:
        raise MalformedDocumentError(f"ent_seq 不是整数：{raw!r}") from e


def _build_kanji(k_ele: ET.Element) -> KanjiElement:
    return KanjiElement(
        text=_text(k_ele.find("keb")),
        info=_texts(k_ele, "ke_inf"),
        priority=_texts(k_ele, "ke_pri"),
    )


def _build_reading(r_ele: ET.Element) -> ReadingElement:
    return ReadingElement(
        text=_text(r_ele.find("reb")),
        no_kanji=r_ele.find("re_nokanji") is not None,
        restrictions=_texts(r_ele, "re_restr"),
        info=_texts(r_ele, "re_inf"),
        priority=_texts(r_ele, "re_pri"),
    )


def _build_gloss(el: ET.Element) -> Gloss:
    return Gloss(
        text=_text(el),
        lang=el.get(XML_LANG) or DEFAULT_LANG,
        gender=el.get("g_gend"),
        type=el.get("g_type"),
    )


def _build_lsource(el: ET.Element) -> LanguageSource:
    return LanguageSource(
        text=_text(el),
        lang=el.get(XML_LANG) or DEFAULT_LANG,
        type=el.get("ls_type"),
        wasei=el.get("ls_wasei") == "y",
    )


def _build_example(el: ET.Element) -> Example:
    src = el.find("ex_srce")
    return Example(
        source=_text(src),
        source_type=src.get("exsrc_type") if src is not None else None,
        text=_text(el.find("ex_text")),
        sentences=tuple(
            ExampleSentence(text=_text(s), lang=s.get(XML_LANG) or DEFAULT_LANG) for s in el.findall("ex_sent")
        ),
    )


def _build_sense(sense: ET.Element) -> Sense:
    return Sense(
        kanji_restrictions=_texts(sense, "stagk"),
        reading_restrictions=_texts(sense, "stagr"),
        parts_of_speech=_texts(sense, "pos"),
        cross_references=_texts(sense, "xref"),
        antonyms=_texts(sense, "ant"),
        fields=_texts(sense, "field"),
        misc=_texts(sense, "misc"),
        info=_texts(sense, "s_inf"),
        language_sources=tuple(_build_lsource(el) for el in sense.findall("lsource")),
        dialects=_texts(sense, "dial"),
        glosses=tuple(_build_gloss(el) for el in sense.findall("gloss")),
        examples=tuple(_build_example(el) for el in sense.findall("example")),
    )


def build_entry(entry: ET.Element) -> Entry:
    """把一个 `<entry>` 元素映射为 Entry（引用已在解析前替换）。"""

    return Entry(
        ent_seq=_parse_ent_seq(entry),
        kanji=tuple(_build_kanji(el) for el in entry.findall("k_ele")),
        readings=tuple(_build_reading(el) for el in entry.findall("r_ele")),
        senses=tuple(_build_sense(el) for el in entry.findall("sense")),
    )


class _DocumentBuilder:
    """消费 XMLPullParser 事件，逐个 entry 构建模型。"""

    def __init__(self) -> None:
        self._depth = 0
        self._root: ET.Element | None = None
        self._entries: list[Entry] = []
        self._created: str | None = None

    def consume(self, events: Iterable[tuple[str, Any]]) -> None:
        for event, elem in events:
            if event == "start":
                self._depth += 1
                if self._depth == 1:
                    if elem.tag != ROOT_TAG:
                        raise MalformedDocumentError(f"根元素必须是 {ROOT_TAG}，收到：{elem.tag!r}")
                    self._root = elem
            elif event == "end":
                if self._depth == 2 and elem.tag == "entry":
                    self._entries.append(build_entry(elem))
                    # 已映射的 entry 不再需要保留子树
                    if self._root is not None:
                        self._root.clear()
                self._depth -= 1
            elif event == "comment":
                if self._depth == 1 and self._created is None:
                    text = elem if isinstance(elem, str) else (elem.text or "")
                    m = _CREATED.search(text)
                    if m:
                        self._created = m.group(1)

    def finish(self) -> JMdict:
        if self._root is None:
            raise MalformedDocumentError("文档缺少根元素")
        return JMdict(entries=tuple(self._entries), created=self._created)


def parse(stream: BinaryIO, *, entities: Mapping[str, str] | None = None, strict: bool = False) -> JMdict:
    """解码一个完整的 JMdict 文档。

    - entities：命名引用表，默认使用内置 ENTITIES（覆盖文档 DTD 里的实体声明）
    - strict：False（默认）时把不构成引用的 `&` 当作字面量；True 时交给 expat 报错
    """

    table = ENTITIES if entities is None else entities
    reader = EntityResolvingReader(stream, table, strict=strict)
    pull = ET.XMLPullParser(events=("start", "end", "comment"))
    builder = _DocumentBuilder()

    try:
        for chunk in reader:
            pull.feed(chunk)
            builder.consume(pull.read_events())
        pull.close()
        builder.consume(pull.read_events())
    except ET.ParseError as e:
        line, column = e.position
        raise MalformedDocumentError(f"XML 结构错误：{e}", line=line, column=column) from e

    doc = builder.finish()
    logger.debug(
        "decoded %d entries (%d bytes, strict=%s, stray_ampersands=%d)",
        len(doc.entries),
        reader.bytes_read,
        strict,
        reader.stray_ampersands,
    )
    return doc


def parse_bytes(data: bytes, **kwargs: Any) -> JMdict:
    return parse(io.BytesIO(data), **kwargs)


def parse_file(path: str | Path, **kwargs: Any) -> JMdict:
    """按路径解码；文件不存在/不可读同样抛 JMdictDecodeError。"""

    try:
        f = open(path, "rb")
    except OSError as e:
        raise JMdictDecodeError(f"无法打开文件：{path}（{e}）") from e
    with f:
        return parse(f, **kwargs)
