"""
JMdict 对象模型（解码结果）。

结构（对应 JMdict DTD）：
- JMdict → entry*
- entry → ent_seq, k_ele*（书写形式）, r_ele*（读音）, sense*（义项）
- sense → pos / field / misc / dial 等分类标签 + gloss*（释义）

约束：
- 全部为 frozen dataclass，序列统一用 tuple：一次解码构建，之后不再修改。
- 分类标签里存放的是引用表展开后的文本（例如 "noun common"），不是原始 code。
- 不校验 DTD 的基数约束（例如 r_ele+ / sense+）。
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class KanjiElement:
    """k_ele：书写形式（keb）及其附加信息。"""

    text: str
    info: tuple[str, ...] = ()
    priority: tuple[str, ...] = ()


@dataclass(frozen=True)
class ReadingElement:
    """r_ele：读音（reb）。

    - no_kanji：re_nokanji 存在即为 True（该读音不是书写形式的真实读法）
    - restrictions：re_restr，仅适用于哪些 keb
    """

    text: str
    no_kanji: bool = False
    restrictions: tuple[str, ...] = ()
    info: tuple[str, ...] = ()
    priority: tuple[str, ...] = ()


@dataclass(frozen=True)
class Gloss:
    text: str
    lang: str = "eng"
    gender: str | None = None
    type: str | None = None


@dataclass(frozen=True)
class LanguageSource:
    """lsource：外来语来源。text 可能为空（只给出语言）。"""

    text: str
    lang: str = "eng"
    type: str | None = None
    wasei: bool = False


@dataclass(frozen=True)
class ExampleSentence:
    text: str
    lang: str


@dataclass(frozen=True)
class Example:
    source: str
    source_type: str | None
    text: str
    sentences: tuple[ExampleSentence, ...] = ()


@dataclass(frozen=True)
class Sense:
    kanji_restrictions: tuple[str, ...] = ()
    reading_restrictions: tuple[str, ...] = ()
    parts_of_speech: tuple[str, ...] = ()
    cross_references: tuple[str, ...] = ()
    antonyms: tuple[str, ...] = ()
    fields: tuple[str, ...] = ()
    misc: tuple[str, ...] = ()
    info: tuple[str, ...] = ()
    language_sources: tuple[LanguageSource, ...] = ()
    dialects: tuple[str, ...] = ()
    glosses: tuple[Gloss, ...] = ()
    examples: tuple[Example, ...] = ()


@dataclass(frozen=True)
class Entry:
    ent_seq: int | None
    kanji: tuple[KanjiElement, ...] = ()
    readings: tuple[ReadingElement, ...] = ()
    senses: tuple[Sense, ...] = ()


@dataclass(frozen=True)
class JMdict:
    """整本词典。created 取自根元素内的 `<!-- JMdict created: ... -->` 注释（若存在）。"""

    entries: tuple[Entry, ...] = ()
    created: str | None = None

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)


def to_dict(obj: Any) -> dict[str, Any]:
    """把任意模型对象转成可 JSON 序列化的 dict（tuple 转 list）。"""

    return asdict(obj, dict_factory=lambda items: {k: list(v) if isinstance(v, tuple) else v for k, v in items})
