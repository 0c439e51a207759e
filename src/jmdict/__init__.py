"""
JMdict（日语多语种词典）XML 解码器。

定位：
- 把 JMdict 文档解码成不可变的对象模型；解码时把命名引用（&n; / &v5k; ...）替换为可读文本。
- 对外只暴露：引用表（ENTITIES / resolve）、解码入口（parse 系列）、对象模型与错误类型。
"""

from .entities import ENTITIES, entity_groups, load_entities, resolve
from .errors import JMdictDecodeError, MalformedDocumentError, UndefinedEntityError
from .model import (
    Entry,
    Example,
    ExampleSentence,
    Gloss,
    JMdict,
    KanjiElement,
    LanguageSource,
    ReadingElement,
    Sense,
    to_dict,
)
from .parser import parse, parse_bytes, parse_file

__all__ = [
    "ENTITIES",
    "Entry",
    "Example",
    "ExampleSentence",
    "Gloss",
    "JMdict",
    "JMdictDecodeError",
    "KanjiElement",
    "LanguageSource",
    "MalformedDocumentError",
    "ReadingElement",
    "Sense",
    "UndefinedEntityError",
    "entity_groups",
    "load_entities",
    "parse",
    "parse_bytes",
    "parse_file",
    "resolve",
    "to_dict",
]
