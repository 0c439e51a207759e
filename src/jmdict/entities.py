"""
JMdict 命名引用表（&n; / &v5k; / &ksb; ...）。

定位：
- JMdict 在正文里用命名引用表示词性、方言、领域、用法等分类；解码时需要把它们替换为可读文本。
- 引用表是纯数据：存放在包内 `data/entities.yaml`，按类别分组；这里负责加载、校验并展开成只读映射。

约束：
- key 区分大小写，逐字匹配；展开文本逐字返回，不做任何规范化。
- 同一 code 不允许出现在两个分组中；加载失败必须抛错，不做静默合并。
- 表在导入时构建一次，之后只读（MappingProxyType），可被并发解码安全共享。
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .errors import UndefinedEntityError


DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_ENTITIES_FILE = DATA_DIR / "entities.yaml"


def _as_group(m: Any, *, where: str) -> dict[str, str]:
    if not isinstance(m, dict) or not m:
        raise ValueError(f"entities: {where} 必须是非空 dict")
    out: dict[str, str] = {}
    for k, v in m.items():
        if not isinstance(k, str) or not k:
            raise ValueError(f"entities: {where} 含非法 code：{k!r}")
        if not isinstance(v, str) or not v:
            raise ValueError(f"entities: {where}[{k!r}] 的展开文本必须是非空字符串")
        out[k] = v
    return out


def _load_groups(path: Path) -> dict[str, dict[str, str]]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("entities: 顶层必须是 dict")
    groups_raw = raw.get("groups")
    if not isinstance(groups_raw, dict) or not groups_raw:
        raise ValueError("entities: 缺少 groups dict")

    groups: dict[str, dict[str, str]] = {}
    owner: dict[str, str] = {}
    for group_name, m in groups_raw.items():
        if not isinstance(group_name, str) or not group_name:
            raise ValueError(f"entities: 分组名非法：{group_name!r}")
        group = _as_group(m, where=f"groups.{group_name}")
        for code in group:
            if code in owner:
                raise ValueError(f"entities: code 重复：{code!r}（{owner[code]} / {group_name}）")
            owner[code] = group_name
        groups[group_name] = group
    return groups


def load_entities(path: Path) -> Mapping[str, str]:
    """加载并校验一个引用表文件，返回扁平化后的只读映射。"""

    return _flatten(_load_groups(path))


def _flatten(groups: Mapping[str, Mapping[str, str]]) -> Mapping[str, str]:
    flat: dict[str, str] = {}
    for group in groups.values():
        flat.update(group)
    return MappingProxyType(flat)


# 默认引用表只在导入时读取、校验一次
_GROUPS: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {name: MappingProxyType(g) for name, g in _load_groups(DEFAULT_ENTITIES_FILE).items()}
)

ENTITIES: Mapping[str, str] = _flatten(_GROUPS)


def entity_groups() -> Mapping[str, Mapping[str, str]]:
    """默认引用表（按类别分组）。"""

    return _GROUPS


def resolve(name: str, entities: Mapping[str, str] = ENTITIES) -> str:
    try:
        return entities[name]
    except KeyError:
        raise UndefinedEntityError(name) from None
