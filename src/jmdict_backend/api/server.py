"""
JMdict 解码服务 API（FastAPI）。

约定：
- 服务端口：7140
- 上传文件即解码，不落盘；解码结果整体返回（可用 limit 截取前 N 条）。

API 设计原则：
- 严格校验，宁可失败：解码失败返回 400，并带上解码器给出的原因（未定义引用附带行列号）。
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi import File, Form, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from jmdict import ENTITIES, JMdictDecodeError, UndefinedEntityError, entity_groups, parse_bytes, resolve, to_dict


logger = logging.getLogger(__name__)

app = FastAPI(title="JMdict Decoder", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/entities")
def api_list_entities() -> dict[str, Any]:
    groups = entity_groups()
    return {
        "count": len(ENTITIES),
        "groups": {name: dict(g) for name, g in groups.items()},
    }


@app.get("/entities/{name}")
def api_get_entity(name: str) -> dict[str, str]:
    try:
        return {"name": name, "value": resolve(name)}
    except UndefinedEntityError as e:
        raise HTTPException(status_code=404, detail=f"未定义的引用：{name!r}") from e


class ResolveRequest(BaseModel):
    names: list[str] = Field(min_length=1)


@app.post("/entities/resolve")
def api_resolve_entities(req: ResolveRequest) -> dict[str, Any]:
    """批量查询引用；未定义的 code 单独列出，不整体失败。"""

    values: dict[str, str] = {}
    undefined: list[str] = []
    for name in req.names:
        if name in ENTITIES:
            values[name] = ENTITIES[name]
        elif name not in undefined:
            undefined.append(name)
    return {"values": values, "undefined": undefined}


@app.post("/decode")
async def api_decode(
    file: UploadFile = File(...),
    strict: bool = Form(default=False),
    limit: int | None = Form(default=None),
) -> dict[str, Any]:
    """上传 JMdict XML 并解码（宽松模式默认开启；strict=true 时不容忍游离的 &）。"""

    if limit is not None and limit < 0:
        raise HTTPException(status_code=400, detail=f"limit 不能为负数：{limit}")

    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="上传文件为空")

    try:
        doc = parse_bytes(raw, strict=strict)
    except UndefinedEntityError as e:
        raise HTTPException(
            status_code=400,
            detail={"error": "undefined_entity", "message": str(e), "name": e.name, "line": e.line, "column": e.column},
        ) from e
    except JMdictDecodeError as e:
        raise HTTPException(status_code=400, detail={"error": "decode_failed", "message": str(e)}) from e

    entries = doc.entries if limit is None else doc.entries[:limit]
    logger.info("decoded %s: %d entries (strict=%s)", file.filename, len(doc.entries), strict)
    return {
        "filename": file.filename,
        "created": doc.created,
        "entry_count": len(doc.entries),
        "entries": [to_dict(e) for e in entries],
    }
