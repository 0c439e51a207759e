"""
JMdict 解码服务开发服务器启动脚本。

定位：
- 未安装（pip install -e .）时也能直接从源码启动：启动时把 `src` 加到 `sys.path`。
- 约定服务端口为 7140。

用法：
  python run_server.py
  python run_server.py --reload --log-level debug
  python run_server.py --host 0.0.0.0 --port 7140
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import uvicorn


APP = "jmdict_backend.api.server:app"
SRC_DIR = Path(__file__).resolve().parent / "src"
LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="启动 JMdict 解码服务（uvicorn）")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=7140)
    parser.add_argument("--reload", action="store_true", help="源码变动时自动重载（只 watch src/）")
    parser.add_argument("--log-level", default="info", choices=LOG_LEVELS)
    return parser


def main(argv: list[str] | None = None) -> None:
    if not SRC_DIR.exists():
        raise RuntimeError(f"找不到源码目录：{SRC_DIR}")
    args = build_arg_parser().parse_args(argv)

    sys.path.insert(0, str(SRC_DIR))
    uvicorn.run(
        APP,
        host=args.host,
        port=args.port,
        reload=args.reload,
        reload_dirs=[str(SRC_DIR)] if args.reload else None,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
