"""
源码根目录。

定位：
- `jmdict`：解码器核心（引用表、引用解析层、对象模型、解码入口）。
- `jmdict_backend`：HTTP 服务，只依赖 `jmdict` 的公开接口。
"""
