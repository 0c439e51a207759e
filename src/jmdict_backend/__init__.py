"""
JMdict 解码服务（HTTP）。

定位：
- 以 FastAPI 暴露解码器与引用表，便于前端/脚本上传 JMdict 文件并查看解码结果。
- 解码语义全部在 `jmdict` 包内；本包只做请求解析与错误映射。
"""
