"""
PackOtter 服务层

包含元数据 API 客户端与文件解析服务。
"""

from packotter.services.api_client import CurseForgeClient
from packotter.services.artifact_resolver import ArtifactResolver, classify

__all__ = [
    "CurseForgeClient",
    "ArtifactResolver",
    "classify",
]
