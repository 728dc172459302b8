"""
PackOtter 数据模型包

包含配置模型、清单模型和 API 模型定义。
"""

from packotter.models.config import (
    LayoutKind,
    ApiConfig,
    DownloadConfig,
    OutputConfig,
    ExtractConfig,
    PackOtterConfig,
    load_config,
    parse_selector,
)
from packotter.models.manifest import (
    FileReference,
    ModLoaderEntry,
    Manifest,
    load_manifest,
)
from packotter.models.loader import (
    LoaderDescriptor,
    resolve_loader,
)
from packotter.models.api import (
    ArtifactKind,
    ResolvedArtifact,
)

__all__ = [
    # 配置模型
    "LayoutKind",
    "ApiConfig",
    "DownloadConfig",
    "OutputConfig",
    "ExtractConfig",
    "PackOtterConfig",
    "load_config",
    "parse_selector",
    # 清单模型
    "FileReference",
    "ModLoaderEntry",
    "Manifest",
    "load_manifest",
    # 加载器
    "LoaderDescriptor",
    "resolve_loader",
    # API 模型
    "ArtifactKind",
    "ResolvedArtifact",
]
