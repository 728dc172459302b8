"""
API 数据模型

元数据服务解析结果的数据类。
"""

from dataclasses import dataclass
from enum import Enum

from packotter.models.manifest import FileReference


class ArtifactKind(Enum):
    """文件类型（决定存放目录）"""

    MOD = "mods"
    SHADER = "shaderpacks"


@dataclass(frozen=True)
class ResolvedArtifact:
    """
    已解析的文件

    每个 FileReference 解析时创建，下载完成或跳过后丢弃，不做持久化。
    """

    reference: FileReference
    file_name: str
    download_url: str
    kind: ArtifactKind = ArtifactKind.MOD
