"""
文件解析服务

将清单中的 (projectId, fileId) 引用解析为具体文件名与下载地址，
并按文件名判断存放目录。
"""

from typing import Optional

from loguru import logger

from packotter.models import ArtifactKind, FileReference, ResolvedArtifact
from packotter.services.api_client import CurseForgeClient


def classify(file_name: str) -> ArtifactKind:
    """
    按文件名判断文件类型

    文件名（不区分大小写）包含 "shader" 且以 .zip 结尾时视为光影包，
    否则视为模组。这只是启发式规则，误判不影响正确性。
    """
    lowered = file_name.lower()
    if "shader" in lowered and lowered.endswith(".zip"):
        return ArtifactKind.SHADER
    return ArtifactKind.MOD


class ArtifactResolver:
    """文件解析器"""

    def __init__(self, client: CurseForgeClient):
        self.client = client

    async def resolve(self, ref: FileReference) -> Optional[ResolvedArtifact]:
        """
        解析单个文件引用

        Returns:
            ResolvedArtifact；文件不存在或响应缺少 data.fileName 时返回 None
        """
        response = await self.client.get_file(ref.project_id, ref.file_id)
        if response is None:
            logger.warning(f"[跳过] 文件不存在 (项目 {ref.project_id}, 文件 {ref.file_id})")
            return None

        data = response.get("data") if isinstance(response, dict) else None
        file_name = data.get("fileName") if isinstance(data, dict) else None
        if (
            not isinstance(file_name, str)
            or not file_name.strip()
            or file_name in (".", "..")
            or "/" in file_name
            or "\\" in file_name
        ):
            logger.warning(
                f"[跳过] 元数据缺少有效的 fileName (项目 {ref.project_id}, 文件 {ref.file_id})"
            )
            return None

        return ResolvedArtifact(
            reference=ref,
            file_name=file_name,
            download_url=self.client.download_url(ref.project_id, ref.file_id),
            kind=classify(file_name),
        )
