"""
API 客户端

CurseForge 文件元数据服务的异步客户端。
"""

from typing import Optional

import aiohttp

from packotter.exceptions import APIError, APIMalformedError
from packotter.models.config import DEFAULT_API_BASE


class CurseForgeClient:
    """CurseForge 元数据客户端"""

    def __init__(
        self,
        base_url: str = DEFAULT_API_BASE,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            headers = {"User-Agent": self.user_agent} if self.user_agent else None
            # 只限制连接与单次读取，持续有数据的长下载不受影响
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=None, sock_connect=self.timeout, sock_read=self.timeout
                ),
                headers=headers,
            )
            self._owned_session = True
        return self._session

    def file_url(self, project_id: int, file_id: int) -> str:
        return f"{self.base_url}/mods/{project_id}/files/{file_id}"

    def download_url(self, project_id: int, file_id: int) -> str:
        """文件下载地址（与元数据使用相同的 projectId/fileId）"""
        return f"{self.file_url(project_id, file_id)}/download"

    async def get_file(self, project_id: int, file_id: int) -> Optional[dict]:
        """
        获取文件元数据

        Returns:
            响应 JSON；404 时返回 None

        Raises:
            APIError: 其他非 2xx 状态
            APIMalformedError: 响应不是 JSON
        """
        url = self.file_url(project_id, file_id)
        async with self.session.get(url) as response:
            if response.status == 404:
                return None
            if not 200 <= response.status < 300:
                raise APIError(
                    f"API 请求失败 (状态码: {response.status})",
                    context={"project_id": project_id, "file_id": file_id},
                    response=response,
                )
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise APIMalformedError(
                    f"API 响应不是有效的 JSON: {e}",
                    context={"project_id": project_id, "file_id": file_id},
                    response=response,
                )

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
