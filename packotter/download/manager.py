"""
下载管理器

将单个文件流式写入目标目录。正文先写入 ``<文件名>.part``，完整收到后才改名为最终文件名，
因此目标目录中出现的文件一定是完整的。
"""

import asyncio
import os
from typing import Optional

import aiofiles
import aiohttp
from loguru import logger

from packotter.exceptions import (
    DownloadError,
    DownloadFileError,
    DownloadNetworkError,
)


PART_SUFFIX = ".part"


def _remove_quietly(path: str) -> None:
    if os.path.exists(path):
        try:
            os.remove(path)
        except OSError:
            pass


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        max_retries: int = 0,
        retry_delay: float = 1.0,
        chunk_size: int = 8192,
    ):
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.chunk_size = chunk_size
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owned_session = True
        return self._session

    async def download_file(self, url: str, filename: str, download_dir: str) -> int:
        """
        下载单个文件

        Returns:
            写入的字节数

        Raises:
            DownloadError: 重试用尽后仍然失败
        """
        file_path = os.path.join(download_dir, filename)
        part_path = file_path + PART_SUFFIX
        os.makedirs(download_dir, exist_ok=True)

        logger.info(f"[开始] 下载: {filename}")

        for attempt in range(self.max_retries + 1):
            try:
                downloaded = await self._fetch(url, filename, part_path)
                os.replace(part_path, file_path)
                logger.success(f"[完成] '{filename}' 下载完成")
                return downloaded

            except (aiohttp.ClientError, asyncio.TimeoutError, OSError, DownloadError) as e:
                _remove_quietly(part_path)

                if attempt < self.max_retries:
                    delay = self.retry_delay * (2**attempt)
                    logger.warning(
                        f"[重试] 下载 '{filename}' 失败 (第 {attempt + 1} 次): {e}. "
                        f"{delay:.1f}s 后重试..."
                    )
                    await asyncio.sleep(delay)
                    continue

                if isinstance(e, DownloadError):
                    raise
                # asyncio.TimeoutError 在 3.11+ 是 OSError 的子类，需先判断
                if isinstance(e, (aiohttp.ClientError, asyncio.TimeoutError)):
                    raise DownloadNetworkError(
                        f"下载失败: {filename}", context={"url": url, "error": str(e)}
                    )
                raise DownloadFileError(
                    f"写入文件失败: {filename}",
                    context={"file": file_path, "error": str(e)},
                )

            except BaseException:
                # 取消或中断：不留下半截文件，原样抛出
                _remove_quietly(part_path)
                raise

        return 0

    async def _fetch(self, url: str, filename: str, part_path: str) -> int:
        async with self.session.get(url) as response:
            if response.status != 200:
                raise DownloadNetworkError(
                    f"HTTP {response.status}",
                    context={"url": url, "status": response.status},
                )

            total_size = int(response.headers.get("Content-Length", 0))
            downloaded = 0
            last_percent = 0.0

            async with aiofiles.open(part_path, "wb") as f:
                async for chunk in response.content.iter_chunked(self.chunk_size):
                    await f.write(chunk)
                    downloaded += len(chunk)

                    if total_size > 0:
                        percent = (downloaded / total_size) * 100
                        if percent - last_percent >= 25:
                            logger.debug(f"[进度] {filename}: {percent:.1f}%")
                            last_percent = percent

        return downloaded

    async def close(self):
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
