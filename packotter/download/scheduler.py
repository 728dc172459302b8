"""
分批下载调度器

按清单顺序将文件引用分成固定大小的批次，批内并发解析与下载，
整批结束（无论成功失败）后才开始下一批。
"""

import asyncio
import os
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set, Tuple

import aiohttp
from loguru import logger

from packotter.download.manager import DownloadManager
from packotter.exceptions import PackOtterError
from packotter.models import ArtifactKind, FileReference
from packotter.models.config import DEFAULT_BATCH_SIZE
from packotter.services import ArtifactResolver


@dataclass
class FetchReport:
    """调度结果（尽力而为，而非全有或全无）"""

    total: int = 0
    downloaded: int = 0
    existing: int = 0
    skipped_optional: int = 0
    shaders: int = 0
    bytes_downloaded: int = 0
    missing: List[FileReference] = field(default_factory=list)
    failed: List[Tuple[FileReference, str]] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        """未能获取的文件数"""
        return len(self.missing) + len(self.failed)

    def summary(self) -> str:
        return (
            f"{self.downloaded} 个下载 ({self.bytes_downloaded} 字节), {self.existing} 个已存在, "
            f"{self.skipped} 个跳过 (共 {self.total} 个)"
        )


class BatchScheduler:
    """分批下载调度器"""

    def __init__(
        self,
        resolver: ArtifactResolver,
        downloader: DownloadManager,
        batch_size: int = DEFAULT_BATCH_SIZE,
        include_optional: bool = True,
    ):
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self.resolver = resolver
        self.downloader = downloader
        self.batch_size = batch_size
        self.include_optional = include_optional
        self._claimed: Set[str] = set()

    def batches(self, files: Sequence[FileReference]) -> List[List[FileReference]]:
        return [
            list(files[i : i + self.batch_size])
            for i in range(0, len(files), self.batch_size)
        ]

    async def run(
        self,
        files: Sequence[FileReference],
        mods_dir: str,
        shaders_dir: str,
    ) -> FetchReport:
        """
        处理全部文件引用

        Args:
            files: 清单中的文件引用（保持清单顺序）
            mods_dir: 模组目录
            shaders_dir: 光影包目录

        Returns:
            FetchReport: 统计信息；单个文件失败不会中断调度
        """
        report = FetchReport(total=len(files))
        destinations = {
            ArtifactKind.MOD: str(mods_dir),
            ArtifactKind.SHADER: str(shaders_dir),
        }
        os.makedirs(destinations[ArtifactKind.MOD], exist_ok=True)

        batches = self.batches(files)
        logger.info(
            f"[元数据] 开始解析 {len(files)} 个文件 "
            f"({len(batches)} 批, 每批 {self.batch_size} 个)"
        )

        for index, batch in enumerate(batches, start=1):
            logger.debug(f"[批次] 第 {index}/{len(batches)} 批, {len(batch)} 个文件")
            results = await asyncio.gather(
                *(self._fetch_one(ref, destinations, report) for ref in batch),
                return_exceptions=True,
            )
            for ref, result in zip(batch, results):
                if isinstance(result, BaseException):
                    # _fetch_one 未覆盖的异常也只影响该文件
                    report.failed.append((ref, repr(result)))
                    logger.error(
                        f"[错误] 处理 (项目 {ref.project_id}, 文件 {ref.file_id}) "
                        f"时发生意外: {result!r}"
                    )

        logger.success(f"[元数据] 解析与下载完成: {report.summary()}")
        return report

    async def _fetch_one(
        self,
        ref: FileReference,
        destinations: Dict[ArtifactKind, str],
        report: FetchReport,
    ) -> None:
        """解析并下载单个文件，所有可预期的失败都在这里处理"""
        if not ref.required and not self.include_optional:
            report.skipped_optional += 1
            logger.info(f"[跳过] 可选文件 (项目 {ref.project_id}, 文件 {ref.file_id})")
            return

        try:
            artifact = await self.resolver.resolve(ref)
            if artifact is None:
                report.missing.append(ref)
                return

            download_dir = destinations[artifact.kind]
            target = os.path.join(download_dir, artifact.file_name)

            # 同一目录内先到先得
            if target in self._claimed or os.path.exists(target):
                report.existing += 1
                logger.info(f"[跳过] '{artifact.file_name}' 已存在")
                return
            self._claimed.add(target)

            try:
                written = await self.downloader.download_file(
                    artifact.download_url, artifact.file_name, download_dir
                )
            except BaseException:
                self._claimed.discard(target)
                raise

            report.downloaded += 1
            report.bytes_downloaded += written or 0
            if artifact.kind is ArtifactKind.SHADER:
                report.shaders += 1

        except (PackOtterError, aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            report.failed.append((ref, str(e)))
            logger.warning(
                f"[跳过] 获取 (项目 {ref.project_id}, 文件 {ref.file_id}) 失败: {e}"
            )
