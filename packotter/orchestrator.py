"""
主协调器

解压 → 读取清单 → 分批解析下载 → 组装实例 → 打包，两种输出格式共用一条流水线。
"""

import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from loguru import logger

from packotter.archive import ArchiveReader
from packotter.download import BatchScheduler, DownloadManager, FetchReport
from packotter.models import (
    LayoutKind,
    Manifest,
    PackOtterConfig,
    load_manifest,
    resolve_loader,
)
from packotter.models.manifest import MANIFEST_NAME
from packotter.packager import make_layout
from packotter.services import ArtifactResolver, CurseForgeClient


SCRATCH_PREFIX = ".packotter-"


@contextmanager
def scratch_directory(parent: Path, kind: LayoutKind) -> Iterator[Path]:
    """
    临时工作目录

    退出时无条件删除；删除失败只记录警告，不影响运行结果。
    """
    path = Path(tempfile.mkdtemp(prefix=f"{SCRATCH_PREFIX}{kind.value}-", dir=parent))
    logger.debug(f"[临时] 工作目录: {path}")
    try:
        yield path
    finally:
        try:
            shutil.rmtree(path)
            logger.debug(f"[临时] 已清理工作目录: {path}")
        except OSError as e:
            logger.warning(f"[临时] 清理工作目录失败: {path} ({e})")


def overrides_source(extract_dir: Path, overrides: Optional[str]) -> Optional[Path]:
    """清单声明的 overrides 目录；不在解压目录内时视为不存在"""
    if not overrides:
        return None
    root = extract_dir.resolve()
    source = (root / overrides).resolve()
    if root not in source.parents:
        logger.debug(f"[覆盖] overrides 路径不在解压目录内，忽略: {overrides}")
        return None
    return source


@dataclass
class RunResult:
    """单次转换结果"""

    kind: LayoutKind
    manifest: Manifest
    output_path: Path
    report: FetchReport


class PackOtterOrchestrator:
    """PackOtter 主协调器"""

    def __init__(
        self,
        config: PackOtterConfig,
        input_path: Union[str, os.PathLike],
        output_dir: Union[str, os.PathLike],
        kind: LayoutKind,
        client: Optional[CurseForgeClient] = None,
        downloader: Optional[DownloadManager] = None,
    ):
        self.config = config
        self.input_path = Path(input_path)
        self.output_dir = Path(output_dir)
        self.kind = kind
        self._client = client
        self._downloader = downloader

    async def run(self) -> RunResult:
        """运行完整的转换流程"""
        logger.info(f"开始 {self.kind.value} 转换: {self.input_path} -> {self.output_dir}")

        created_output = not self.output_dir.exists()
        self.output_dir.mkdir(parents=True, exist_ok=True)

        try:
            with scratch_directory(self.output_dir, self.kind) as scratch:
                return await self._run_in(scratch)
        except Exception:
            # 本次创建且仍为空的输出目录不保留
            if (
                created_output
                and self.output_dir.is_dir()
                and not any(self.output_dir.iterdir())
            ):
                try:
                    self.output_dir.rmdir()
                except OSError:
                    pass
            raise

    async def _run_in(self, scratch: Path) -> RunResult:
        extract_dir = scratch / "extract"
        reader = ArchiveReader(self.input_path, strict=self.config.extract.strict)
        reader.extract(extract_dir)

        manifest = load_manifest(extract_dir / MANIFEST_NAME)
        logger.info(
            f"整合包: {manifest.name} {manifest.version} "
            f"(Minecraft {manifest.game_version}, {manifest.loader_id}, "
            f"{len(manifest.files)} 个文件)"
        )
        loader = resolve_loader(manifest.loader_id, strict=self.config.strict_loader)

        layout = make_layout(
            self.kind,
            self.output_dir,
            scratch,
            manifest,
            loader,
            hash_suffix=self.config.output.hash_suffix,
            compression_level=self.config.output.compression_level,
        )
        layout.prepare()

        report = await self._fetch(manifest, layout.mods_dir, layout.shaders_dir)

        await layout.assemble(overrides_source(extract_dir, manifest.overrides))
        output_path = await layout.finalize()

        if report.skipped:
            logger.warning(
                f"有 {report.skipped} 个文件未能获取: "
                + ", ".join(str(ref) for ref in report.missing + [r for r, _ in report.failed])
            )
        logger.success(f"{self.kind.value} 转换完成: {output_path} ({report.summary()})")

        return RunResult(
            kind=self.kind, manifest=manifest, output_path=output_path, report=report
        )

    async def _fetch(self, manifest: Manifest, mods_dir: Path, shaders_dir: Path) -> FetchReport:
        client = self._client or CurseForgeClient(
            base_url=self.config.api.base_url,
            timeout=self.config.api.timeout,
            user_agent=self.config.api.user_agent,
        )
        downloader = self._downloader or DownloadManager(
            session=client.session,
            max_retries=self.config.download.max_retries,
            chunk_size=self.config.download.chunk_size,
        )
        scheduler = BatchScheduler(
            ArtifactResolver(client),
            downloader,
            batch_size=self.config.download.batch_size,
            include_optional=self.config.download.include_optional,
        )
        try:
            return await scheduler.run(manifest.files, str(mods_dir), str(shaders_dir))
        finally:
            if self._client is None:
                await client.close()
