"""
整合包解压

逐条读取 zip 条目并写入工作目录，保留相对路径结构。
"""

import os
import shutil
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Union

from loguru import logger

from packotter.exceptions import ArchiveEntryError, ArchiveOpenError, ManifestNotFound
from packotter.models.manifest import MANIFEST_NAME, Manifest


@dataclass
class ExtractionResult:
    """解压结果（所有条目处理完毕后返回）"""

    extracted: int = 0
    directories: int = 0
    skipped: List[str] = field(default_factory=list)


class ArchiveReader:
    """整合包 zip 读取器"""

    def __init__(self, path: Union[str, Path], strict: bool = False):
        self.path = Path(path)
        self.strict = strict

    def _open(self) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(self.path)
        except (OSError, zipfile.BadZipFile) as e:
            raise ArchiveOpenError(
                f"无法打开整合包: {self.path} ({e})", context={"path": str(self.path)}
            )

    @staticmethod
    def _entries(zf: zipfile.ZipFile) -> Iterator[zipfile.ZipInfo]:
        for info in zf.infolist():
            yield info

    def iter_entries(self) -> Iterator[zipfile.ZipInfo]:
        """按存储顺序惰性遍历压缩包条目（单次遍历）"""
        with self._open() as zf:
            yield from self._entries(zf)

    def read_manifest(self) -> Manifest:
        """不解压，直接从压缩包中读取 manifest.json"""
        with self._open() as zf:
            try:
                data = zf.read(MANIFEST_NAME)
            except KeyError:
                raise ManifestNotFound(
                    f"整合包中没有 {MANIFEST_NAME}", context={"path": str(self.path)}
                )
        return Manifest.from_json(data)

    def extract(self, dest: Union[str, Path]) -> ExtractionResult:
        """
        解压所有条目到目标目录

        条目可能以任意顺序出现，目录条目也可能缺失，因此每个文件写入前
        都会先创建父目录。单个条目失败时记录警告并继续（strict 模式下抛出）。

        Args:
            dest: 目标目录

        Returns:
            ExtractionResult: 所有条目处理完毕后的统计
        """
        dest = Path(dest).resolve()
        dest.mkdir(parents=True, exist_ok=True)
        result = ExtractionResult()

        logger.info(f"[解压] 正在解压 {self.path.name}...")

        with self._open() as zf:
            for info in self._entries(zf):
                try:
                    if self._extract_entry(zf, info, dest):
                        result.directories += 1
                    else:
                        result.extracted += 1
                except (
                    OSError,
                    EOFError,
                    zlib.error,
                    zipfile.BadZipFile,
                    ArchiveEntryError,
                ) as e:
                    if self.strict:
                        if isinstance(e, ArchiveEntryError):
                            raise
                        raise ArchiveEntryError(
                            f"无法读取条目 '{info.filename}': {e}",
                            context={"entry": info.filename},
                        )
                    result.skipped.append(info.filename)
                    logger.warning(f"[跳过] 无法读取条目 '{info.filename}': {e}")

        logger.success(
            f"[解压] 完成: {result.extracted} 个文件, "
            f"{len(result.skipped)} 个条目被跳过"
        )
        return result

    def _target_path(self, dest: Path, name: str) -> Path:
        target = (dest / name).resolve()
        if target != dest and dest not in target.parents:
            raise ArchiveEntryError(
                f"条目路径超出解压目录: {name}", context={"entry": name}
            )
        return target

    def _extract_entry(
        self, zf: zipfile.ZipFile, info: zipfile.ZipInfo, dest: Path
    ) -> bool:
        """解压单个条目，返回该条目是否为目录"""
        target = self._target_path(dest, info.filename)

        if info.is_dir():
            os.makedirs(target, exist_ok=True)
            return True

        os.makedirs(target.parent, exist_ok=True)
        try:
            with zf.open(info) as src, open(target, "wb") as dst:
                shutil.copyfileobj(src, dst)
        except Exception:
            # 清理不完整的文件
            if target.exists():
                try:
                    target.unlink()
                except OSError:
                    pass
            raise
        return False
