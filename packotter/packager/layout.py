"""
实例目录布局

两种输出格式共用同一条流水线，差异只在目录结构与收尾步骤：

* FlatLayout   —— Modrinth 风格，直接写入 {output}/mods 等目录
* BundleLayout —— MultiMC 风格，{instance}/.minecraft 目录树 + 元数据，最终打包为 zip
"""

import hashlib
import os
import re
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from packotter.exceptions import LayoutError
from packotter.models import LayoutKind, LoaderDescriptor, Manifest
from packotter.packager.multimc import write_instance_metadata
from packotter.packager.zip import ZipBuilder


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def instance_name(pack_name: str, hash_suffix: bool = False) -> str:
    """
    由整合包名称生成实例名

    去掉 [A-Za-z0-9_-] 以外的字符；结果为空时使用 "instance"。
    hash_suffix 为真时追加名称的 8 位 sha1，降低意外覆盖的风险。
    """
    name = _UNSAFE_CHARS.sub("", pack_name) or "instance"
    if hash_suffix:
        digest = hashlib.sha1(pack_name.encode("utf-8")).hexdigest()[:8]
        name = f"{name}-{digest}"
    return name


def copy_overrides(src: Optional[Path], dest: Path) -> int:
    """
    递归复制 overrides 目录（覆盖已有文件）

    Returns:
        复制的文件数；源目录不存在时返回 0
    """
    if src is None or not src.is_dir():
        logger.debug(f"[覆盖] 未找到 overrides 目录，跳过: {src}")
        return 0

    copied = 0
    for root, dirs, files in os.walk(src):
        relative_path = os.path.relpath(root, src)
        dest_dir = os.path.normpath(os.path.join(dest, relative_path))
        os.makedirs(dest_dir, exist_ok=True)

        for file in files:
            shutil.copy2(os.path.join(root, file), os.path.join(dest_dir, file))
            copied += 1
    return copied


class InstanceLayout(ABC):
    """输出布局策略"""

    kind: LayoutKind

    def __init__(
        self,
        output_dir: Union[str, os.PathLike],
        scratch_dir: Union[str, os.PathLike],
        manifest: Manifest,
        loader: LoaderDescriptor,
        hash_suffix: bool = False,
    ):
        self.output_dir = Path(output_dir)
        self.scratch_dir = Path(scratch_dir)
        self.manifest = manifest
        self.loader = loader
        self.instance_name = instance_name(manifest.name, hash_suffix)

    @property
    @abstractmethod
    def game_dir(self) -> Path:
        """mods、shaderpacks 与 overrides 所在的目录"""

    @property
    def mods_dir(self) -> Path:
        return self.game_dir / "mods"

    @property
    def shaders_dir(self) -> Path:
        return self.game_dir / "shaderpacks"

    def prepare(self) -> None:
        """创建目录结构"""
        try:
            self.mods_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LayoutError(
                f"无法创建目录: {self.mods_dir} ({e})",
                context={"path": str(self.mods_dir)},
            )

    async def assemble(self, overrides_src: Optional[Path]) -> None:
        """复制 overrides（以及生成格式相关的文件）"""
        logger.info(f"[覆盖] 正在复制 overrides 到 {self.game_dir}...")
        try:
            copied = copy_overrides(overrides_src, self.game_dir)
        except (OSError, shutil.Error) as e:
            raise LayoutError(f"复制 overrides 失败: {e}")
        if copied:
            logger.success(f"[覆盖] 已复制 {copied} 个文件")

    @abstractmethod
    async def finalize(self) -> Path:
        """完成输出，返回最终产物路径"""


class FlatLayout(InstanceLayout):
    """Modrinth 风格平铺目录"""

    kind = LayoutKind.MODRINTH

    @property
    def game_dir(self) -> Path:
        return self.output_dir

    async def finalize(self) -> Path:
        return self.output_dir


class BundleLayout(InstanceLayout):
    """MultiMC 风格实例包"""

    kind = LayoutKind.MULTIMC

    def __init__(self, *args, compression_level: int = 9, **kwargs):
        super().__init__(*args, **kwargs)
        self.zip_builder = ZipBuilder(compression_level)

    @property
    def bundle_root(self) -> Path:
        """压缩包根目录（其中只有实例目录）"""
        return self.scratch_dir / "bundle"

    @property
    def instance_dir(self) -> Path:
        return self.bundle_root / self.instance_name

    @property
    def game_dir(self) -> Path:
        return self.instance_dir / ".minecraft"

    @property
    def archive_path(self) -> Path:
        return self.output_dir / f"{self.instance_name}-MMC-Export.zip"

    async def assemble(self, overrides_src: Optional[Path]) -> None:
        await write_instance_metadata(self.instance_dir, self.manifest, self.loader)
        logger.info(
            f"[实例] 已生成 mmc-pack.json 与 instance.cfg "
            f"({self.loader.uid} {self.loader.version})"
        )
        await super().assemble(overrides_src)

    async def finalize(self) -> Path:
        logger.info(f"[打包] 正在压缩实例到 {self.archive_path}...")
        path = await self.zip_builder.build(self.bundle_root, self.archive_path)
        logger.success(f"[打包] 完成: {path}")
        return Path(path)


def make_layout(
    kind: LayoutKind,
    output_dir: Union[str, os.PathLike],
    scratch_dir: Union[str, os.PathLike],
    manifest: Manifest,
    loader: LoaderDescriptor,
    hash_suffix: bool = False,
    compression_level: int = 9,
) -> InstanceLayout:
    """按输出格式创建布局"""
    if kind is LayoutKind.MODRINTH:
        return FlatLayout(output_dir, scratch_dir, manifest, loader, hash_suffix)
    if kind is LayoutKind.MULTIMC:
        return BundleLayout(
            output_dir,
            scratch_dir,
            manifest,
            loader,
            hash_suffix,
            compression_level=compression_level,
        )
    raise LayoutError(f"未知的输出格式: {kind}")
