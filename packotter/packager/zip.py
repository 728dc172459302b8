"""
ZIP 生成器

实现目录压缩功能。
"""

import os
import zipfile
from typing import Union

from packotter.exceptions import ZipError


class ZipBuilder:
    """ZIP 构建器"""

    def __init__(self, compression_level: int = 9):
        self.compression_level = compression_level

    async def build(
        self,
        source_dir: Union[str, os.PathLike],
        zip_path: Union[str, os.PathLike],
    ) -> str:
        """
        构建 ZIP 文件

        条目路径相对于 source_dir，使用 deflate 最高压缩级别。

        Args:
            source_dir: 源文件目录
            zip_path: 输出文件路径（含扩展名）

        Returns:
            生成的文件路径
        """
        source_dir = os.fspath(source_dir)
        zip_path = os.fspath(zip_path)
        try:
            os.makedirs(os.path.dirname(os.path.abspath(zip_path)), exist_ok=True)
            with zipfile.ZipFile(
                zip_path,
                "w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self.compression_level,
            ) as zf:
                for root, dirs, files in os.walk(source_dir):
                    dirs.sort()
                    rel_root = os.path.relpath(root, source_dir)
                    if rel_root != "." and not files and not dirs:
                        # 保留空目录
                        zf.write(root, rel_root.replace(os.sep, "/"))
                    for file in sorted(files):
                        src_file = os.path.join(root, file)
                        arcname = os.path.relpath(src_file, source_dir)
                        zf.write(src_file, arcname.replace(os.sep, "/"))

            return zip_path

        except (OSError, zipfile.LargeZipFile) as e:
            if os.path.exists(zip_path):
                try:
                    os.remove(zip_path)
                except OSError:
                    pass
            raise ZipError(
                f"构建 ZIP 失败: {e}",
                context={"source_dir": source_dir, "zip_path": zip_path},
            )
