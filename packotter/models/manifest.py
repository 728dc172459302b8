"""
manifest.json 数据模型

CurseForge 整合包清单的类型化表示。
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from packotter.exceptions import ManifestMalformed, ManifestNotFound


MANIFEST_NAME = "manifest.json"


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class FileReference:
    """清单中声明的模组文件引用（尚未解析为具体文件）"""

    project_id: int
    file_id: int
    required: bool = True

    def __str__(self) -> str:
        return f"{self.project_id}/{self.file_id}"

    @classmethod
    def from_dict(cls, data: Any, index: int = 0) -> "FileReference":
        if not isinstance(data, dict):
            raise ManifestMalformed(
                f"files[{index}] 必须是对象", context={"index": index}
            )
        project_id = data.get("projectID")
        file_id = data.get("fileID")
        if not _is_int(project_id) or not _is_int(file_id):
            raise ManifestMalformed(
                f"files[{index}] 缺少整数 projectID/fileID",
                context={"index": index, "entry": data},
            )
        required = data.get("required", True)
        if not isinstance(required, bool):
            raise ManifestMalformed(
                f"files[{index}].required 必须是布尔值", context={"index": index}
            )
        return cls(project_id=project_id, file_id=file_id, required=required)


@dataclass(frozen=True)
class ModLoaderEntry:
    """minecraft.modLoaders 中的一项"""

    id: str
    primary: bool = False


@dataclass
class Manifest:
    """整合包清单"""

    name: str
    game_version: str
    loader_id: str
    files: List[FileReference]
    version: str = ""
    overrides: Optional[str] = None
    author: str = ""
    mod_loaders: List[ModLoaderEntry] = field(default_factory=list)
    manifest_type: str = ""
    manifest_version: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        """
        从 JSON 字典构建清单

        必需字段: name, minecraft.version, 至少一个 primary 的
        minecraft.modLoaders 项, files。

        Raises:
            ManifestMalformed: 缺少必需字段或字段类型错误
        """
        if not isinstance(data, dict):
            raise ManifestMalformed("manifest 顶层必须是对象")

        name = data.get("name")
        if not isinstance(name, str):
            raise ManifestMalformed("manifest 缺少 name 字段")

        minecraft = data.get("minecraft")
        if not isinstance(minecraft, dict):
            raise ManifestMalformed("manifest 缺少 minecraft 字段")

        game_version = minecraft.get("version")
        if not isinstance(game_version, str):
            raise ManifestMalformed("manifest 缺少 minecraft.version 字段")

        raw_loaders = minecraft.get("modLoaders")
        if not isinstance(raw_loaders, list):
            raise ManifestMalformed("manifest 缺少 minecraft.modLoaders 字段")

        mod_loaders = []
        for loader in raw_loaders:
            if not isinstance(loader, dict) or not isinstance(loader.get("id"), str):
                raise ManifestMalformed(
                    "minecraft.modLoaders 项缺少 id", context={"entry": loader}
                )
            mod_loaders.append(
                ModLoaderEntry(id=loader["id"], primary=loader.get("primary") is True)
            )

        primary = next((loader for loader in mod_loaders if loader.primary), None)
        if primary is None:
            raise ManifestMalformed("minecraft.modLoaders 中没有 primary 加载器")

        raw_files = data.get("files")
        if not isinstance(raw_files, list):
            raise ManifestMalformed("manifest 缺少 files 字段")
        files = [FileReference.from_dict(entry, i) for i, entry in enumerate(raw_files)]

        overrides = data.get("overrides")
        if overrides is not None and not isinstance(overrides, str):
            raise ManifestMalformed("overrides 必须是字符串")

        version = data.get("version", "")
        manifest_version = data.get("manifestVersion")

        return cls(
            name=name,
            version=version if isinstance(version, str) else str(version),
            game_version=game_version,
            loader_id=primary.id,
            files=files,
            overrides=overrides or None,
            author=data.get("author", "") or "",
            mod_loaders=mod_loaders,
            manifest_type=data.get("manifestType", "") or "",
            manifest_version=manifest_version if _is_int(manifest_version) else None,
        )

    @classmethod
    def from_json(cls, text: Union[str, bytes]) -> "Manifest":
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ManifestMalformed(f"manifest.json 不是有效的 JSON: {e}")
        return cls.from_dict(data)

    def summary(self) -> Dict[str, Any]:
        """整合包概要信息"""
        return {
            "name": self.name,
            "version": self.version,
            "minecraft": self.game_version,
            "loader": self.loader_id,
            "files": len(self.files),
        }


def load_manifest(path: Union[str, Path]) -> Manifest:
    """
    读取解压目录中的 manifest.json

    Raises:
        ManifestNotFound: 文件不存在
        ManifestMalformed: 内容无效
    """
    path = Path(path)
    if not path.is_file():
        raise ManifestNotFound(
            f"找不到 {MANIFEST_NAME}: {path}", context={"path": str(path)}
        )
    return Manifest.from_json(path.read_bytes())
