"""
MultiMC 实例元数据

生成 mmc-pack.json 与 instance.cfg。
"""

import json
import os
from typing import Dict, List, Union

import aiofiles

from packotter.models import LoaderDescriptor, Manifest
from packotter.models.loader import MINECRAFT_UID


def build_mmc_pack(game_version: str, loader: LoaderDescriptor) -> dict:
    """构建 mmc-pack.json 内容"""
    components: List[Dict[str, object]] = [
        {"uid": MINECRAFT_UID, "version": game_version, "important": True},
        {"uid": loader.uid, "version": loader.version},
    ]
    return {"components": components, "formatVersion": 1}


def build_instance_cfg(manifest: Manifest) -> str:
    """构建 instance.cfg 内容（key=value 文本）"""
    entries = {
        "InstanceType": "OneSix",
        # 换行会截断 key=value 行
        "name": " ".join(manifest.name.splitlines()),
        "iconKey": "default",
    }
    return "".join(f"{key}={value}\n" for key, value in entries.items())


async def write_instance_metadata(
    instance_dir: Union[str, os.PathLike],
    manifest: Manifest,
    loader: LoaderDescriptor,
) -> None:
    """将 mmc-pack.json 与 instance.cfg 写入实例根目录"""
    instance_dir = os.fspath(instance_dir)
    os.makedirs(instance_dir, exist_ok=True)

    pack = build_mmc_pack(manifest.game_version, loader)
    async with aiofiles.open(
        os.path.join(instance_dir, "mmc-pack.json"), "w", encoding="utf-8"
    ) as f:
        await f.write(json.dumps(pack, indent=4))

    async with aiofiles.open(
        os.path.join(instance_dir, "instance.cfg"), "w", encoding="utf-8"
    ) as f:
        await f.write(build_instance_cfg(manifest))
