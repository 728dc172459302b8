"""
模组加载器描述

将 manifest 中的加载器 ID（如 forge-47.2.0）映射到 MultiMC 组件 uid。
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from packotter.exceptions import UnknownLoaderError


MINECRAFT_UID = "net.minecraft"
UNKNOWN_LOADER_UID = "unknown"

LOADER_UIDS = {
    "neoforge": "net.neoforged",
    "forge": "net.minecraftforge",
    "fabric": "net.fabricmc.fabric-loader",
    "quilt": "org.quiltmc.quilt-loader",
}


@dataclass(frozen=True)
class LoaderDescriptor:
    uid: str
    version: str
    family: Optional[str] = None

    @property
    def known(self) -> bool:
        return self.family is not None


def resolve_loader(loader_id: str, strict: bool = False) -> LoaderDescriptor:
    """
    解析加载器 ID

    未知前缀返回 uid 为 ``unknown`` 的描述（版本保留原始 ID）；
    strict 模式下抛出 UnknownLoaderError。
    """
    for family, uid in LOADER_UIDS.items():
        prefix = f"{family}-"
        if loader_id.startswith(prefix):
            return LoaderDescriptor(
                uid=uid, version=loader_id[len(prefix):], family=family
            )

    if strict:
        raise UnknownLoaderError(
            f"无法识别的模组加载器: {loader_id}", context={"loader_id": loader_id}
        )
    logger.warning(f"[加载器] 无法识别的模组加载器 '{loader_id}'，将标记为 unknown")
    return LoaderDescriptor(uid=UNKNOWN_LOADER_UID, version=loader_id)
