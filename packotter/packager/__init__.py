"""
PackOtter 打包层

包含实例目录布局、MultiMC 元数据与 zip 生成器。
"""

from packotter.packager.layout import (
    BundleLayout,
    FlatLayout,
    InstanceLayout,
    copy_overrides,
    instance_name,
    make_layout,
)
from packotter.packager.multimc import build_instance_cfg, build_mmc_pack
from packotter.packager.zip import ZipBuilder

__all__ = [
    "BundleLayout",
    "FlatLayout",
    "InstanceLayout",
    "copy_overrides",
    "instance_name",
    "make_layout",
    "build_instance_cfg",
    "build_mmc_pack",
    "ZipBuilder",
]
