"""
配置模型

定义运行配置的数据类，支持从字典、配置文件和环境变量构建。
"""

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
import yaml

from packotter.exceptions import ConfigParseError, ConfigValidationError


DEFAULT_API_BASE = "https://www.curseforge.com/api/v1"
DEFAULT_BATCH_SIZE = 10


class LayoutKind(Enum):
    """输出格式"""

    MULTIMC = "multimc"
    MODRINTH = "modrinth"


_SELECTORS = {
    "1": [LayoutKind.MULTIMC],
    "multimc": [LayoutKind.MULTIMC],
    "2": [LayoutKind.MODRINTH],
    "modrinth": [LayoutKind.MODRINTH],
    "all": [LayoutKind.MULTIMC, LayoutKind.MODRINTH],
}


def parse_selector(selector: str) -> List[LayoutKind]:
    """
    将命令行的加载器选择参数转换为输出格式列表

    Raises:
        ConfigValidationError: 选择参数无效
    """
    kinds = _SELECTORS.get(selector.strip().lower())
    if kinds is None:
        raise ConfigValidationError(
            f"无效的加载器类型: {selector}",
            context={"selector": selector, "choices": sorted(_SELECTORS)},
        )
    return list(kinds)


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigParseError(f"配置节 [{name}] 必须是一个表", context={"section": name})
    return section


@dataclass
class ApiConfig:
    """元数据服务配置"""

    base_url: str = DEFAULT_API_BASE
    timeout: Optional[float] = 120.0
    user_agent: str = "packotter/0.1.0"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiConfig":
        return cls(
            base_url=str(data.get("base_url", DEFAULT_API_BASE)).rstrip("/"),
            timeout=data.get("timeout", 120.0),
            user_agent=data.get("user_agent", "packotter/0.1.0"),
        )


@dataclass
class DownloadConfig:
    """下载配置"""

    batch_size: int = DEFAULT_BATCH_SIZE
    max_retries: int = 0
    chunk_size: int = 8192
    include_optional: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DownloadConfig":
        return cls(
            batch_size=data.get("batch_size", DEFAULT_BATCH_SIZE),
            max_retries=data.get("max_retries", 0),
            chunk_size=data.get("chunk_size", 8192),
            include_optional=data.get("include_optional", True),
        )


@dataclass
class OutputConfig:
    """输出配置"""

    hash_suffix: bool = False
    compression_level: int = 9

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputConfig":
        return cls(
            hash_suffix=data.get("hash_suffix", False),
            compression_level=data.get("compression_level", 9),
        )


@dataclass
class ExtractConfig:
    """解压配置"""

    strict: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractConfig":
        return cls(strict=data.get("strict", False))


@dataclass
class PackOtterConfig:
    """PackOtter 运行配置"""

    api: ApiConfig = field(default_factory=ApiConfig)
    download: DownloadConfig = field(default_factory=DownloadConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    strict_loader: bool = False

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "PackOtterConfig":
        """从字典创建配置，并应用环境变量覆盖"""
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigParseError("配置文件顶层必须是一个表")

        config = cls(
            api=ApiConfig.from_dict(_section(data, "api")),
            download=DownloadConfig.from_dict(_section(data, "download")),
            output=OutputConfig.from_dict(_section(data, "output")),
            extract=ExtractConfig.from_dict(_section(data, "extract")),
            strict_loader=data.get("strict_loader", False),
        )
        config.apply_env()
        config.validate()
        return config

    def apply_env(self) -> None:
        """应用环境变量覆盖"""
        if base := os.environ.get("PACKOTTER_API_BASE"):
            self.api.base_url = base.rstrip("/")
        if batch := os.environ.get("PACKOTTER_BATCH_SIZE"):
            try:
                self.download.batch_size = int(batch)
            except ValueError:
                raise ConfigValidationError(
                    f"PACKOTTER_BATCH_SIZE 必须是整数: {batch}"
                )
        if timeout := os.environ.get("PACKOTTER_TIMEOUT"):
            try:
                self.api.timeout = float(timeout)
            except ValueError:
                raise ConfigValidationError(f"PACKOTTER_TIMEOUT 必须是数字: {timeout}")

    def validate(self) -> None:
        """验证配置"""
        if not isinstance(self.download.batch_size, int) or self.download.batch_size <= 0:
            raise ConfigValidationError(
                "download.batch_size 必须为正整数",
                context={"batch_size": self.download.batch_size},
            )
        if not isinstance(self.download.max_retries, int) or self.download.max_retries < 0:
            raise ConfigValidationError(
                "download.max_retries 不能为负数",
                context={"max_retries": self.download.max_retries},
            )
        if not isinstance(self.download.chunk_size, int) or self.download.chunk_size <= 0:
            raise ConfigValidationError("download.chunk_size 必须为正整数")
        if self.api.timeout is not None and (
            not isinstance(self.api.timeout, (int, float)) or self.api.timeout <= 0
        ):
            raise ConfigValidationError(
                "api.timeout 必须为正数", context={"timeout": self.api.timeout}
            )
        if self.output.compression_level not in range(0, 10):
            raise ConfigValidationError(
                "output.compression_level 必须在 0-9 之间",
                context={"compression_level": self.output.compression_level},
            )
        if not self.api.base_url:
            raise ConfigValidationError("api.base_url 不能为空")


def load_config(config_path: Optional[str] = None) -> PackOtterConfig:
    """
    加载配置文件

    未指定路径时返回默认配置（仍会应用环境变量覆盖）。
    """
    if config_path is None:
        return PackOtterConfig.from_dict({})

    path = Path(config_path)
    if not path.exists():
        raise ConfigParseError(f"配置文件不存在: {config_path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise ConfigParseError(f"不支持的配置文件格式: {suffix}")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(
            f"配置文件解析失败: {e}", context={"path": config_path}
        )

    return PackOtterConfig.from_dict(data)
