"""
PackOtter 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, Optional

import aiohttp


class PackOtterError(Exception):
    """PackOtter 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(PackOtterError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class APIError(PackOtterError):
    """元数据服务相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class APIMalformedError(APIError):
    """元数据响应格式错误"""

    def _get_default_code(self) -> str:
        return "E201"


class DownloadError(PackOtterError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class DownloadFileError(DownloadError):
    """下载文件操作错误"""

    def _get_default_code(self) -> str:
        return "E303"


class PackagerError(PackOtterError):
    """打包相关错误"""

    def _get_default_code(self) -> str:
        return "E400"


class ZipError(PackagerError):
    """ZIP 生成错误"""

    def _get_default_code(self) -> str:
        return "E402"


class LayoutError(PackagerError):
    """实例目录布局错误"""

    def _get_default_code(self) -> str:
        return "E403"


class ArchiveError(PackOtterError):
    """整合包压缩文件相关错误"""

    def _get_default_code(self) -> str:
        return "E600"


class ArchiveOpenError(ArchiveError):
    """压缩文件无法打开"""

    def _get_default_code(self) -> str:
        return "E601"


class ArchiveEntryError(ArchiveError):
    """压缩文件条目无法读取"""

    def _get_default_code(self) -> str:
        return "E602"


class ManifestError(PackOtterError):
    """manifest.json 相关错误"""

    def _get_default_code(self) -> str:
        return "E700"


class ManifestNotFound(ManifestError):
    """解压后找不到 manifest.json"""

    def _get_default_code(self) -> str:
        return "E701"


class ManifestMalformed(ManifestError):
    """manifest.json 缺少必需字段或字段类型错误"""

    def _get_default_code(self) -> str:
        return "E702"


class LoaderError(PackOtterError):
    """模组加载器相关错误"""

    def _get_default_code(self) -> str:
        return "E800"


class UnknownLoaderError(LoaderError):
    """无法识别的模组加载器"""

    def _get_default_code(self) -> str:
        return "E801"


__all__ = [
    # 基础异常
    "PackOtterError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # API 异常
    "APIError",
    "APIMalformedError",
    # 下载异常
    "DownloadError",
    "DownloadNetworkError",
    "DownloadFileError",
    # 打包异常
    "PackagerError",
    "ZipError",
    "LayoutError",
    # 压缩文件异常
    "ArchiveError",
    "ArchiveOpenError",
    "ArchiveEntryError",
    # manifest 异常
    "ManifestError",
    "ManifestNotFound",
    "ManifestMalformed",
    # 加载器异常
    "LoaderError",
    "UnknownLoaderError",
]
