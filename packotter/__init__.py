"""
PackOtter - CurseForge 整合包转换工具

将 CurseForge 整合包转换为 Modrinth 风格目录或 MultiMC 实例包。
"""

from packotter.logger import setup_logger
from packotter.models import LayoutKind, PackOtterConfig
from packotter.orchestrator import PackOtterOrchestrator, RunResult

__version__ = "0.1.0"

__all__ = [
    "setup_logger",
    "LayoutKind",
    "PackOtterConfig",
    "PackOtterOrchestrator",
    "RunResult",
    "__version__",
]
