"""
PackOtter 下载层

包含下载管理与分批调度。
"""

from packotter.download.manager import DownloadManager
from packotter.download.scheduler import BatchScheduler, FetchReport

__all__ = [
    "DownloadManager",
    "BatchScheduler",
    "FetchReport",
]
