import asyncio
import json
import os
import sys
import zipfile

import pytest
from loguru import logger


def make_manifest(files=None, name="TestPack", loader="forge-47.2.0", **extra):
    if files is None:
        files = [
            {"projectID": 100, "fileID": 1000, "required": True},
            {"projectID": 200, "fileID": 2000, "required": True},
        ]
    manifest = {
        "minecraft": {
            "version": "1.20.1",
            "modLoaders": [{"id": loader, "primary": True}],
        },
        "manifestType": "minecraftModpack",
        "manifestVersion": 1,
        "name": name,
        "version": "1.0.0",
        "author": "tester",
        "files": files,
        "overrides": "overrides",
    }
    manifest.update(extra)
    return manifest


@pytest.fixture
def make_pack(tmp_path):
    """构造整合包 zip；manifest=None 表示不包含 manifest.json"""

    def _make(manifest="default", entries=None, name="pack.zip"):
        path = tmp_path / name
        if manifest == "default":
            manifest = make_manifest()
        if entries is None:
            entries = {"overrides/config/test.cfg": "key=value\n"}
        with zipfile.ZipFile(path, "w") as zf:
            if manifest is not None:
                zf.writestr("manifest.json", json.dumps(manifest))
            for entry_name, content in entries.items():
                zf.writestr(entry_name, content)
        return path

    return _make


class FakeClient:
    """内存中的元数据服务"""

    def __init__(self, files=None, delay=0.0):
        # (project_id, file_id) -> 响应 dict / None / Exception
        self.files = files or {}
        self.delay = delay
        self.calls = []
        self.closed = False

    async def get_file(self, project_id, file_id):
        self.calls.append((project_id, file_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.files.get((project_id, file_id))
        if isinstance(result, Exception):
            raise result
        return result

    def download_url(self, project_id, file_id):
        return f"https://example.invalid/mods/{project_id}/files/{file_id}/download"

    async def close(self):
        self.closed = True


class FakeDownloader:
    """记录调用并写入假内容的下载器"""

    def __init__(self, fail_urls=(), delay=0.0):
        self.fail_urls = set(fail_urls)
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def download_file(self, url, filename, download_dir):
        from packotter.exceptions import DownloadNetworkError

        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if url in self.fail_urls:
                raise DownloadNetworkError("HTTP 500", context={"url": url})
            os.makedirs(download_dir, exist_ok=True)
            with open(os.path.join(download_dir, filename), "wb") as f:
                f.write(b"artifact:" + filename.encode())
            return 9 + len(filename)
        finally:
            self.in_flight -= 1


def file_response(file_name):
    return {"data": {"id": 1, "fileName": file_name, "displayName": file_name}}


@pytest.fixture
def fake_client():
    return FakeClient(
        {
            (100, 1000): file_response("jei-1.20.1.jar"),
            (200, 2000): file_response("create-0.5.1.jar"),
        }
    )


@pytest.fixture
def fake_downloader():
    return FakeDownloader()


@pytest.fixture(autouse=True)
def reset_logger():
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "PACKOTTER_API_BASE",
        "PACKOTTER_BATCH_SIZE",
        "PACKOTTER_TIMEOUT",
        "PACKOTTER_DEBUG",
        "PACKOTTER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
