import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from packotter.download import DownloadManager
from packotter.exceptions import APIError, APIMalformedError, DownloadNetworkError
from packotter.services import CurseForgeClient


async def trickle(request):
    """每 0.15s 发送 10 字节，共 100 字节"""
    response = web.StreamResponse()
    response.content_length = 100
    await response.prepare(request)
    for _ in range(10):
        await response.write(b"y" * 10)
        await asyncio.sleep(0.15)
    await response.write_eof()
    return response


def make_app():
    async def file_info(request):
        project_id = request.match_info["project_id"]
        if project_id == "404":
            return web.json_response({"error": "not found"}, status=404)
        if project_id == "500":
            return web.Response(status=500)
        if project_id == "999":
            return web.Response(text="<html>oops</html>", content_type="text/html")
        return web.json_response(
            {"data": {"id": int(request.match_info["file_id"]), "fileName": "jei-1.20.1.jar"}}
        )

    async def download(request):
        project_id = request.match_info["project_id"]
        if project_id == "500":
            return web.Response(status=500)
        if project_id == "slow":
            return await trickle(request)
        if project_id == "stall":
            await asyncio.sleep(1.5)
        return web.Response(body=b"x" * 20000)

    app = web.Application()
    app.router.add_get("/mods/{project_id}/files/{file_id}", file_info)
    app.router.add_get("/mods/{project_id}/files/{file_id}/download", download)
    return app


@pytest.fixture
async def server():
    async with test_utils.TestServer(make_app()) as test_server:
        yield test_server


@pytest.fixture
async def client(server):
    async with CurseForgeClient(str(server.make_url("")), timeout=10) as api:
        yield api


async def test_get_file(client):
    response = await client.get_file(1, 2)

    assert response["data"]["fileName"] == "jei-1.20.1.jar"
    assert response["data"]["id"] == 2


async def test_get_file_not_found(client):
    assert await client.get_file(404, 1) is None


async def test_get_file_server_error(client):
    with pytest.raises(APIError) as excinfo:
        await client.get_file(500, 1)
    assert excinfo.value.context["status_code"] == 500


async def test_get_file_not_json(client):
    with pytest.raises(APIMalformedError):
        await client.get_file(999, 1)


def test_download_url():
    api = CurseForgeClient("https://example.invalid/api/v1/")

    assert api.download_url(7, 8) == "https://example.invalid/api/v1/mods/7/files/8/download"


async def test_download_manager_streams_file(client, tmp_path):
    manager = DownloadManager(session=client.session, chunk_size=1024)

    written = await manager.download_file(client.download_url(1, 2), "jei.jar", str(tmp_path))

    assert written == 20000
    assert (tmp_path / "jei.jar").read_bytes() == b"x" * 20000
    assert [p.name for p in tmp_path.iterdir()] == ["jei.jar"]


async def test_download_manager_failure_cleans_up(client, tmp_path):
    manager = DownloadManager(session=client.session)

    with pytest.raises(DownloadNetworkError):
        await manager.download_file(client.download_url(500, 1), "bad.jar", str(tmp_path))

    assert list(tmp_path.iterdir()) == []


@pytest.fixture
async def short_timeout_client(server):
    async with CurseForgeClient(str(server.make_url("")), timeout=0.5) as api:
        yield api


async def test_slow_download_outlives_timeout(short_timeout_client, tmp_path):
    api = short_timeout_client
    manager = DownloadManager(session=api.session)

    written = await manager.download_file(api.download_url("slow", 1), "mod.jar", str(tmp_path))

    assert written == 100
    assert (tmp_path / "mod.jar").read_bytes() == b"y" * 100


async def test_stalled_download_is_network_error(short_timeout_client, tmp_path):
    api = short_timeout_client
    manager = DownloadManager(session=api.session)

    with pytest.raises(DownloadNetworkError):
        await manager.download_file(api.download_url("stall", 1), "mod.jar", str(tmp_path))

    assert list(tmp_path.iterdir()) == []


async def test_cancelled_download_leaves_no_file(client, tmp_path):
    manager = DownloadManager(session=client.session, chunk_size=10)
    url = client.download_url("slow", 1)

    task = asyncio.create_task(manager.download_file(url, "mod.jar", str(tmp_path)))
    await asyncio.sleep(0.5)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # 半截文件既不在最终位置，也不留 .part
    assert list(tmp_path.iterdir()) == []

    await manager.download_file(url, "mod.jar", str(tmp_path))
    assert (tmp_path / "mod.jar").read_bytes() == b"y" * 100
