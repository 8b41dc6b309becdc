from unittest.mock import patch

import pytest

from treelet.infrastructure.error_handler import DownloadError
from treelet.services.download import DownloadService

pytestmark = pytest.mark.asyncio


async def test_save_content_creates_parents(tmp_path):
    target = tmp_path / "proto" / "deep" / "a.proto"

    written = await DownloadService().save_content(b"syntax = 3;", target)

    assert written == 11
    assert target.read_bytes() == b"syntax = 3;"


async def test_save_content_overwrites_existing_file(tmp_path):
    target = tmp_path / "a.bin"
    target.write_bytes(b"old contents that are longer")

    await DownloadService().save_content(b"new", target)

    assert target.read_bytes() == b"new"


async def test_save_content_empty_file(tmp_path):
    target = tmp_path / "empty"
    assert await DownloadService().save_content(b"", target) == 0
    assert target.exists()


async def test_save_content_reports_write_errors(tmp_path):
    # A file where a folder is needed makes directory creation fail
    (tmp_path / "proto").write_bytes(b"")

    with pytest.raises(DownloadError):
        await DownloadService().save_content(b"x", tmp_path / "proto" / "a.proto")


async def test_ensure_directory_wraps_os_errors(tmp_path):
    with patch("treelet.services.download.aiofiles.os.makedirs", side_effect=PermissionError("denied")):
        with pytest.raises(DownloadError) as exc_info:
            await DownloadService().ensure_directory(tmp_path / "x")
    assert isinstance(exc_info.value.original_error, PermissionError)
