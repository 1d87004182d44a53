"""Unit tests for CatalogService."""

import threading
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from conftest import build_firmware_zip, sample_metadata
from hubwizard.errors import ResolutionFailure
from hubwizard.models.hub import DeviceType
from hubwizard.services.catalog import CatalogService
from hubwizard.services.validator import CustomFirmwareValidator


def _mock_client(response=None, error=None):
    mock_client = AsyncMock()
    if error is not None:
        mock_client.get = AsyncMock(side_effect=error)
    else:
        mock_client.get = AsyncMock(return_value=response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


@pytest.mark.unit
class TestCatalogService:
    """Test official firmware lookup."""

    def test_init_defaults(self):
        service = CatalogService()

        assert service.base_url == "https://firmware.pybricks.com/stable"
        assert service.firmware_dir is None
        assert service.archive_name(DeviceType.TECHNIC) == "technic.zip"

    def test_base_url_trailing_slash_stripped(self):
        service = CatalogService(base_url="http://example.com/fw/")
        assert service.base_url == "http://example.com/fw"

    @pytest.mark.asyncio
    async def test_lookup_local_directory(self, tmp_path):
        (tmp_path / "technic.zip").write_bytes(
            build_firmware_zip(metadata=sample_metadata(device_id=0x80), binary=b"technic-fw")
        )
        service = CatalogService(firmware_dir=tmp_path)

        package = await service.lookup(DeviceType.TECHNIC)

        assert package.metadata.device_id == 0x80
        assert package.binary_payload == b"technic-fw"

    @pytest.mark.asyncio
    async def test_archive_parsed_off_event_loop(self, tmp_path):
        (tmp_path / "city.zip").write_bytes(
            build_firmware_zip(metadata=sample_metadata(device_id=0x41))
        )
        validator = CustomFirmwareValidator()
        threads = []
        original = validator.validate

        def recording_validate(archive):
            threads.append(threading.get_ident())
            return original(archive)

        validator.validate = recording_validate
        service = CatalogService(firmware_dir=tmp_path, validator=validator)

        package = await service.lookup(DeviceType.CITY)

        assert package.metadata.device_id == 0x41
        assert threads and threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    async def test_lookup_local_missing_file(self, tmp_path):
        service = CatalogService(firmware_dir=tmp_path)

        with pytest.raises(ResolutionFailure, match="not available"):
            await service.lookup(DeviceType.CITY)

    @pytest.mark.asyncio
    async def test_lookup_local_invalid_archive(self, tmp_path):
        (tmp_path / "city.zip").write_bytes(b"garbage")
        service = CatalogService(firmware_dir=tmp_path)

        with pytest.raises(ResolutionFailure) as exc_info:
            await service.lookup(DeviceType.CITY)
        assert exc_info.value.code == "RESOLUTION_FAILED"

    @pytest.mark.asyncio
    async def test_lookup_remote(self):
        archive = build_firmware_zip(metadata=sample_metadata(device_id=0x81), binary=b"prime-fw")
        mock_response = MagicMock()
        mock_response.content = archive
        mock_response.raise_for_status = MagicMock()
        mock_client = _mock_client(response=mock_response)
        service = CatalogService(base_url="http://test-fw")

        with patch("hubwizard.services.catalog.httpx.AsyncClient", return_value=mock_client):
            package = await service.lookup(DeviceType.PRIME)

        mock_client.get.assert_awaited_once_with("http://test-fw/prime.zip")
        assert package.binary_payload == b"prime-fw"

    @pytest.mark.asyncio
    async def test_lookup_remote_http_error(self):
        mock_client = _mock_client(error=httpx.ConnectError("Connection refused"))
        service = CatalogService(base_url="http://test-fw")

        with patch("hubwizard.services.catalog.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(ResolutionFailure, match="download failed"):
                await service.lookup(DeviceType.MOVE)
