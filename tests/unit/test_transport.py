"""Unit tests for HttpFlashTransport."""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from hubwizard.models.hub import BootloaderType
from hubwizard.models.wizard import FlashRequest
from hubwizard.services.alerts import AlertChannel
from hubwizard.services.transport import HttpFlashTransport


def _request():
    return FlashRequest(
        bootloader_type=BootloaderType.TECHNIC_HUB,
        firmware_binary=b"\x01\x02\x03",
        hub_name="Hub 3",
    )


def _mock_client(error=None):
    mock_client = AsyncMock()
    if error is not None:
        mock_client.post = AsyncMock(side_effect=error)
    else:
        response = MagicMock()
        response.raise_for_status = MagicMock()
        mock_client.post = AsyncMock(return_value=response)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=None)
    return mock_client


@pytest.mark.unit
class TestHttpFlashTransport:

    def test_endpoint(self):
        transport = HttpFlashTransport(flasher_url="http://flasher:9090/")
        assert transport.flash_endpoint == "http://flasher:9090/api/v1.0/flash"
        assert not transport.in_progress

    @pytest.mark.asyncio
    async def test_submit_posts_request(self):
        mock_client = _mock_client()
        transport = HttpFlashTransport(flasher_url="http://flasher")

        with patch("hubwizard.services.transport.httpx.AsyncClient", return_value=mock_client):
            transport.submit(_request())
            assert transport.in_progress
            await transport.wait()

        assert not transport.in_progress
        url = mock_client.post.call_args.args[0]
        body = mock_client.post.call_args.kwargs["json"]
        assert url == "http://flasher/api/v1.0/flash"
        assert body["bootloader_type"] == 0x80
        assert body["hub_name"] == "Hub 3"
        assert base64.b64decode(body["firmware_binary"]) == b"\x01\x02\x03"

    @pytest.mark.asyncio
    async def test_second_submit_rejected(self):
        mock_client = _mock_client()
        transport = HttpFlashTransport()

        with patch("hubwizard.services.transport.httpx.AsyncClient", return_value=mock_client):
            transport.submit(_request())
            with pytest.raises(RuntimeError, match="already in progress"):
                transport.submit(_request())
            await transport.wait()

        assert mock_client.post.await_count == 1

    @pytest.mark.asyncio
    async def test_failure_goes_to_alerts(self):
        alerts = AlertChannel()
        mock_client = _mock_client(error=httpx.ConnectError("Connection refused"))
        transport = HttpFlashTransport(alerts=alerts)

        with patch("hubwizard.services.transport.httpx.AsyncClient", return_value=mock_client):
            transport.submit(_request())
            await transport.wait()

        assert alerts.alerts[0].key == "flashFailed"
        assert not transport.in_progress
