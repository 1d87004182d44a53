"""Flash transport: hands flash requests to the flashing service."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from hubwizard.errors import UnexpectedError
from hubwizard.models.wizard import FlashRequest
from hubwizard.services.alerts import AlertChannel


class FlashTransport(ABC):
    """Consumes FlashRequests and owns the in-progress flag.

    The transport, not the wizard, knows when flashing has finished.
    """

    @property
    @abstractmethod
    def in_progress(self) -> bool:
        """True while a flash is running."""

    @abstractmethod
    def submit(self, request: FlashRequest) -> None:
        """Start flashing. Must not block."""


class HttpFlashTransport(FlashTransport):
    """Posts flash requests to a flashing service over HTTP.

    The firmware binary is sent base64 encoded in the JSON body. Failures are
    reported on the alert channel, they never propagate to the wizard.
    """

    def __init__(
        self,
        flasher_url: str = "http://localhost:9090",
        alerts: Optional[AlertChannel] = None,
        timeout: float = 300.0,
    ):
        """Initialize HTTP flash transport.

        Args:
            flasher_url: Base URL of the flashing service
            alerts: Channel for flash failures (new channel if None)
            timeout: Request timeout in seconds (flashing is slow)
        """
        self.logger = logging.getLogger("hubwizard.transport")
        self.flasher_url = flasher_url.rstrip("/")
        self.flash_endpoint = f"{self.flasher_url}/api/v1.0/flash"
        self.alerts = alerts or AlertChannel()
        self.timeout = timeout
        self._task: Optional[asyncio.Task] = None

    @property
    def in_progress(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, request: FlashRequest) -> None:
        """Schedule the flash request. Must be called from a running event loop.

        Raises:
            RuntimeError: If a flash is already in progress
        """
        if self.in_progress:
            raise RuntimeError("Flash already in progress")

        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._post(request))

    async def wait(self) -> None:
        """Wait for the current flash, if any, to finish."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def _post(self, request: FlashRequest) -> None:
        self.logger.info(
            f"Flashing {len(request.firmware_binary)} bytes to "
            f"bootloader 0x{int(request.bootloader_type):02x} as {request.hub_name!r}"
        )
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.flash_endpoint,
                    json=request.model_dump(mode="json"),
                )
                response.raise_for_status()
            self.logger.info("Flash request completed")
        except httpx.HTTPError as e:
            self.alerts.show_alert(
                "flashFailed", UnexpectedError(f"Flashing service request failed: {e}", e)
            )
