"""Official firmware catalog lookup."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import httpx

from hubwizard.errors import FirmwareError, ResolutionFailure
from hubwizard.models.firmware import FirmwarePackage
from hubwizard.models.hub import DeviceType
from hubwizard.services.validator import CustomFirmwareValidator


class CatalogService:
    """Looks up the official firmware archive for a hub type.

    Archives are named ``<device type>.zip`` and fetched either from a local
    directory or from an HTTP(S) base URL.
    """

    def __init__(
        self,
        base_url: str = "https://firmware.pybricks.com/stable",
        firmware_dir: Optional[Path] = None,
        validator: Optional[CustomFirmwareValidator] = None,
        timeout: float = 30.0,
    ):
        """Initialize catalog service.

        Args:
            base_url: Root URL of official archives
            firmware_dir: Local archive directory, takes precedence over base_url
            validator: Archive validator (new instance if None)
            timeout: HTTP timeout in seconds
        """
        self.logger = logging.getLogger("hubwizard.catalog")
        self.base_url = base_url.rstrip("/")
        self.firmware_dir = Path(firmware_dir) if firmware_dir else None
        self.validator = validator or CustomFirmwareValidator()
        self.timeout = timeout

    def archive_name(self, device_type: DeviceType) -> str:
        return f"{device_type.value}.zip"

    async def lookup(self, device_type: DeviceType) -> FirmwarePackage:
        """Get the official firmware package for a hub type.

        Args:
            device_type: Hub hardware class

        Returns:
            Validated FirmwarePackage

        Raises:
            ResolutionFailure: If the archive cannot be fetched or is not valid
        """
        self.logger.info(f"Looking up official firmware for {device_type.value}")

        if self.firmware_dir is not None:
            archive = await self._read_local(device_type)
        else:
            archive = await self._fetch_remote(device_type)

        # zip parsing is blocking
        loop = asyncio.get_running_loop()
        try:
            package = await loop.run_in_executor(None, self.validator.validate, archive)
        except FirmwareError as e:
            self.logger.error(f"Official archive for {device_type.value} is invalid: {e}")
            raise ResolutionFailure(
                f"Official firmware for {device_type.value} is invalid: {e.message}", e
            ) from e

        return package

    async def _read_local(self, device_type: DeviceType) -> bytes:
        path = self.firmware_dir / self.archive_name(device_type)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            self.logger.warning(f"Failed to read {path}: {e}")
            raise ResolutionFailure(f"Firmware archive not available: {path}", e) from e

        self.logger.debug(f"Read {len(data)} bytes from {path}")
        return data

    async def _fetch_remote(self, device_type: DeviceType) -> bytes:
        url = f"{self.base_url}/{self.archive_name(device_type)}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            self.logger.warning(f"Failed to download {url}: {e}")
            raise ResolutionFailure(f"Firmware download failed: {e}", e) from e

        self.logger.debug(f"Downloaded {len(response.content)} bytes from {url}")
        return response.content
