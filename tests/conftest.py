"""Global pytest fixtures and configuration."""

import asyncio
import io
import json
import struct
import sys
import zipfile
from pathlib import Path
from typing import Any, Optional

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from hubwizard.errors import ResolutionFailure  # noqa: E402
from hubwizard.models.firmware import FirmwareMetadata, FirmwarePackage  # noqa: E402
from hubwizard.models.hub import DeviceType, bootloader_type  # noqa: E402
from hubwizard.services.alerts import AlertChannel  # noqa: E402
from hubwizard.services.preferences import PreferenceStore  # noqa: E402
from hubwizard.services.resolver import FirmwareResolver  # noqa: E402
from hubwizard.services.transport import FlashTransport  # noqa: E402
from hubwizard.services.wizard import WizardStateMachine  # noqa: E402


def build_firmware_zip(
    metadata: Optional[dict] = None,
    binary: Optional[bytes] = b"\x00\x01firmware",
    license_text: Optional[str] = "MIT License",
    raw_metadata: Optional[bytes] = None,
) -> bytes:
    """Build a firmware archive in memory. None leaves an entry out."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        if raw_metadata is not None:
            zf.writestr("firmware.metadata.json", raw_metadata)
        elif metadata is not None:
            zf.writestr("firmware.metadata.json", json.dumps(metadata))
        if binary is not None:
            zf.writestr("firmware-base.bin", binary)
        if license_text is not None:
            zf.writestr("ReadMe_OSS.txt", license_text)
    return buffer.getvalue()


def with_entry_size(archive: bytes, name: str, size: int) -> bytes:
    """Rewrite an entry's sizes in the central directory only (truncated entry)."""
    data = bytearray(archive)
    offset = data.find(b"PK\x01\x02")
    while offset != -1:
        name_length = struct.unpack_from("<H", data, offset + 28)[0]
        if data[offset + 46:offset + 46 + name_length] == name.encode():
            struct.pack_into("<II", data, offset + 20, size, size)
            return bytes(data)
        offset = data.find(b"PK\x01\x02", offset + 4)
    raise ValueError(f"{name} not in archive")


def sample_metadata(device_id: Optional[Any] = 0x80, **extra) -> dict:
    """firmware.metadata.json contents for a hub."""
    data = {
        "metadata-version": "2.0.0",
        "firmware-version": "v3.3.0",
        "checksum-type": "crc32",
        "mpy-abi-version": 6,
        "max-firmware-size": 229376,
        "hub-name-offset": 8240,
        "max-hub-name-size": 16,
    }
    if device_id is not None:
        data["device-id"] = device_id
    data.update(extra)
    return data


def official_package(device_type: DeviceType) -> FirmwarePackage:
    return FirmwarePackage(
        metadata=FirmwareMetadata.model_validate(
            sample_metadata(device_id=int(bootloader_type(device_type)))
        ),
        binary_payload=f"official-{device_type.value}".encode(),
        license_text=f"License for {device_type.value}",
    )


class FakeCatalog:
    """Catalog with per-hub gates to control when lookups settle."""

    def __init__(self, packages: Optional[dict] = None):
        self.packages = packages if packages is not None else {
            t: official_package(t) for t in DeviceType
        }
        self.calls: list[DeviceType] = []
        self.gates: dict[DeviceType, asyncio.Event] = {}

    def hold(self, device_type: DeviceType) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[device_type] = gate
        return gate

    async def lookup(self, device_type: DeviceType) -> FirmwarePackage:
        self.calls.append(device_type)
        gate = self.gates.pop(device_type, None)
        if gate is not None:
            await gate.wait()
        if device_type not in self.packages:
            raise ResolutionFailure(f"No firmware for {device_type.value}")
        return self.packages[device_type]


class FakeTransport(FlashTransport):
    """Records flash requests. Stays in progress until finish()."""

    def __init__(self):
        self.requests = []
        self._in_progress = False

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def submit(self, request) -> None:
        self.requests.append(request)
        self._in_progress = True

    def finish(self) -> None:
        self._in_progress = False


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def alerts():
    return AlertChannel()


@pytest.fixture
def preferences(tmp_path):
    return PreferenceStore(tmp_path / "preferences.json")


@pytest.fixture
def resolver(catalog, alerts):
    return FirmwareResolver(catalog=catalog, alerts=alerts)


@pytest.fixture
def wizard(resolver, transport, preferences, alerts):
    return WizardStateMachine(
        resolver=resolver,
        transport=transport,
        preferences=preferences,
        alerts=alerts,
    )


@pytest.fixture
def custom_archive():
    """Custom firmware declaring the City hub."""
    return build_firmware_zip(metadata=sample_metadata(device_id=0x41), binary=b"custom-city")
