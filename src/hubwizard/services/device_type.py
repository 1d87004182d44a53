"""Effective hub type selection."""

import logging
from typing import Optional

from hubwizard.models.firmware import FirmwareMetadata
from hubwizard.models.hub import DISPLAY_NAMES, BootloaderType, DeviceType
from hubwizard.models.wizard import WizardState

# Inventor hub firmware declares the Prime hub id, so 0x81 maps to PRIME.
_DEVICE_TYPES_BY_ID: dict[BootloaderType, DeviceType] = {
    BootloaderType.MOVE_HUB: DeviceType.MOVE,
    BootloaderType.CITY_HUB: DeviceType.CITY,
    BootloaderType.TECHNIC_HUB: DeviceType.TECHNIC,
    BootloaderType.PRIME_HUB: DeviceType.PRIME,
    BootloaderType.ESSENTIAL_HUB: DeviceType.ESSENTIAL,
}

UNKNOWN_HUB_NAME = "?"


def device_type_from_metadata(metadata: Optional[FirmwareMetadata]) -> Optional[DeviceType]:
    """Classify the device id declared in firmware metadata.

    Returns:
        The matching DeviceType, or None if the id is absent or unrecognized
    """
    if metadata is None or metadata.device_id is None:
        return None

    # bool is an int subclass, True must not match a device id
    if not isinstance(metadata.device_id, int) or isinstance(metadata.device_id, bool):
        return None

    try:
        device_id = BootloaderType(metadata.device_id)
    except ValueError:
        return None

    return _DEVICE_TYPES_BY_ID[device_id]


def hub_type_name_from_metadata(metadata: Optional[FirmwareMetadata]) -> str:
    """Human-readable hub type for the device id in metadata, "?" if unknown."""
    device_type = device_type_from_metadata(metadata)
    if device_type is None:
        return UNKNOWN_HUB_NAME
    return DISPLAY_NAMES[device_type]


class DeviceTypeResolver:
    """Derives the hub type that drives bootloader instructions and flashing.

    Precedence: recognized custom metadata id, then the official selection,
    which is also the fallback for custom packages with an unknown id.
    """

    def __init__(self):
        self.logger = logging.getLogger("hubwizard.device_type")

    def resolve(self, state: WizardState) -> DeviceType:
        selector = state.hub_selector

        if selector.kind == "official":
            return selector.device_type

        resolution = state.custom_resolution
        if resolution is None or not resolution.is_ready:
            return state.official_device_type

        device_type = device_type_from_metadata(resolution.package.metadata)
        if device_type is None:
            self.logger.info(
                f"Custom firmware device-id {resolution.package.metadata.device_id} "
                f"not recognized, falling back to {state.official_device_type.value}"
            )
            return state.official_device_type

        return device_type
