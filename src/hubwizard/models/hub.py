"""Hub hardware classes and their firmware identifiers."""

from enum import Enum, IntEnum


class DeviceType(str, Enum):
    """Supported hub hardware classes.

    Values are stable keys used by the HTTP API and the preference store.
    """

    MOVE = "move"
    CITY = "city"
    TECHNIC = "technic"
    PRIME = "prime"
    ESSENTIAL = "essential"
    INVENTOR = "inventor"


class BootloaderType(IntEnum):
    """Device ids as embedded in firmware metadata and expected by the bootloader."""

    MOVE_HUB = 0x40
    CITY_HUB = 0x41
    TECHNIC_HUB = 0x80
    PRIME_HUB = 0x81
    ESSENTIAL_HUB = 0x83


DEFAULT_DEVICE_TYPE = DeviceType.PRIME

# Inventor hub runs the Prime hub bootloader
BOOTLOADER_TYPES: dict[DeviceType, BootloaderType] = {
    DeviceType.MOVE: BootloaderType.MOVE_HUB,
    DeviceType.CITY: BootloaderType.CITY_HUB,
    DeviceType.TECHNIC: BootloaderType.TECHNIC_HUB,
    DeviceType.PRIME: BootloaderType.PRIME_HUB,
    DeviceType.ESSENTIAL: BootloaderType.ESSENTIAL_HUB,
    DeviceType.INVENTOR: BootloaderType.PRIME_HUB,
}

DISPLAY_NAMES: dict[DeviceType, str] = {
    DeviceType.MOVE: "BOOST Move Hub",
    DeviceType.CITY: "City Hub",
    DeviceType.TECHNIC: "Technic Hub",
    DeviceType.PRIME: "SPIKE Prime/MINDSTORMS Robot Inventor hub",
    DeviceType.ESSENTIAL: "SPIKE Essential hub",
    DeviceType.INVENTOR: "MINDSTORMS Robot Inventor hub",
}


def bootloader_type(device_type: DeviceType) -> BootloaderType:
    """Get the bootloader type used to flash a hub."""
    return BOOTLOADER_TYPES[device_type]
