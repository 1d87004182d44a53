"""Hub name configuration."""

import logging
import re
from typing import Optional

from pydantic import BaseModel

from hubwizard.models.firmware import FirmwareMetadata
from hubwizard.models.identity import (
    PALETTE,
    ColorPairIdentity,
    FreeTextIdentity,
    PaletteColor,
)
from hubwizard.models.wizard import DEFAULT_HUB_NUMBER, HUB_NAME_PREFIX

HUB_NUMBER_PATTERN = re.compile(r"\d*", re.ASCII)
MAX_HUB_NUMBER_LENGTH = 3

DEFAULT_PRIMARY_COLOR = "red"
DEFAULT_SECONDARY_COLOR = "blue"


class HslColor(BaseModel):
    """Display color in the hue/saturation/lightness model (percentages)."""

    hue: float
    saturation: float
    lightness: float


def hsv_to_hsl(color: PaletteColor) -> HslColor:
    """Convert a palette color to HSL for display.

    Achromatic colors keep zero saturation. Lightness of exactly 0 or 1
    (black, white) also yields zero saturation.
    """
    s = color.saturation / 100
    v = color.value / 100

    if s == 0:
        return HslColor(hue=color.hue, saturation=0.0, lightness=v * 100)

    lightness = v * (1 - s / 2)
    if lightness in (0, 1):
        saturation = 0.0
    else:
        saturation = (v - lightness) / min(lightness, 1 - lightness)

    return HslColor(hue=color.hue, saturation=saturation * 100, lightness=lightness * 100)


def validate_hub_name(hub_name: str, metadata: Optional[FirmwareMetadata]) -> bool:
    """Check that a hub name fits in the firmware's name buffer.

    The encoded name must leave room for the null terminator. Firmware
    without a declared limit accepts any name.
    """
    if metadata is None or metadata.max_hub_name_size is None:
        return True
    return len(hub_name.encode("utf-8")) < metadata.max_hub_name_size


class HubIdentityConfigurator:
    """Computes hub names from identity schemes.

    Edits that do not conform to their scheme are rejected: the edit methods
    return None and the caller keeps its current scheme.
    """

    def __init__(
        self,
        palette: tuple[PaletteColor, ...] = PALETTE,
        prefix: str = HUB_NAME_PREFIX,
        default_number: str = DEFAULT_HUB_NUMBER,
    ):
        self.logger = logging.getLogger("hubwizard.identity")
        self.palette = palette
        self.colors = {c.name: c for c in palette}
        self.prefix = prefix
        self.default_number = default_number

    def default_scheme(self) -> FreeTextIdentity:
        return FreeTextIdentity()

    def hub_name(self, scheme: FreeTextIdentity | ColorPairIdentity) -> str:
        if isinstance(scheme, FreeTextIdentity):
            return f"{self.prefix} {scheme.name or self.default_number}"
        return (
            f"{self.prefix} {scheme.primary.capitalize()} {scheme.secondary.capitalize()}"
        )

    def edit_text(self, text: str) -> Optional[FreeTextIdentity]:
        """Apply a free text edit.

        Returns:
            New FreeTextIdentity, or None if the text is not up to three digits
        """
        if not self.is_valid_text(text):
            self.logger.debug(f"Rejected hub number edit: {text!r}")
            return None
        return FreeTextIdentity(name=text)

    def select_colors(
        self,
        current: FreeTextIdentity | ColorPairIdentity,
        primary: Optional[str] = None,
        secondary: Optional[str] = None,
    ) -> Optional[ColorPairIdentity]:
        """Apply a color selection to one or both slots.

        Slots not given keep the current pair's color, or the default color
        when switching from free text.

        Returns:
            New ColorPairIdentity, or None if a color is not in the palette
        """
        if isinstance(current, ColorPairIdentity):
            base_primary, base_secondary = current.primary, current.secondary
        else:
            base_primary, base_secondary = DEFAULT_PRIMARY_COLOR, DEFAULT_SECONDARY_COLOR

        new_primary = primary if primary is not None else base_primary
        new_secondary = secondary if secondary is not None else base_secondary

        for name in (new_primary, new_secondary):
            if name not in self.colors:
                self.logger.debug(f"Rejected unknown color: {name!r}")
                return None

        return ColorPairIdentity(primary=new_primary, secondary=new_secondary)

    def is_valid_text(self, text: str) -> bool:
        return bool(HUB_NUMBER_PATTERN.fullmatch(text)) and len(text) <= MAX_HUB_NUMBER_LENGTH

    def is_valid(
        self,
        scheme: FreeTextIdentity | ColorPairIdentity,
        metadata: Optional[FirmwareMetadata] = None,
    ) -> bool:
        """Check a scheme and the hub name it produces against the firmware."""
        if isinstance(scheme, FreeTextIdentity):
            scheme_ok = self.is_valid_text(scheme.name)
        else:
            scheme_ok = bool(scheme.primary) and bool(scheme.secondary)

        return scheme_ok and validate_hub_name(self.hub_name(scheme), metadata)

    def display_color(self, name: str) -> HslColor:
        """HSL display color for a palette entry.

        Raises:
            KeyError: If the color is not in the palette
        """
        return hsv_to_hsl(self.colors[name])
