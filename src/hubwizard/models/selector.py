"""Firmware source selectors."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from hubwizard.models.hub import DeviceType


class SelectorTrack(str, Enum):
    """Independent resolution tracks, one per selector variant."""

    OFFICIAL = "official"
    CUSTOM = "custom"


class OfficialSelector(BaseModel):
    """Firmware from the built-in catalog for a hub type."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["official"] = "official"
    device_type: DeviceType

    @property
    def track(self) -> SelectorTrack:
        return SelectorTrack.OFFICIAL


class CustomSelector(BaseModel):
    """Firmware supplied by the user as a zip archive."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    archive: bytes = Field(..., repr=False, description="Raw zip archive bytes")
    filename: str = Field(default="firmware.zip", description="Name of the picked file")

    @property
    def track(self) -> SelectorTrack:
        return SelectorTrack.CUSTOM


HubSelector = Annotated[
    Union[OfficialSelector, CustomSelector], Field(discriminator="kind")
]
