"""Pydantic models for HTTP API requests and responses."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from hubwizard.models.firmware import ResolutionResult, ResolutionStatus
from hubwizard.models.hub import DeviceType
from hubwizard.models.wizard import WizardStep
from hubwizard.services.identity import HslColor


class SelectHubRequest(BaseModel):
    """POST /api/v1.0/wizard/select-source payload.

    Example:
        {"device_type": "technic"}
    """

    device_type: DeviceType = Field(
        ..., description="Official hub type", examples=["technic", "prime"]
    )


class OpenArchiveRequest(BaseModel):
    """POST /api/v1.0/wizard/custom-firmware/open payload.

    A null path means the user cancelled the picker.
    """

    path: Optional[str] = Field(None, description="Path of the chosen zip file")


class LicenseRequest(BaseModel):
    """POST /api/v1.0/wizard/license payload."""

    accepted: bool


class HubNumberRequest(BaseModel):
    """POST /api/v1.0/wizard/identity/text payload."""

    name: str = Field(..., description="Hub number, up to three digits", examples=["1", "007"])


class ColorsRequest(BaseModel):
    """POST /api/v1.0/wizard/identity/colors payload.

    Omitted slots keep their current color.
    """

    primary: Optional[str] = Field(None, examples=["red"])
    secondary: Optional[str] = Field(None, examples=["blue"])


class AdvancedPanelRequest(BaseModel):
    """POST /api/v1.0/wizard/advanced-panel payload."""

    open: bool


class ResolutionData(BaseModel):
    """Resolution state of one firmware track."""

    status: ResolutionStatus
    error_code: Optional[str] = None
    error: Optional[str] = None
    device_id: Optional[Any] = None
    firmware_version: Optional[str] = None

    @classmethod
    def from_result(cls, result: Optional[ResolutionResult]) -> Optional["ResolutionData"]:
        if result is None:
            return None
        if result.is_ready:
            metadata = result.package.metadata
            return cls(
                status=result.status,
                device_id=metadata.device_id,
                firmware_version=metadata.firmware_version,
            )
        return cls(
            status=result.status,
            error_code=result.error.code if result.error else None,
            error=result.error.message if result.error else None,
        )


class CustomFirmwareData(BaseModel):
    """Summary of a loaded custom firmware archive."""

    filename: str
    hub_type_name: str = Field(..., description='Hub type declared in metadata, "?" if unknown')
    firmware_version: Optional[str] = None


class WizardStateData(BaseModel):
    """Wizard state snapshot nested in responses."""

    is_open: bool
    step: WizardStep
    can_advance: bool
    source: str = Field(..., description="Active selector kind: official or custom")
    selected_hub: DeviceType = Field(..., description="Last selected official hub type")
    effective_hub: DeviceType = Field(..., description="Hub type used for flashing")
    official_firmware: Optional[ResolutionData] = None
    custom_firmware: Optional[ResolutionData] = None
    custom_firmware_info: Optional[CustomFirmwareData] = None
    license_accepted: bool
    license_text: Optional[str] = None
    identity: dict[str, Any]
    hub_name: str
    identity_valid: bool
    is_flash_in_progress: bool
    advanced_panel_open: bool


class FlashRequestData(BaseModel):
    """Summary of an emitted flash request (binary omitted)."""

    bootloader_type: int
    hub_name: str
    firmware_size: int


class PaletteEntry(BaseModel):
    """Palette color with its display conversion."""

    name: str
    hue: int
    saturation: int
    value: int
    display: HslColor


class ApiResponse(BaseModel):
    """Response envelope for all endpoints.

    HTTP status code is always 200, real status in 'code' field.
    """

    code: int = Field(default=200, description="Application-level status code (200/400/409)")
    msg: str = Field(default="success", description="Status message")
    data: Optional[Any] = Field(None, description="Optional response data")
