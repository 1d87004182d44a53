"""Firmware package data models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class FirmwareMetadata(BaseModel):
    """firmware.metadata.json embedded in every firmware archive.

    Keys are hyphenated in the file. Only ``device-id`` matters for hub type
    selection, it is left unchecked here and classified later.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    metadata_version: Optional[str] = Field(None, alias="metadata-version")
    firmware_version: Optional[str] = Field(
        None, alias="firmware-version", description="Firmware version string"
    )
    # any JSON value, unrecognized ids take the fallback path
    device_id: Optional[Any] = Field(
        None, alias="device-id", description="Hub hardware identifier"
    )
    checksum_type: Optional[str] = Field(None, alias="checksum-type")
    mpy_abi_version: Optional[int] = Field(None, alias="mpy-abi-version")
    mpy_cross_options: Optional[list[str]] = Field(None, alias="mpy-cross-options")
    user_mpy_offset: Optional[int] = Field(None, ge=0, alias="user-mpy-offset")
    max_firmware_size: Optional[int] = Field(None, ge=0, alias="max-firmware-size")
    hub_name_offset: Optional[int] = Field(None, ge=0, alias="hub-name-offset")
    max_hub_name_size: Optional[int] = Field(
        None, gt=0, alias="max-hub-name-size", description="Hub name buffer size in bytes"
    )


class FirmwarePackage(BaseModel):
    """A resolved firmware package. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    metadata: FirmwareMetadata
    binary_payload: bytes = Field(..., repr=False)
    license_text: str = Field(default="", repr=False)


class ResolutionStatus(str, Enum):
    """Resolution lifecycle.

    loading → ready
        ↓
      error
    """

    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ResolutionError(BaseModel):
    """Typed failure reason of a resolution."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., description="Error kind, e.g. MISSING_BINARY")
    message: str = Field(..., description="Human-readable description")


class ResolutionResult(BaseModel):
    """Outcome of resolving one selector."""

    model_config = ConfigDict(frozen=True)

    status: ResolutionStatus
    package: Optional[FirmwarePackage] = None
    error: Optional[ResolutionError] = None

    @classmethod
    def loading(cls) -> "ResolutionResult":
        return cls(status=ResolutionStatus.LOADING)

    @classmethod
    def ready(cls, package: FirmwarePackage) -> "ResolutionResult":
        return cls(status=ResolutionStatus.READY, package=package)

    @classmethod
    def failed(cls, code: str, message: str) -> "ResolutionResult":
        return cls(
            status=ResolutionStatus.ERROR,
            error=ResolutionError(code=code, message=message),
        )

    @property
    def is_ready(self) -> bool:
        return self.status == ResolutionStatus.READY
