"""Wizard session state and output models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hubwizard.models.firmware import ResolutionResult
from hubwizard.models.hub import DEFAULT_DEVICE_TYPE, BootloaderType, DeviceType
from hubwizard.models.identity import FreeTextIdentity, IdentityScheme
from hubwizard.models.selector import HubSelector, OfficialSelector

DEFAULT_HUB_NUMBER = "1"
HUB_NAME_PREFIX = "Hub"


class WizardStep(str, Enum):
    """Wizard steps in order.

    hub → license → options → bootloader

    Values are stable identifiers observed by external hooks (product tour).
    """

    SELECT_SOURCE = "hub"
    ACCEPT_LICENSE = "license"
    CONFIGURE_IDENTITY = "options"
    BOOTLOADER_CONFIRM = "bootloader"


STEP_ORDER: tuple[WizardStep, ...] = (
    WizardStep.SELECT_SOURCE,
    WizardStep.ACCEPT_LICENSE,
    WizardStep.CONFIGURE_IDENTITY,
    WizardStep.BOOTLOADER_CONFIRM,
)


class WizardState(BaseModel):
    """Aggregate state of one wizard session.

    Mutated only by WizardStateMachine.
    """

    model_config = ConfigDict(validate_assignment=True)

    current_step: WizardStep = WizardStep.SELECT_SOURCE
    hub_selector: HubSelector = Field(
        default_factory=lambda: OfficialSelector(device_type=DEFAULT_DEVICE_TYPE)
    )
    official_device_type: DeviceType = Field(
        default=DEFAULT_DEVICE_TYPE,
        description="Last explicitly selected official hub type (custom fallback)",
    )
    official_resolution: Optional[ResolutionResult] = None
    custom_resolution: Optional[ResolutionResult] = None
    license_accepted: bool = False
    identity: IdentityScheme = Field(default_factory=FreeTextIdentity)
    hub_name: str = f"{HUB_NAME_PREFIX} {DEFAULT_HUB_NUMBER}"
    is_flash_in_progress: bool = False
    advanced_panel_open: bool = Field(
        default=False, description="Persisted across sessions"
    )

    @property
    def active_resolution(self) -> Optional[ResolutionResult]:
        if self.hub_selector.kind == "custom":
            return self.custom_resolution
        return self.official_resolution


class FlashRequest(BaseModel):
    """Command handed to the flash transport."""

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    bootloader_type: BootloaderType
    firmware_binary: bytes = Field(..., repr=False)
    hub_name: str
