"""Firmware install wizard state machine."""

import logging
from pathlib import Path
from typing import Callable, Optional

from hubwizard.errors import UnexpectedError, UserCancelledPick
from hubwizard.models.firmware import (
    FirmwareMetadata,
    ResolutionResult,
    ResolutionStatus,
)
from hubwizard.models.hub import DeviceType, bootloader_type
from hubwizard.models.selector import (
    CustomSelector,
    OfficialSelector,
    SelectorTrack,
)
from hubwizard.models.wizard import STEP_ORDER, FlashRequest, WizardState, WizardStep
from hubwizard.services.alerts import AlertChannel
from hubwizard.services.device_type import DeviceTypeResolver
from hubwizard.services.identity import HubIdentityConfigurator
from hubwizard.services.picker import ArchivePicker
from hubwizard.services.preferences import PreferenceStore
from hubwizard.services.resolver import FirmwareResolver
from hubwizard.services.transport import FlashTransport, HttpFlashTransport

StepListener = Callable[[str, Optional[str]], None]


class WizardStateMachine:
    """Owns one wizard session and enforces its transitions.

    Steps: hub → license → options → bootloader. Confirming the bootloader
    step emits a FlashRequest and ends the session.

    Guards:
    - hub: always advanceable
    - license: license accepted and the active firmware is ready
    - options: identity valid for its scheme and the firmware's name buffer
      (hard-blocking)
    """

    def __init__(
        self,
        resolver: Optional[FirmwareResolver] = None,
        transport: Optional[FlashTransport] = None,
        preferences: Optional[PreferenceStore] = None,
        identity: Optional[HubIdentityConfigurator] = None,
        device_types: Optional[DeviceTypeResolver] = None,
        alerts: Optional[AlertChannel] = None,
    ):
        """Initialize wizard state machine.

        Args:
            resolver: Firmware resolver (default resolver if None)
            transport: Flash transport (HTTP transport if None)
            preferences: Preference store (default location if None)
            identity: Hub name configurator (default palette if None)
            device_types: Effective hub type resolver
            alerts: Channel for unexpected errors
        """
        self.logger = logging.getLogger("hubwizard.wizard")
        self.alerts = alerts or AlertChannel()
        self.resolver = resolver or FirmwareResolver(alerts=self.alerts)
        self.transport = transport or HttpFlashTransport(alerts=self.alerts)
        self.preferences = preferences or PreferenceStore()
        self.identity = identity or HubIdentityConfigurator()
        self.device_types = device_types or DeviceTypeResolver()

        self._step_listeners: list[StepListener] = []
        self._requested: dict[SelectorTrack, OfficialSelector | CustomSelector] = {}
        self._is_open = False

        self.resolver.subscribe(self._on_resolution)
        self.state = self._new_state()

    # --- session lifecycle ---

    @property
    def is_open(self) -> bool:
        return self._is_open

    def open(self) -> None:
        """Start a fresh session and resolve the default official firmware.

        Must be called from a running event loop.
        """
        self.resolver.invalidate()
        self._requested.clear()
        self.state = self._new_state()
        self.refresh_flash_progress()
        self._is_open = True
        self.logger.info("Wizard opened")
        self.select_source(self.state.hub_selector)

    def cancel(self) -> None:
        """End the session, discarding everything but the persisted preference."""
        self._end_session(is_flash_in_progress=self.transport.in_progress)
        self.logger.info("Wizard cancelled")

    def _end_session(self, is_flash_in_progress: bool) -> None:
        self.resolver.invalidate()
        self._requested.clear()
        previous_step = self.state.current_step
        self.state = self._new_state(advanced_panel_open=self.state.advanced_panel_open)
        self.state.is_flash_in_progress = is_flash_in_progress
        self._is_open = False
        if previous_step != self.state.current_step:
            self._notify_step(self.state.current_step, previous_step)

    def _new_state(self, advanced_panel_open: Optional[bool] = None) -> WizardState:
        if advanced_panel_open is None:
            advanced_panel_open = self.preferences.get_advanced_panel_open()

        state = WizardState(advanced_panel_open=advanced_panel_open)
        state.identity = self.identity.default_scheme()
        state.hub_name = self.identity.hub_name(state.identity)
        return state

    # --- firmware source ---

    def select_source(self, selector: OfficialSelector | CustomSelector) -> bool:
        """Make a selector active and resolve it unless already ready.

        Only possible on the hub step, does not change the current step.
        Must be called from a running event loop.

        Returns:
            False if the current step does not allow changing the source
        """
        if self.state.current_step != WizardStep.SELECT_SOURCE:
            self.logger.info("Firmware source can only change on the hub step")
            return False

        previous = self.state.hub_selector
        self.state.hub_selector = selector

        if isinstance(selector, OfficialSelector):
            self.state.official_device_type = selector.device_type

        if selector.track != previous.track:
            self._drop_in_flight(previous.track)

        if selector != previous and self.state.license_accepted:
            self.logger.info("Firmware source changed, license acceptance cleared")
            self.state.license_accepted = False

        track = selector.track
        resolution = self._resolution(track)
        if (
            resolution is not None
            and resolution.is_ready
            and self._requested.get(track) == selector
        ):
            self.logger.debug(f"{track.value} firmware already resolved, reusing it")
            return True

        self._requested[track] = selector
        self.resolver.request(selector)
        return True

    def select_hub(self, device_type: DeviceType) -> bool:
        return self.select_source(OfficialSelector(device_type=device_type))

    async def load_custom_firmware(
        self, path: Optional[Path], picker: Optional[ArchivePicker] = None
    ) -> bool:
        """Read a custom firmware archive and make it the active source.

        Args:
            path: Chosen archive, None if the user cancelled the picker
            picker: Archive picker (new instance if None)

        Returns:
            True if a custom selector was activated
        """
        if self.state.current_step != WizardStep.SELECT_SOURCE:
            self.logger.info("Firmware source can only change on the hub step")
            return False

        picker = picker or ArchivePicker()
        try:
            picked = await picker.pick(path)
        except UserCancelledPick:
            return False
        except UnexpectedError as e:
            self.alerts.show_alert("unexpectedError", e)
            return False

        return self.select_source(
            CustomSelector(archive=picked.data, filename=picked.filename)
        )

    def clear_custom_firmware(self) -> bool:
        """Forget the custom archive and go back to the last official hub type."""
        if self.state.current_step != WizardStep.SELECT_SOURCE:
            return False

        self.resolver.invalidate(SelectorTrack.CUSTOM)
        self._requested.pop(SelectorTrack.CUSTOM, None)
        self.state.custom_resolution = None
        return self.select_source(OfficialSelector(device_type=self.state.official_device_type))

    def _drop_in_flight(self, track: SelectorTrack) -> None:
        resolution = self._resolution(track)
        if resolution is None or resolution.status != ResolutionStatus.LOADING:
            return

        self.logger.info(f"Abandoning in-flight {track.value} resolution")
        self.resolver.invalidate(track)
        self._requested.pop(track, None)
        if track == SelectorTrack.CUSTOM:
            self.state.custom_resolution = None
        else:
            self.state.official_resolution = None

    def _resolution(self, track: SelectorTrack) -> Optional[ResolutionResult]:
        if track == SelectorTrack.CUSTOM:
            return self.state.custom_resolution
        return self.state.official_resolution

    def _on_resolution(self, track: SelectorTrack, result: ResolutionResult) -> None:
        if track == SelectorTrack.CUSTOM:
            self.state.custom_resolution = result
        else:
            self.state.official_resolution = result

        if track == self.state.hub_selector.track and not result.is_ready:
            self.state.license_accepted = False

    @property
    def effective_device_type(self) -> DeviceType:
        return self.device_types.resolve(self.state)

    @property
    def active_metadata(self) -> Optional[FirmwareMetadata]:
        resolution = self.state.active_resolution
        if resolution is None or not resolution.is_ready:
            return None
        return resolution.package.metadata

    @property
    def license_text(self) -> Optional[str]:
        resolution = self.state.active_resolution
        if resolution is None or not resolution.is_ready:
            return None
        return resolution.package.license_text

    # --- steps ---

    def on_step_change(self, listener: StepListener) -> None:
        """Register a callback receiving (new_step_id, previous_step_id)."""
        self._step_listeners.append(listener)

    def can_advance(self) -> bool:
        step = self.state.current_step

        if step == WizardStep.SELECT_SOURCE:
            return True
        if step == WizardStep.ACCEPT_LICENSE:
            resolution = self.state.active_resolution
            return (
                self.state.license_accepted
                and resolution is not None
                and resolution.is_ready
            )
        if step == WizardStep.CONFIGURE_IDENTITY:
            return self.identity.is_valid(self.state.identity, self.active_metadata)
        return False

    def advance(self) -> bool:
        """Move to the next step if the current step's guard holds.

        Returns:
            True if the step changed, False if blocked
        """
        step = self.state.current_step
        if not self.can_advance():
            self.logger.info(f"Advance from step {step.value} blocked")
            return False

        self._set_step(STEP_ORDER[STEP_ORDER.index(step) + 1])
        return True

    def retreat(self) -> bool:
        """Move to the previous step. No-op on the first step."""
        index = STEP_ORDER.index(self.state.current_step)
        if index == 0:
            return False

        self._set_step(STEP_ORDER[index - 1])
        return True

    def _set_step(self, step: WizardStep) -> None:
        previous = self.state.current_step
        self.state.current_step = step
        self.logger.info(f"Step changed: {previous.value} -> {step.value}")

        if previous == WizardStep.CONFIGURE_IDENTITY and step == WizardStep.BOOTLOADER_CONFIRM:
            self.logger.info(f"Selected hub name: {self.state.hub_name}")

        self._notify_step(step, previous)

    def _notify_step(self, step: WizardStep, previous: Optional[WizardStep]) -> None:
        for listener in list(self._step_listeners):
            try:
                listener(step.value, previous.value if previous else None)
            except Exception as e:
                self.logger.warning(f"Step listener failed: {e}", exc_info=True)

    # --- license ---

    def set_license_accepted(self, accepted: bool) -> bool:
        """Tick or untick the license checkbox.

        Returns:
            False if the checkbox is disabled (wrong step or firmware not ready)
        """
        resolution = self.state.active_resolution
        if self.state.current_step != WizardStep.ACCEPT_LICENSE:
            self.logger.debug("License checkbox only available on the license step")
            return False
        if resolution is None or not resolution.is_ready:
            self.logger.debug("License checkbox disabled until firmware is ready")
            return False

        self.state.license_accepted = accepted
        return True

    # --- identity ---

    def set_hub_number(self, text: str) -> bool:
        """Edit the free text hub number. Non-conforming edits are not applied."""
        scheme = self.identity.edit_text(text)
        if scheme is None:
            return False
        self._set_identity(scheme)
        return True

    def select_colors(
        self, primary: Optional[str] = None, secondary: Optional[str] = None
    ) -> bool:
        """Select one or both colors of the color pair name."""
        scheme = self.identity.select_colors(self.state.identity, primary, secondary)
        if scheme is None:
            return False
        self._set_identity(scheme)
        return True

    def _set_identity(self, scheme) -> None:
        self.state.identity = scheme
        self.state.hub_name = self.identity.hub_name(scheme)
        self.logger.debug(f"Hub name is now {self.state.hub_name!r}")

    @property
    def identity_valid(self) -> bool:
        return self.identity.is_valid(self.state.identity, self.active_metadata)

    # --- preferences ---

    def set_advanced_panel_open(self, is_open: bool) -> None:
        self.state.advanced_panel_open = is_open
        try:
            self.preferences.set_advanced_panel_open(is_open)
        except OSError as e:
            self.alerts.show_alert(
                "unexpectedError", UnexpectedError(f"Failed to save preferences: {e}", e)
            )

    def toggle_advanced_panel(self) -> bool:
        self.set_advanced_panel_open(not self.state.advanced_panel_open)
        return self.state.advanced_panel_open

    # --- flashing ---

    def refresh_flash_progress(self) -> bool:
        self.state.is_flash_in_progress = self.transport.in_progress
        return self.state.is_flash_in_progress

    def confirm_flash(self) -> Optional[FlashRequest]:
        """Emit the flash request and end the session.

        At most one request is emitted per session: repeated calls after the
        first are no-ops.

        Returns:
            The emitted FlashRequest, or None if confirmation is not possible
        """
        if self.state.current_step != WizardStep.BOOTLOADER_CONFIRM:
            self.logger.info("Flash confirmation outside the bootloader step ignored")
            return None

        if self.refresh_flash_progress():
            self.logger.info("Flash already in progress, confirmation ignored")
            return None

        resolution = self.state.active_resolution
        if resolution is None or not resolution.is_ready:
            self.logger.warning("Active firmware not ready, confirmation ignored")
            return None

        device_type = self.effective_device_type
        request = FlashRequest(
            bootloader_type=bootloader_type(device_type),
            firmware_binary=resolution.package.binary_payload,
            hub_name=self.state.hub_name,
        )

        self.state.is_flash_in_progress = True
        try:
            self.transport.submit(request)
        except Exception as e:
            self.state.is_flash_in_progress = False
            self.alerts.show_alert(
                "unexpectedError", UnexpectedError(f"Failed to start flashing: {e}", e)
            )
            return None

        self.logger.info(
            f"Flash request emitted: hub={device_type.value}, name={request.hub_name!r}"
        )
        self._end_session(is_flash_in_progress=True)
        return request
