"""API route handlers driving the install wizard."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from hubwizard.api.models import (
    AdvancedPanelRequest,
    ApiResponse,
    ColorsRequest,
    CustomFirmwareData,
    FlashRequestData,
    HubNumberRequest,
    LicenseRequest,
    OpenArchiveRequest,
    PaletteEntry,
    ResolutionData,
    SelectHubRequest,
    WizardStateData,
)
from hubwizard.models.identity import PALETTE
from hubwizard.models.selector import CustomSelector
from hubwizard.models.wizard import WizardStep
from hubwizard.services.device_type import hub_type_name_from_metadata
from hubwizard.services.identity import hsv_to_hsl
from hubwizard.services.wizard import WizardStateMachine

router = APIRouter(prefix="/api/v1.0")


def get_wizard(request: Request) -> WizardStateMachine:
    """Wizard owned by the application (created in lifespan)."""
    return request.app.state.wizard


def snapshot(wizard: WizardStateMachine) -> WizardStateData:
    """Build the public view of the wizard state."""
    state = wizard.state
    selector = state.hub_selector

    custom_info = None
    if selector.kind == "custom":
        result = state.custom_resolution
        metadata = result.package.metadata if result is not None and result.is_ready else None
        custom_info = CustomFirmwareData(
            filename=selector.filename,
            hub_type_name=hub_type_name_from_metadata(metadata),
            firmware_version=metadata.firmware_version if metadata else None,
        )

    return WizardStateData(
        is_open=wizard.is_open,
        step=state.current_step,
        can_advance=wizard.can_advance(),
        source=selector.kind,
        selected_hub=state.official_device_type,
        effective_hub=wizard.effective_device_type,
        official_firmware=ResolutionData.from_result(state.official_resolution),
        custom_firmware=ResolutionData.from_result(state.custom_resolution),
        custom_firmware_info=custom_info,
        license_accepted=state.license_accepted,
        license_text=wizard.license_text,
        identity=state.identity.model_dump(mode="json"),
        hub_name=state.hub_name,
        identity_valid=wizard.identity_valid,
        is_flash_in_progress=state.is_flash_in_progress,
        advanced_panel_open=state.advanced_panel_open,
    )


def _ok(wizard: WizardStateMachine) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=ApiResponse(data=snapshot(wizard)).model_dump(mode="json"),
    )


def _fail(code: int, msg: str, wizard: WizardStateMachine) -> JSONResponse:
    return JSONResponse(
        status_code=200,
        content=ApiResponse(code=code, msg=msg, data=snapshot(wizard)).model_dump(mode="json"),
    )


@router.get("/wizard", response_model=ApiResponse)
async def get_state(wizard: WizardStateMachine = Depends(get_wizard)):
    """GET /api/v1.0/wizard - Current wizard state."""
    return _ok(wizard)


@router.post("/wizard/open", response_model=ApiResponse)
async def post_open(wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/open - Start a fresh session."""
    wizard.open()
    return _ok(wizard)


@router.post("/wizard/select-source", response_model=ApiResponse)
async def post_select_source(
    body: SelectHubRequest, wizard: WizardStateMachine = Depends(get_wizard)
):
    """POST /api/v1.0/wizard/select-source - Select official firmware for a hub."""
    if not wizard.select_hub(body.device_type):
        return _fail(409, "Firmware source can only change on the hub step", wizard)
    return _ok(wizard)


@router.post("/wizard/custom-firmware", response_model=ApiResponse)
async def post_custom_firmware(
    request: Request,
    filename: str = "firmware.zip",
    wizard: WizardStateMachine = Depends(get_wizard),
):
    """POST /api/v1.0/wizard/custom-firmware - Upload a custom firmware zip.

    The request body is the raw archive.
    """
    archive = await request.body()
    if not archive:
        return _fail(400, "Empty firmware archive", wizard)

    if not wizard.select_source(CustomSelector(archive=archive, filename=filename)):
        return _fail(409, "Firmware source can only change on the hub step", wizard)
    return _ok(wizard)


@router.post("/wizard/custom-firmware/open", response_model=ApiResponse)
async def post_open_custom_firmware(
    body: OpenArchiveRequest, wizard: WizardStateMachine = Depends(get_wizard)
):
    """POST /api/v1.0/wizard/custom-firmware/open - Load a zip from a local path.

    A null path (picker cancelled) leaves the wizard unchanged and succeeds.
    """
    if wizard.state.current_step != WizardStep.SELECT_SOURCE:
        return _fail(409, "Firmware source can only change on the hub step", wizard)

    if not await wizard.load_custom_firmware(body.path) and body.path is not None:
        return _fail(400, "Firmware archive could not be opened", wizard)
    return _ok(wizard)


@router.delete("/wizard/custom-firmware", response_model=ApiResponse)
async def delete_custom_firmware(wizard: WizardStateMachine = Depends(get_wizard)):
    """DELETE /api/v1.0/wizard/custom-firmware - Back to official firmware."""
    if not wizard.clear_custom_firmware():
        return _fail(409, "Firmware source can only change on the hub step", wizard)
    return _ok(wizard)


@router.post("/wizard/advance", response_model=ApiResponse)
async def post_advance(wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/advance - Next step, if allowed."""
    step = wizard.state.current_step
    if not wizard.advance():
        return _fail(409, f"Cannot advance from step {step.value}", wizard)
    return _ok(wizard)


@router.post("/wizard/retreat", response_model=ApiResponse)
async def post_retreat(wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/retreat - Previous step."""
    wizard.retreat()
    return _ok(wizard)


@router.post("/wizard/license", response_model=ApiResponse)
async def post_license(body: LicenseRequest, wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/license - Accept or decline the firmware license."""
    if not wizard.set_license_accepted(body.accepted):
        return _fail(409, "License cannot be accepted right now", wizard)
    return _ok(wizard)


@router.post("/wizard/identity/text", response_model=ApiResponse)
async def post_hub_number(
    body: HubNumberRequest, wizard: WizardStateMachine = Depends(get_wizard)
):
    """POST /api/v1.0/wizard/identity/text - Set the hub number."""
    if not wizard.set_hub_number(body.name):
        return _fail(400, "Hub number must be up to 3 digits", wizard)
    return _ok(wizard)


@router.post("/wizard/identity/colors", response_model=ApiResponse)
async def post_colors(body: ColorsRequest, wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/identity/colors - Select the hub name colors."""
    if not wizard.select_colors(body.primary, body.secondary):
        return _fail(400, "Unknown color", wizard)
    return _ok(wizard)


@router.post("/wizard/advanced-panel", response_model=ApiResponse)
async def post_advanced_panel(
    body: AdvancedPanelRequest, wizard: WizardStateMachine = Depends(get_wizard)
):
    """POST /api/v1.0/wizard/advanced-panel - Expand or collapse the advanced panel."""
    wizard.set_advanced_panel_open(body.open)
    return _ok(wizard)


@router.post("/wizard/confirm", response_model=ApiResponse)
async def post_confirm(wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/confirm - Emit the flash request.

    Response format (success):
        {
            "code": 200,
            "msg": "success",
            "data": {"bootloader_type": 128, "hub_name": "Hub 3", "firmware_size": 212992}
        }
    """
    request = wizard.confirm_flash()
    if request is None:
        return _fail(409, "Flash cannot be started", wizard)

    data = FlashRequestData(
        bootloader_type=int(request.bootloader_type),
        hub_name=request.hub_name,
        firmware_size=len(request.firmware_binary),
    )
    return JSONResponse(
        status_code=200,
        content=ApiResponse(data=data).model_dump(mode="json"),
    )


@router.post("/wizard/cancel", response_model=ApiResponse)
async def post_cancel(wizard: WizardStateMachine = Depends(get_wizard)):
    """POST /api/v1.0/wizard/cancel - Close the wizard and discard the session."""
    wizard.cancel()
    return _ok(wizard)


@router.get("/palette", response_model=ApiResponse)
async def get_palette():
    """GET /api/v1.0/palette - Hub name colors with display values."""
    entries = [
        PaletteEntry(
            name=c.name,
            hue=c.hue,
            saturation=c.saturation,
            value=c.value,
            display=hsv_to_hsl(c),
        )
        for c in PALETTE
    ]
    return JSONResponse(
        status_code=200,
        content=ApiResponse(data=entries).model_dump(mode="json"),
    )
