"""FastAPI application for the hub firmware install wizard."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
import uvicorn

from hubwizard.api.routes import router
from hubwizard.config import Settings, get_settings
from hubwizard.services.alerts import AlertChannel
from hubwizard.services.catalog import CatalogService
from hubwizard.services.preferences import PreferenceStore
from hubwizard.services.resolver import FirmwareResolver
from hubwizard.services.transport import HttpFlashTransport
from hubwizard.services.validator import CustomFirmwareValidator
from hubwizard.services.wizard import WizardStateMachine
from hubwizard.utils.logging import setup_logging


def build_wizard(settings: Settings) -> WizardStateMachine:
    """Wire the wizard and its collaborators from settings."""
    alerts = AlertChannel()
    validator = CustomFirmwareValidator()
    catalog = CatalogService(
        base_url=settings.firmware_base_url,
        firmware_dir=settings.firmware_dir,
        validator=validator,
        timeout=settings.catalog_timeout,
    )
    return WizardStateMachine(
        resolver=FirmwareResolver(catalog=catalog, validator=validator, alerts=alerts),
        transport=HttpFlashTransport(flasher_url=settings.flasher_url, alerts=alerts),
        preferences=PreferenceStore(settings.preferences_file),
        alerts=alerts,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown hooks.

    Startup:
    - Initialize logger
    - Create the preferences directory
    - Build the wizard

    Shutdown:
    - Drop in-flight resolutions
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    logger = setup_logging(settings)
    logger.info("Hub firmware wizard starting up...")

    Path(settings.preferences_file).parent.mkdir(parents=True, exist_ok=True)

    if settings.firmware_dir is not None:
        logger.info(f"Official firmware from local directory {settings.firmware_dir}")
    else:
        logger.info(f"Official firmware from {settings.firmware_base_url}")

    wizard = build_wizard(settings)
    app.state.wizard = wizard

    logger.info(f"Hub firmware wizard ready on port {settings.port}")

    yield

    # Shutdown
    wizard.resolver.invalidate()
    logger.info("Hub firmware wizard shutting down...")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title="Hub Firmware Wizard",
        description="Guided firmware selection and flashing for hubs",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.include_router(router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "hub-firmware-wizard", "version": "1.0.0"}

    return app


app = create_app()


def main():
    """Main entry point for running the server."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    main()
