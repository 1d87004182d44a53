"""Asynchronous firmware resolution with per-track supersession."""

import asyncio
import logging
from typing import Callable, Optional

from hubwizard.errors import FirmwareError, ResolutionFailure, UnexpectedError
from hubwizard.models.firmware import FirmwarePackage, ResolutionResult
from hubwizard.models.selector import (
    CustomSelector,
    OfficialSelector,
    SelectorTrack,
)
from hubwizard.services.alerts import AlertChannel
from hubwizard.services.catalog import CatalogService
from hubwizard.services.validator import CustomFirmwareValidator

ResultListener = Callable[[SelectorTrack, ResolutionResult], None]


class FirmwareResolver:
    """Turns selectors into ResolutionResults.

    Every request bumps the generation of its track. A result is delivered to
    listeners only if its generation is still the newest one for the track
    when it settles, so the last request wins regardless of completion order.
    The resolver holds no results itself; listeners own the state.
    """

    def __init__(
        self,
        catalog: Optional[CatalogService] = None,
        validator: Optional[CustomFirmwareValidator] = None,
        alerts: Optional[AlertChannel] = None,
    ):
        """Initialize firmware resolver.

        Args:
            catalog: Official firmware catalog (default catalog if None)
            validator: Custom archive validator (new instance if None)
            alerts: Channel for unexpected errors (new channel if None)
        """
        self.logger = logging.getLogger("hubwizard.resolver")
        self.validator = validator or CustomFirmwareValidator()
        self.catalog = catalog or CatalogService(validator=self.validator)
        self.alerts = alerts or AlertChannel()

        self._generations: dict[SelectorTrack, int] = {t: 0 for t in SelectorTrack}
        self._pending: set[asyncio.Task] = set()
        self._listeners: list[ResultListener] = []

    def subscribe(self, listener: ResultListener) -> None:
        self._listeners.append(listener)

    def generation(self, track: SelectorTrack) -> int:
        return self._generations[track]

    @property
    def has_pending(self) -> bool:
        return bool(self._pending)

    def request(self, selector: OfficialSelector | CustomSelector) -> int:
        """Start resolving a selector, superseding earlier requests on its track.

        Listeners are told ``Loading`` immediately. Must be called from a
        running event loop.

        Args:
            selector: Official or custom selector

        Returns:
            Generation number of this request
        """
        track = selector.track
        self._generations[track] += 1
        generation = self._generations[track]

        self.logger.info(f"Resolving {track.value} firmware (generation {generation})")
        self._notify(track, ResolutionResult.loading())

        loop = asyncio.get_running_loop()
        task = loop.create_task(self._resolve(track, generation, selector))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return generation

    def invalidate(self, track: Optional[SelectorTrack] = None) -> None:
        """Drop in-flight requests. Results arriving later are ignored.

        Args:
            track: Track to invalidate, all tracks (and their tasks) if None
        """
        if track is not None:
            self._generations[track] += 1
            self.logger.debug(f"Invalidated pending {track.value} resolutions")
            return

        for t in SelectorTrack:
            self._generations[t] += 1

        for task in list(self._pending):
            task.cancel()

        self.logger.debug("Invalidated all pending resolutions")

    async def wait(self) -> None:
        """Wait until no resolution is in flight."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _resolve(
        self,
        track: SelectorTrack,
        generation: int,
        selector: OfficialSelector | CustomSelector,
    ) -> None:
        try:
            package = await self._load(selector)
            result = ResolutionResult.ready(package)
        except FirmwareError as e:
            self.logger.warning(f"Resolution of {track.value} firmware failed: {e}")
            result = ResolutionResult.failed(e.code, e.message)
        except asyncio.CancelledError:
            self.logger.debug(f"Resolution of {track.value} generation {generation} cancelled")
            raise
        except Exception as e:
            self.alerts.show_alert(
                "unexpectedError",
                UnexpectedError(f"Unexpected error while resolving firmware: {e}", e),
            )
            result = ResolutionResult.failed(ResolutionFailure.code, str(e))

        self._apply(track, generation, result)

    async def _load(self, selector: OfficialSelector | CustomSelector) -> FirmwarePackage:
        if isinstance(selector, OfficialSelector):
            return await self.catalog.lookup(selector.device_type)

        # zip parsing is blocking
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.validator.validate, selector.archive)

    def _apply(
        self, track: SelectorTrack, generation: int, result: ResolutionResult
    ) -> bool:
        current = self._generations[track]
        if generation != current:
            self.logger.info(
                f"Dropping stale {track.value} result "
                f"(generation {generation}, current {current})"
            )
            return False

        self.logger.info(f"{track.value} firmware resolution settled: {result.status.value}")
        self._notify(track, result)
        return True

    def _notify(self, track: SelectorTrack, result: ResolutionResult) -> None:
        for listener in list(self._listeners):
            listener(track, result)
