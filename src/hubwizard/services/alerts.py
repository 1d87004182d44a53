"""Alert channel for unexpected errors."""

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel, Field

from hubwizard.errors import UnexpectedError


class Alert(BaseModel):
    """An error shown to the user outside the wizard flow."""

    key: str = Field(..., description="Alert identifier, e.g. 'unexpectedError'")
    message: str
    created_at: datetime = Field(default_factory=datetime.now)


class AlertChannel:
    """Collects alerts and forwards them to listeners.

    Listener failures are logged but never raised, so reporting an alert
    cannot break the operation that triggered it.
    """

    def __init__(self, max_alerts: int = 50):
        self.logger = logging.getLogger("hubwizard.alerts")
        self.max_alerts = max_alerts
        self._alerts: list[Alert] = []
        self._listeners: list[Callable[[Alert], None]] = []

    @property
    def alerts(self) -> list[Alert]:
        return list(self._alerts)

    def subscribe(self, listener: Callable[[Alert], None]) -> None:
        self._listeners.append(listener)

    def show_alert(self, key: str, error: Exception) -> Alert:
        """Publish an alert for an unexpected error.

        Args:
            key: Alert identifier
            error: The error to report

        Returns:
            The published Alert
        """
        if isinstance(error, UnexpectedError) and error.original_error is not None:
            cause: Optional[BaseException] = error.original_error
        else:
            cause = error

        self.logger.error(f"Alert {key}: {error}", exc_info=cause)

        alert = Alert(key=key, message=str(error))
        self._alerts.append(alert)
        del self._alerts[: -self.max_alerts]

        for listener in list(self._listeners):
            try:
                listener(alert)
            except Exception as e:
                self.logger.warning(f"Alert listener failed: {e}")

        return alert

    def clear(self) -> None:
        self._alerts.clear()
