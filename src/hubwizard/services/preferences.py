"""Preference store persisted across wizard sessions."""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field


class Preferences(BaseModel):
    """Persistent preferences at ./tmp/preferences.json."""

    advanced_panel_open: bool = Field(
        default=False, description="Custom firmware panel expanded"
    )


class PreferenceStore:
    """Loads and saves Preferences as JSON.

    A missing or corrupted file yields defaults, corrupted files are deleted.
    """

    def __init__(self, path: Path = Path("./tmp/preferences.json")):
        self.logger = logging.getLogger("hubwizard.preferences")
        self.path = Path(path)

    def load(self) -> Preferences:
        if not self.path.exists():
            self.logger.debug("No preferences file found")
            return Preferences()

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            prefs = Preferences(**data)
            self.logger.debug(f"Loaded preferences: {prefs.model_dump()}")
            return prefs
        except Exception as e:
            self.logger.error(f"Failed to load preferences file: {e}", exc_info=True)
            self.path.unlink(missing_ok=True)
            return Preferences()

    def save(self, prefs: Preferences) -> None:
        """Write preferences to disk.

        Raises:
            OSError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(prefs.model_dump(mode="json"), f, indent=2)
            self.logger.debug(f"Saved preferences: {prefs.model_dump()}")
        except OSError as e:
            self.logger.error(f"Failed to save preferences file: {e}", exc_info=True)
            raise

    def get_advanced_panel_open(self) -> bool:
        return self.load().advanced_panel_open

    def set_advanced_panel_open(self, value: bool) -> None:
        prefs = self.load()
        prefs.advanced_panel_open = value
        self.save(prefs)
