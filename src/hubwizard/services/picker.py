"""Firmware archive acquisition."""

import logging
from pathlib import Path
from typing import Optional

import aiofiles

from hubwizard.errors import UnexpectedError, UserCancelledPick

ZIP_FILE_EXTENSION = ".zip"


class PickedArchive:
    """A file returned by the picker."""

    def __init__(self, filename: str, data: bytes):
        self.filename = filename
        self.data = data

    def __repr__(self) -> str:
        return f"PickedArchive(filename={self.filename!r}, size={len(self.data)})"


class ArchivePicker:
    """Reads a user chosen zip archive from the file system.

    A missing path means the user dismissed the picker.
    """

    def __init__(self):
        self.logger = logging.getLogger("hubwizard.picker")

    async def pick(self, path: Optional[Path]) -> PickedArchive:
        """Read the chosen archive.

        Args:
            path: Chosen file, None if the user cancelled

        Returns:
            PickedArchive with the raw bytes

        Raises:
            UserCancelledPick: If no file was chosen
            UnexpectedError: If the file is not a zip file or cannot be read
        """
        if path is None:
            self.logger.debug("File picker cancelled")
            raise UserCancelledPick()

        path = Path(path)
        if path.suffix.lower() != ZIP_FILE_EXTENSION:
            raise UnexpectedError(f"Only {ZIP_FILE_EXTENSION} files can be opened: {path.name}")

        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except OSError as e:
            raise UnexpectedError(f"Failed to read {path}: {e}", e) from e

        self.logger.info(f"Picked firmware archive {path.name} ({len(data)} bytes)")
        return PickedArchive(filename=path.name, data=data)
