"""Firmware archive validation."""

import io
import json
import logging
import zipfile
import zlib

from pydantic import ValidationError

from hubwizard.errors import (
    InvalidArchive,
    MalformedMetadata,
    MissingBinary,
    MissingMetadata,
)
from hubwizard.models.firmware import FirmwareMetadata, FirmwarePackage

METADATA_FILE = "firmware.metadata.json"
BINARY_FILE = "firmware-base.bin"
LICENSE_FILE = "ReadMe_OSS.txt"


class CustomFirmwareValidator:
    """Parses a firmware zip archive into a FirmwarePackage.

    Used for user supplied archives and for official catalog archives, which
    share the same layout.
    """

    def __init__(self):
        self.logger = logging.getLogger("hubwizard.validator")

    def validate(self, archive: bytes) -> FirmwarePackage:
        """Open and validate a firmware archive.

        Args:
            archive: Raw zip bytes

        Returns:
            Complete FirmwarePackage

        Raises:
            InvalidArchive: If the bytes are not a zip container
            MissingMetadata: If firmware.metadata.json is absent
            MissingBinary: If firmware-base.bin is absent
            MalformedMetadata: If the metadata is not a valid JSON object
        """
        try:
            with zipfile.ZipFile(io.BytesIO(archive), "r") as zf:
                names = zf.namelist()

                if METADATA_FILE not in names:
                    raise MissingMetadata(f"{METADATA_FILE} not found in archive")
                if BINARY_FILE not in names:
                    raise MissingBinary(f"{BINARY_FILE} not found in archive")

                metadata = self._parse_metadata(zf.read(METADATA_FILE))
                binary = zf.read(BINARY_FILE)

                license_text = ""
                if LICENSE_FILE in names:
                    license_text = zf.read(LICENSE_FILE).decode("utf-8", errors="replace")
                else:
                    self.logger.debug(f"{LICENSE_FILE} not in archive, license text empty")

        except zipfile.BadZipFile as e:
            raise InvalidArchive("Not a valid zip archive", e) from e
        except (RuntimeError, NotImplementedError, zlib.error, EOFError, OSError) as e:
            # encrypted entries, unsupported compression, truncated entries
            raise InvalidArchive(f"Unreadable zip archive: {e}", e) from e

        self.logger.info(
            f"Validated firmware archive: device-id={metadata.device_id}, "
            f"version={metadata.firmware_version}, binary={len(binary)} bytes"
        )
        return FirmwarePackage(
            metadata=metadata,
            binary_payload=binary,
            license_text=license_text,
        )

    def _parse_metadata(self, raw: bytes) -> FirmwareMetadata:
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedMetadata(f"Invalid metadata JSON: {e}", e) from e

        if not isinstance(data, dict):
            raise MalformedMetadata("Metadata must be a JSON object")

        try:
            return FirmwareMetadata.model_validate(data)
        except ValidationError as e:
            raise MalformedMetadata(f"Invalid metadata fields: {e}", e) from e
