"""Unit tests for effective hub type selection."""

import pytest

from conftest import official_package, sample_metadata
from hubwizard.models.firmware import (
    FirmwareMetadata,
    FirmwarePackage,
    ResolutionResult,
)
from hubwizard.models.hub import DEFAULT_DEVICE_TYPE, DeviceType
from hubwizard.models.selector import CustomSelector, OfficialSelector
from hubwizard.models.wizard import WizardState
from hubwizard.services.device_type import (
    DeviceTypeResolver,
    device_type_from_metadata,
    hub_type_name_from_metadata,
)


def _custom_package(device_id):
    return FirmwarePackage(
        metadata=FirmwareMetadata.model_validate(sample_metadata(device_id=device_id)),
        binary_payload=b"custom",
    )


@pytest.mark.unit
class TestDeviceTypeFromMetadata:

    @pytest.mark.parametrize(
        "device_id, expected",
        [
            (0x40, DeviceType.MOVE),
            (0x41, DeviceType.CITY),
            (0x80, DeviceType.TECHNIC),
            (0x81, DeviceType.PRIME),
            (0x83, DeviceType.ESSENTIAL),
        ],
    )
    def test_known_ids(self, device_id, expected):
        metadata = FirmwareMetadata.model_validate(sample_metadata(device_id=device_id))
        assert device_type_from_metadata(metadata) == expected

    def test_unknown_id(self):
        metadata = FirmwareMetadata.model_validate(sample_metadata(device_id=0x99))
        assert device_type_from_metadata(metadata) is None

    @pytest.mark.parametrize("device_id", ["technic", "0x80", 128.5, True, [0x80]])
    def test_non_integer_id(self, device_id):
        metadata = FirmwareMetadata.model_validate(sample_metadata(device_id=device_id))
        assert device_type_from_metadata(metadata) is None

    def test_absent_id(self):
        metadata = FirmwareMetadata.model_validate(sample_metadata(device_id=None))
        assert device_type_from_metadata(metadata) is None
        assert device_type_from_metadata(None) is None

    def test_hub_type_names(self):
        technic = FirmwareMetadata.model_validate(sample_metadata(device_id=0x80))
        unknown = FirmwareMetadata.model_validate(sample_metadata(device_id=0x12))

        assert hub_type_name_from_metadata(technic) == "Technic Hub"
        assert hub_type_name_from_metadata(unknown) == "?"
        assert hub_type_name_from_metadata(None) == "?"


@pytest.mark.unit
class TestDeviceTypeResolver:

    @pytest.fixture
    def resolver(self):
        return DeviceTypeResolver()

    @pytest.mark.parametrize("device_type", list(DeviceType))
    def test_official_selection(self, resolver, device_type):
        state = WizardState(
            hub_selector=OfficialSelector(device_type=device_type),
            official_device_type=device_type,
            official_resolution=ResolutionResult.ready(official_package(device_type)),
        )
        assert resolver.resolve(state) == device_type

    def test_custom_recognized_id_wins(self, resolver):
        state = WizardState(
            hub_selector=CustomSelector(archive=b"zip"),
            official_device_type=DeviceType.TECHNIC,
            custom_resolution=ResolutionResult.ready(_custom_package(0x41)),
        )
        assert resolver.resolve(state) == DeviceType.CITY

    def test_custom_unknown_id_falls_back_to_default(self, resolver):
        state = WizardState(
            hub_selector=CustomSelector(archive=b"zip"),
            custom_resolution=ResolutionResult.ready(_custom_package(0x99)),
        )
        assert resolver.resolve(state) == DEFAULT_DEVICE_TYPE

    def test_custom_unknown_id_falls_back_to_official_selection(self, resolver):
        state = WizardState(
            hub_selector=CustomSelector(archive=b"zip"),
            official_device_type=DeviceType.MOVE,
            custom_resolution=ResolutionResult.ready(_custom_package(None)),
        )
        assert resolver.resolve(state) == DeviceType.MOVE

    def test_custom_not_ready_uses_official_selection(self, resolver):
        state = WizardState(
            hub_selector=CustomSelector(archive=b"zip"),
            official_device_type=DeviceType.ESSENTIAL,
            custom_resolution=ResolutionResult.loading(),
        )
        assert resolver.resolve(state) == DeviceType.ESSENTIAL

    def test_inactive_custom_track_ignored(self, resolver):
        state = WizardState(
            hub_selector=OfficialSelector(device_type=DeviceType.TECHNIC),
            official_device_type=DeviceType.TECHNIC,
            custom_resolution=ResolutionResult.ready(_custom_package(0x41)),
        )
        assert resolver.resolve(state) == DeviceType.TECHNIC
