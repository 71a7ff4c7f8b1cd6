"""Unit tests for the in-memory registry and settings store."""

import json
from uuid import UUID, uuid4

import pytest

from conftest import TENANT_ID, connectivity_settings
from edgeconnect.adapters.memory_store import InMemoryAdminSettingsStore, InMemoryDeviceRegistry
from edgeconnect.contracts.connectivity import CONNECTIVITY_SETTINGS_KEY, SYS_TENANT_ID
from edgeconnect.contracts.device import (
    Device,
    DeviceCredentials,
    DeviceCredentialsType,
    DeviceTransportType,
)


def _seed() -> dict:
    profile_id, device_id = uuid4(), uuid4()
    return {
        "profiles": [
            {
                "id": str(profile_id),
                "tenant_id": str(TENANT_ID),
                "transport_type": "MQTT",
                "transport_configuration": {"deviceTelemetryTopic": "plant/line1"},
            }
        ],
        "devices": [
            {"id": str(device_id), "tenant_id": str(TENANT_ID), "device_profile_id": str(profile_id)}
        ],
        "credentials": [
            {
                "device_id": str(device_id),
                "credentials_type": "MQTT_BASIC",
                "credentials_value": '{"clientId": "c1"}',
            }
        ],
    }


class TestInMemoryDeviceRegistry:
    @pytest.mark.asyncio
    async def test_from_file(self, tmp_path) -> None:
        seed = _seed()
        path = tmp_path / "registry.json"
        path.write_text(json.dumps(seed), encoding="utf-8")

        registry = InMemoryDeviceRegistry.from_file(path)

        device = await registry.find_device_by_id(UUID(seed["devices"][0]["id"]))
        assert device is not None
        profile = await registry.find_device_profile_by_id(TENANT_ID, device.device_profile_id)
        assert profile.transport_type == DeviceTransportType.MQTT
        assert profile.transport_configuration.device_telemetry_topic == "plant/line1"
        creds = await registry.find_device_credentials_by_device_id(TENANT_ID, device.id)
        assert creds.credentials_type == DeviceCredentialsType.MQTT_BASIC

    @pytest.mark.asyncio
    async def test_unknown_ids(self, registry) -> None:
        assert await registry.find_device_by_id(uuid4()) is None
        assert await registry.find_device_profile_by_id(TENANT_ID, None) is None
        assert await registry.find_device_credentials_by_device_id(TENANT_ID, uuid4()) is None

    def test_saving_requires_ids(self, registry) -> None:
        with pytest.raises(ValueError):
            registry.save_device(Device())
        with pytest.raises(ValueError):
            registry.save_device_credentials(DeviceCredentials())


class TestInMemoryAdminSettingsStore:
    @pytest.mark.asyncio
    async def test_lookup_is_scoped_by_tenant(self) -> None:
        store = InMemoryAdminSettingsStore([connectivity_settings()])

        found = await store.find_admin_settings_by_key(SYS_TENANT_ID, CONNECTIVITY_SETTINGS_KEY)

        assert found.json_value["mqtt"]["port"] == "1883"
        assert await store.find_admin_settings_by_key(TENANT_ID, CONNECTIVITY_SETTINGS_KEY) is None
        assert await store.find_admin_settings_by_key(SYS_TENANT_ID, "mail") is None

    @pytest.mark.asyncio
    async def test_save_replaces(self) -> None:
        store = InMemoryAdminSettingsStore([connectivity_settings()])
        store.save_admin_settings(connectivity_settings(mqtt={"enabled": False, "host": "", "port": ""}))

        found = await store.find_admin_settings_by_key(SYS_TENANT_ID, CONNECTIVITY_SETTINGS_KEY)

        assert found.json_value["mqtt"]["enabled"] is False
