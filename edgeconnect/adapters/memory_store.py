"""In-memory device registry and admin settings store.

Backs the ports for a standalone edge process and for tests. The registry
can be seeded from a JSON document:

    {
      "profiles":    [{"id": "...", "transport_type": "MQTT", ...}],
      "devices":     [{"id": "...", "tenant_id": "...", "device_profile_id": "..."}],
      "credentials": [{"device_id": "...", "credentials_type": "ACCESS_TOKEN", "credentials_id": "..."}]
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any
from uuid import UUID

from edgeconnect.contracts.connectivity import AdminSettings
from edgeconnect.contracts.device import Device, DeviceCredentials, DeviceProfile
from edgeconnect.core.observability import trace_adapter
from edgeconnect.core.ports import (
    AdminSettingsPort,
    DeviceCredentialsPort,
    DevicePort,
    DeviceProfilePort,
)

logger = logging.getLogger(__name__)


class InMemoryDeviceRegistry(DevicePort, DeviceCredentialsPort, DeviceProfilePort):
    """Devices, their profiles and credentials held in dictionaries."""

    def __init__(self) -> None:
        self._devices: dict[UUID, Device] = {}
        self._profiles: dict[UUID, DeviceProfile] = {}
        self._credentials: dict[UUID, DeviceCredentials] = {}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryDeviceRegistry:
        registry = cls()
        for raw in data.get("profiles", []):
            registry.save_device_profile(DeviceProfile.model_validate(raw))
        for raw in data.get("devices", []):
            registry.save_device(Device.model_validate(raw))
        for raw in data.get("credentials", []):
            registry.save_device_credentials(DeviceCredentials.model_validate(raw))
        return registry

    @classmethod
    def from_file(cls, path: str | Path) -> InMemoryDeviceRegistry:
        registry = cls.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))
        logger.info(
            "Loaded device registry from %s: %d devices, %d profiles",
            path,
            len(registry._devices),
            len(registry._profiles),
        )
        return registry

    def save_device(self, device: Device) -> Device:
        if device.id is None:
            raise ValueError("Device must have an id to be stored")
        self._devices[device.id] = device
        return device

    def save_device_profile(self, profile: DeviceProfile) -> DeviceProfile:
        if profile.id is None:
            raise ValueError("Device profile must have an id to be stored")
        self._profiles[profile.id] = profile
        return profile

    def save_device_credentials(self, credentials: DeviceCredentials) -> DeviceCredentials:
        if credentials.device_id is None:
            raise ValueError("Device credentials must reference a device")
        self._credentials[credentials.device_id] = credentials
        return credentials

    async def find_device_by_id(self, device_id: UUID) -> Device | None:
        return self._devices.get(device_id)

    @trace_adapter
    async def find_device_credentials_by_device_id(
        self, tenant_id: UUID | None, device_id: UUID
    ) -> DeviceCredentials | None:
        return self._credentials.get(device_id)

    async def find_device_profile_by_id(
        self, tenant_id: UUID | None, profile_id: UUID | None
    ) -> DeviceProfile | None:
        if profile_id is None:
            return None
        return self._profiles.get(profile_id)


class InMemoryAdminSettingsStore(AdminSettingsPort):
    """Admin settings keyed by (tenant, key)."""

    def __init__(self, settings: list[AdminSettings] | None = None) -> None:
        self._settings: dict[tuple[UUID, str], AdminSettings] = {}
        for item in settings or []:
            self.save_admin_settings(item)

    def save_admin_settings(self, settings: AdminSettings) -> AdminSettings:
        self._settings[(settings.tenant_id, settings.key)] = settings
        return settings

    async def find_admin_settings_by_key(self, tenant_id: UUID, key: str) -> AdminSettings | None:
        return self._settings.get((tenant_id, key))
