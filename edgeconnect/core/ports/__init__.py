"""Port interfaces for hexagonal architecture.

The connectivity service reads devices' credentials, their profiles and the
platform admin settings through these ports; adapters provide the storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from edgeconnect.contracts.connectivity import AdminSettings
    from edgeconnect.contracts.device import Device, DeviceCredentials, DeviceProfile

__all__ = [
    "AdminSettingsPort",
    "DevicePort",
    "DeviceCredentialsPort",
    "DeviceProfilePort",
]


class DevicePort(ABC):
    """Port for device lookups."""

    @abstractmethod
    async def find_device_by_id(self, device_id: UUID) -> Device | None:
        """Get a device, or None if it does not exist."""
        pass


class DeviceCredentialsPort(ABC):
    """Port for device credentials lookups."""

    @abstractmethod
    async def find_device_credentials_by_device_id(
        self, tenant_id: UUID | None, device_id: UUID
    ) -> DeviceCredentials | None:
        """Get the credentials issued to a device."""
        pass


class DeviceProfilePort(ABC):
    """Port for device profile lookups."""

    @abstractmethod
    async def find_device_profile_by_id(
        self, tenant_id: UUID | None, profile_id: UUID | None
    ) -> DeviceProfile | None:
        """Get a device profile by ID."""
        pass


class AdminSettingsPort(ABC):
    """Port for platform-wide admin settings."""

    @abstractmethod
    async def find_admin_settings_by_key(self, tenant_id: UUID, key: str) -> AdminSettings | None:
        """Get the settings stored under key, or None if absent."""
        pass
