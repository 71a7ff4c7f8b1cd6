"""
Pydantic data contracts shared by services, adapters and the HTTP API.
"""

from edgeconnect.contracts.activity import ActivityStrategy, ActivityStrategyType
from edgeconnect.contracts.connectivity import (
    CONNECTIVITY_SETTINGS_KEY,
    SYS_TENANT_ID,
    AdminSettings,
    ConnectivityConfig,
    DeviceConnectivityInfo,
    DownloadableResource,
)
from edgeconnect.contracts.device import (
    DEFAULT_DEVICE_TELEMETRY_TOPIC,
    BasicMqttCredentials,
    Device,
    DeviceCredentials,
    DeviceCredentialsType,
    DeviceProfile,
    DeviceTransportType,
    MqttTransportConfiguration,
)

__all__ = [
    "ActivityStrategy",
    "ActivityStrategyType",
    "AdminSettings",
    "BasicMqttCredentials",
    "CONNECTIVITY_SETTINGS_KEY",
    "ConnectivityConfig",
    "DEFAULT_DEVICE_TELEMETRY_TOPIC",
    "Device",
    "DeviceConnectivityInfo",
    "DeviceCredentials",
    "DeviceCredentialsType",
    "DeviceProfile",
    "DeviceTransportType",
    "DownloadableResource",
    "MqttTransportConfiguration",
    "SYS_TENANT_ID",
]
