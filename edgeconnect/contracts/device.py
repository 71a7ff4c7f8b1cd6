"""
Data contracts for devices, device profiles and device credentials.
"""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEVICE_TELEMETRY_TOPIC = "v1/devices/me/telemetry"


class DeviceTransportType(str, Enum):
    """Transport a device profile is bound to."""

    DEFAULT = "DEFAULT"
    MQTT = "MQTT"
    COAP = "COAP"
    LWM2M = "LWM2M"
    SNMP = "SNMP"


class DeviceCredentialsType(str, Enum):
    """How a device authenticates against the transports."""

    ACCESS_TOKEN = "ACCESS_TOKEN"
    X509_CERTIFICATE = "X509_CERTIFICATE"
    MQTT_BASIC = "MQTT_BASIC"
    LWM2M_CREDENTIALS = "LWM2M_CREDENTIALS"


class Device(BaseModel):
    """A device registered on the edge."""

    id: UUID | None = Field(None, description="Device ID (absent until saved)")
    tenant_id: UUID | None = Field(None, description="Owning tenant")
    device_profile_id: UUID | None = Field(None, description="Profile driving transport settings")
    name: str = Field("", description="Device name")


class MqttTransportConfiguration(BaseModel):
    """MQTT-specific settings of a device profile."""

    model_config = ConfigDict(populate_by_name=True)

    device_telemetry_topic: str = Field(
        DEFAULT_DEVICE_TELEMETRY_TOPIC,
        alias="deviceTelemetryTopic",
        description="Topic devices publish telemetry to",
    )
    sparkplug: bool = Field(False, description="Profile speaks Sparkplug B")


class DeviceProfile(BaseModel):
    """Device profile; only the transport part matters here."""

    id: UUID | None = Field(None, description="Profile ID")
    tenant_id: UUID | None = Field(None, description="Owning tenant")
    name: str = Field("default", description="Profile name")
    transport_type: DeviceTransportType = Field(
        DeviceTransportType.DEFAULT, description="Transport the profile is bound to"
    )
    transport_configuration: MqttTransportConfiguration | None = Field(
        None, description="Transport configuration (MQTT profiles only)"
    )


class DeviceCredentials(BaseModel):
    """Credentials of a single device."""

    device_id: UUID | None = Field(None, description="Device the credentials belong to")
    credentials_type: DeviceCredentialsType = Field(
        DeviceCredentialsType.ACCESS_TOKEN, description="Credentials kind"
    )
    credentials_id: str | None = Field(
        None, description="Access token, or certificate hash for X.509"
    )
    credentials_value: str | None = Field(
        None, description="JSON for MQTT_BASIC, PEM for X.509"
    )


class BasicMqttCredentials(BaseModel):
    """Parsed credentials_value of MQTT_BASIC credentials."""

    model_config = ConfigDict(populate_by_name=True)

    client_id: str | None = Field(None, alias="clientId")
    user_name: str | None = Field(None, alias="userName")
    password: str | None = None
