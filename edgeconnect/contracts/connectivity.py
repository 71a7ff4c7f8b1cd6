"""
Data contracts for device connectivity settings and downloadable resources.
"""

from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Sys tenant owns platform-wide admin settings
SYS_TENANT_ID = UUID("13814000-1dd2-11b2-8080-808080808080")
CONNECTIVITY_SETTINGS_KEY = "connectivity"


class DeviceConnectivityInfo(BaseModel):
    """Per-protocol connectivity settings shown to device owners."""

    # Stored settings may carry ports as JSON numbers and unset hosts as null
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    enabled: bool = Field(False, description="Whether the protocol is offered")
    host: str = Field("", description="Public host override (blank: derive from base URL)")
    port: str = Field("", description="Public port override (blank: protocol default)")

    @field_validator("host", "port", mode="before")
    @classmethod
    def _none_as_blank(cls, value: Any) -> Any:
        return "" if value is None else value


class AdminSettings(BaseModel):
    """Keyed JSON blob from the admin settings store."""

    tenant_id: UUID = Field(SYS_TENANT_ID, description="Owner of the settings")
    key: str = Field(..., description="Settings key, e.g. 'connectivity'")
    json_value: dict[str, Any] | None = Field(None, description="Settings payload")


class DownloadableResource(BaseModel):
    """In-memory file handed back for download."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    def text(self) -> str:
        return self.content.decode("utf-8")


class ConnectivityConfig(BaseModel):
    """Explicit configuration of DeviceConnectivityService."""

    model_config = ConfigDict(frozen=True)

    mqtts_pem_cert_file: str = ""
    edge_mode: bool = True

    mqtt_enabled: bool = True
    mqtt_bind_port: int = 1883
    mqtt_ssl_enabled: bool = False
    mqtt_ssl_bind_port: int = 8883

    coap_enabled: bool = True
    coap_bind_port: int = 5683
    coap_dtls_enabled: bool = False
    coap_dtls_bind_port: int = 5684

    mqtt_client_image: str = "thingsboard/mosquitto-clients"
    coap_client_image: str = "thingsboard/coap-clients"
    gateway_image: str = "thingsboard/tb-gateway"
