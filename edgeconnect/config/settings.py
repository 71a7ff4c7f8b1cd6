"""
Configuration settings using Pydantic Settings.

Transport toggles and bind ports mirror the values the edge transports are
started with. They are loaded from environment variables (or a local .env)
and handed to the connectivity service as an explicit ConnectivityConfig.
"""

from pydantic import AliasChoices, Field
from pydantic_settings import (
    BaseSettings,
    SettingsConfigDict,
    PydanticBaseSettingsSource,
)

from edgeconnect.contracts.activity import ActivityStrategyType
from edgeconnect.contracts.connectivity import ConnectivityConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Order: init kwargs > .env (dotenv) > env vars > file secrets
    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ):
        return (
            init_settings,
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    # Device connectivity
    mqtts_pem_cert_file: str = Field(
        "",
        validation_alias=AliasChoices(
            "DEVICE_CONNECTIVITY_MQTTS_PEM_CERT_FILE", "MQTTS_PEM_CERT_FILE"
        ),
        description="PEM chain served at /api/device-connectivity/mqtts/certificate/download",
    )
    connectivity_edge_mode: bool = Field(
        True,
        alias="CONNECTIVITY_EDGE_MODE",
        description="Take MQTT/CoAP enablement and ports from transport bind settings",
    )
    admin_settings_file: str | None = Field(
        None,
        alias="ADMIN_SETTINGS_FILE",
        description="JSON file holding admin settings (e.g. the 'connectivity' key)",
    )
    device_registry_file: str | None = Field(
        None,
        alias="DEVICE_REGISTRY_FILE",
        description="JSON seed with devices, profiles and credentials",
    )

    # MQTT transport
    mqtt_enabled: bool = Field(True, alias="MQTT_ENABLED")
    mqtt_bind_port: int = Field(1883, alias="MQTT_BIND_PORT")
    mqtt_ssl_enabled: bool = Field(False, alias="MQTT_SSL_ENABLED")
    mqtt_ssl_bind_port: int = Field(8883, alias="MQTT_SSL_BIND_PORT")

    # CoAP transport
    coap_enabled: bool = Field(True, alias="COAP_ENABLED")
    coap_bind_port: int = Field(5683, alias="COAP_BIND_PORT")
    coap_dtls_enabled: bool = Field(False, alias="COAP_DTLS_ENABLED")
    coap_dtls_bind_port: int = Field(5684, alias="COAP_DTLS_BIND_PORT")

    # Docker images referenced by generated commands
    mqtt_client_image: str = Field("thingsboard/mosquitto-clients", alias="MQTT_CLIENT_IMAGE")
    coap_client_image: str = Field("thingsboard/coap-clients", alias="COAP_CLIENT_IMAGE")
    gateway_image: str = Field("thingsboard/tb-gateway", alias="GATEWAY_IMAGE")

    # Device activity reporting
    activity_strategy: ActivityStrategyType = Field(
        ActivityStrategyType.LAST, alias="ACTIVITY_STRATEGY"
    )

    # HTTP API
    api_host: str = Field("0.0.0.0", alias="API_HOST")
    api_port: int = Field(8080, alias="API_PORT")

    # Application Configuration
    app_name: str = Field("edgeconnect", alias="APP_NAME")
    app_env: str = Field("development", alias="APP_ENV")
    app_debug: bool = Field(False, alias="APP_DEBUG")
    app_log_level: str = Field("INFO", alias="APP_LOG_LEVEL")
    app_log_file: str | None = Field(None, alias="APP_LOG_FILE")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    def connectivity_config(self) -> ConnectivityConfig:
        """Build the explicit configuration consumed by DeviceConnectivityService."""
        return ConnectivityConfig(
            mqtts_pem_cert_file=self.mqtts_pem_cert_file,
            edge_mode=self.connectivity_edge_mode,
            mqtt_enabled=self.mqtt_enabled,
            mqtt_bind_port=self.mqtt_bind_port,
            mqtt_ssl_enabled=self.mqtt_ssl_enabled,
            mqtt_ssl_bind_port=self.mqtt_ssl_bind_port,
            coap_enabled=self.coap_enabled,
            coap_bind_port=self.coap_bind_port,
            coap_dtls_enabled=self.coap_dtls_enabled,
            coap_dtls_bind_port=self.coap_dtls_bind_port,
            mqtt_client_image=self.mqtt_client_image,
            coap_client_image=self.coap_client_image,
            gateway_image=self.gateway_image,
        )


# Global settings instance - loaded from environment / .env
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance.

    This function provides dependency injection support for settings.
    """
    return settings
