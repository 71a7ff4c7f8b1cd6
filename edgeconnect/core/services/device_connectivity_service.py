"""Device connectivity service.

Builds the "how do I connect this device" material shown to device owners:

- publish-telemetry commands for HTTP(S), MQTT(S) and CoAP(S), plain and
  wrapped in `docker run`, for the transports the device's profile allows
- a docker-compose file launching an IoT gateway authenticated as the device
- the MQTTS server certificate chain as a PEM download

Which protocols are offered, and on which host/port, comes from the admin
settings stored under the "connectivity" key. In edge mode the MQTT and CoAP
toggles and ports come from the transports' own bind configuration instead,
and the HTTP port from the base URL the request came in on.
"""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path
from typing import Any
from uuid import UUID

from pydantic import ValidationError

from edgeconnect.contracts.connectivity import (
    CONNECTIVITY_SETTINGS_KEY,
    SYS_TENANT_ID,
    ConnectivityConfig,
    DeviceConnectivityInfo,
    DownloadableResource,
)
from edgeconnect.contracts.device import (
    DEFAULT_DEVICE_TELEMETRY_TOPIC,
    Device,
    DeviceCredentials,
    DeviceCredentialsType,
    DeviceProfile,
    DeviceTransportType,
    MqttTransportConfiguration,
)
from edgeconnect.core.observability import trace_service
from edgeconnect.core.ports import AdminSettingsPort, DeviceCredentialsPort, DeviceProfilePort
from edgeconnect.core.services import connectivity_commands as commands
from edgeconnect.core.services.connectivity_commands import (
    CHECK_DOCUMENTATION,
    COAP,
    COAPS,
    DOCKER,
    HTTP,
    HTTPS,
    MQTT,
    MQTTS,
    PEM_CERT_FILE_NAME,
)
from edgeconnect.core.utils.memo_cache import MemoizingCache
from edgeconnect.core.utils.pem import format_pem_certificates
from edgeconnect.core.validation import validate_id

logger = logging.getLogger(__name__)

INCORRECT_TENANT_ID = "Incorrect tenantId "
INCORRECT_DEVICE_ID = "Incorrect deviceId "
HTTP_DEFAULT_PORT = "80"
HTTPS_DEFAULT_PORT = "443"
DEFAULT_BASE_URL_PORT = "8080"

# Edge deployments published behind a port-shifted proxy (18080 -> 8080)
# expose the device transports shifted the same way.
SHIFTED_BASE_URL_PORT = "18080"
SHIFTED_TRANSPORT_PORTS = {"1883": "11883", "5683": "15683"}

_BASE_URL_PORT_RE = re.compile(r"https?://[^:/]+:(\d+)")

Commands = dict[str, Any]


class CertificateReadError(RuntimeError):
    """Raised when the configured server certificate cannot be read or parsed."""


class DeviceProfileNotFoundError(LookupError):
    """Raised when a device points at a profile that does not exist."""


class DeviceCredentialsNotFoundError(LookupError):
    """Raised when no credentials are stored for a device."""


def get_port_from_base_url(base_url: str) -> str:
    """Explicit port of an http(s) base URL, or "8080" when there is none."""
    match = _BASE_URL_PORT_RE.search(base_url)
    if match:
        return match.group(1)
    return DEFAULT_BASE_URL_PORT


def _shift_port(port: str, base_url: str) -> str:
    if port in SHIFTED_TRANSPORT_PORTS and get_port_from_base_url(base_url) == SHIFTED_BASE_URL_PORT:
        return SHIFTED_TRANSPORT_PORTS[port]
    return port


class DeviceConnectivityService:
    """Generates connectivity instructions for devices.

    Thread Safety: the certificate cache is lock-protected; everything else
    is computed per call from the stores.
    """

    def __init__(
        self,
        credentials_store: DeviceCredentialsPort,
        profile_store: DeviceProfilePort,
        settings_store: AdminSettingsPort,
        config: ConnectivityConfig | None = None,
    ) -> None:
        """Initialize service with required dependencies.

        Args:
            credentials_store: Device credentials lookups
            profile_store: Device profile lookups
            settings_store: Admin settings holding the "connectivity" blob
            config: Transport toggles, bind ports and certificate location
        """
        self.credentials_store = credentials_store
        self.profile_store = profile_store
        self.settings_store = settings_store
        self.config = config or ConnectivityConfig()
        self._certs: MemoizingCache[str, DownloadableResource] = MemoizingCache()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @trace_service
    async def find_device_publish_telemetry_commands(self, base_url: str, device: Device) -> Commands:
        """Build the publish-command document for a device.

        Returns:
            Mapping of protocol family ("http", "mqtt", "coap", or the
            transport type name) to its commands. A family only appears when
            at least one of its protocols produced a command.

        Raises:
            IncorrectParameterError: If the device or tenant id is invalid
            DeviceProfileNotFoundError: If the device profile does not exist
        """
        device_id = validate_id(device.id, lambda v: f"{INCORRECT_DEVICE_ID}{v}")
        tenant_id = validate_id(device.tenant_id, lambda v: f"{INCORRECT_TENANT_ID}{v}")
        logger.debug("Executing find_device_publish_telemetry_commands [%s]", device_id)

        creds = await self._find_credentials(tenant_id, device_id)
        profile = await self._find_profile(tenant_id, device)
        settings = await self._load_connectivity_settings()
        transport_type = profile.transport_type

        result: Commands = {}
        if transport_type == DeviceTransportType.DEFAULT:
            self._put_if_present(result, HTTP, self._http_commands(base_url, creds, settings))
            self._put_if_present(
                result,
                MQTT,
                self._mqtt_commands(base_url, DEFAULT_DEVICE_TELEMETRY_TOPIC, creds, settings),
            )
            self._put_if_present(result, COAP, self._coap_commands(base_url, creds, settings))

        elif transport_type == DeviceTransportType.MQTT:
            transport = profile.transport_configuration or MqttTransportConfiguration()
            # TODO: emulator command for Sparkplug once the client image ships sparkplug support
            if transport.sparkplug:
                result[MQTT] = {"sparkplug": CHECK_DOCUMENTATION}
            else:
                self._put_if_present(
                    result,
                    MQTT,
                    self._mqtt_commands(base_url, transport.device_telemetry_topic, creds, settings),
                )

        elif transport_type == DeviceTransportType.COAP:
            self._put_if_present(result, COAP, self._coap_commands(base_url, creds, settings))

        else:
            result[transport_type.value] = CHECK_DOCUMENTATION

        return result

    @trace_service
    async def get_pem_cert_file(self, protocol: str) -> DownloadableResource | None:
        """Server certificate chain devices need to trust for protocol.

        Only MQTTS has a downloadable certificate. Loaded certificates are
        cached for the process lifetime; absent results are not.

        Raises:
            CertificateReadError: If the configured file cannot be read or parsed
        """
        cached = self._certs.get(protocol)
        if cached is not None:
            return cached

        connectivity = await self._get_connectivity(protocol)
        return await asyncio.to_thread(
            self._certs.get_or_compute, protocol, lambda key: self._load_pem_cert(key, connectivity)
        )

    @trace_service
    async def create_gateway_docker_compose_file(
        self, base_url: str, device: Device
    ) -> DownloadableResource:
        """docker-compose.yml starting an IoT gateway that connects as device.

        Raises:
            IncorrectParameterError: If the device or tenant id is invalid
        """
        device_id = validate_id(device.id, lambda v: f"{INCORRECT_DEVICE_ID}{v}")
        tenant_id = validate_id(device.tenant_id, lambda v: f"{INCORRECT_TENANT_ID}{v}")

        mqtt_type = MQTTS if await self.is_enabled(MQTTS) else MQTT
        info = await self._get_connectivity(mqtt_type)
        creds = await self._find_credentials(tenant_id, device_id)
        default_port = str(
            self.config.mqtt_ssl_bind_port if mqtt_type == MQTTS else self.config.mqtt_bind_port
        )

        compose = commands.get_gateway_docker_compose(
            base_url,
            info,
            creds,
            mqtt_type,
            default_port=default_port,
            image=self.config.gateway_image,
        )
        return DownloadableResource(
            filename="docker-compose.yml",
            content=compose.encode("utf-8"),
            content_type="application/x-yaml",
        )

    async def is_enabled(self, protocol: str) -> bool:
        info = await self._get_connectivity(protocol)
        return info is not None and info.enabled

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _find_credentials(self, tenant_id: UUID, device_id: UUID) -> DeviceCredentials:
        creds = await self.credentials_store.find_device_credentials_by_device_id(tenant_id, device_id)
        if creds is None:
            raise DeviceCredentialsNotFoundError(f"Device credentials not found for device [{device_id}]")
        return creds

    async def _find_profile(self, tenant_id: UUID, device: Device) -> DeviceProfile:
        profile = await self.profile_store.find_device_profile_by_id(
            tenant_id, device.device_profile_id
        )
        if profile is None:
            raise DeviceProfileNotFoundError(
                f"Device profile [{device.device_profile_id}] not found for device [{device.id}]"
            )
        return profile

    async def _load_connectivity_settings(self) -> dict[str, Any] | None:
        admin_settings = await self.settings_store.find_admin_settings_by_key(
            SYS_TENANT_ID, CONNECTIVITY_SETTINGS_KEY
        )
        if admin_settings is None:
            return None
        return admin_settings.json_value

    @staticmethod
    def _parse_connectivity(settings: dict[str, Any] | None, protocol: str) -> DeviceConnectivityInfo | None:
        if not settings:
            return None
        raw = settings.get(protocol)
        if raw is None:
            return None
        try:
            return DeviceConnectivityInfo.model_validate(raw)
        except ValidationError as e:
            logger.warning("Malformed connectivity settings for %s: %s", protocol, e)
            return None

    async def _get_connectivity(self, protocol: str) -> DeviceConnectivityInfo | None:
        return self._parse_connectivity(await self._load_connectivity_settings(), protocol)

    # ------------------------------------------------------------------
    # Certificates
    # ------------------------------------------------------------------

    def _load_pem_cert(
        self, protocol: str, connectivity: DeviceConnectivityInfo | None
    ) -> DownloadableResource | None:
        if protocol != MQTTS or connectivity is None:
            logger.warning("Unknown connectivity protocol: %s", protocol)
            return None

        cert_file = self.config.mqtts_pem_cert_file.strip()
        if not cert_file or not Path(cert_file).is_file():
            return None

        try:
            content = format_pem_certificates(Path(cert_file).read_bytes())
        except (OSError, ValueError) as e:
            msg = f"Failed to read {protocol} server certificate!"
            logger.warning(msg)
            raise CertificateReadError(msg) from e

        return DownloadableResource(
            filename=PEM_CERT_FILE_NAME,
            content=content.encode("utf-8"),
            content_type="application/x-pem-file",
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _http_commands(
        self, base_url: str, creds: DeviceCredentials, settings: dict[str, Any] | None
    ) -> Commands | None:
        http_commands: Commands = {}
        for protocol in (HTTP, HTTPS):
            command = self._http_publish_command(protocol, base_url, creds, settings)
            if command is not None:
                http_commands[protocol] = command
        return http_commands or None

    def _http_publish_command(
        self,
        protocol: str,
        base_url: str,
        creds: DeviceCredentials,
        settings: dict[str, Any] | None,
    ) -> str | None:
        info = self._parse_connectivity(settings, protocol)
        if (
            info is None
            or not info.enabled
            or creds.credentials_type != DeviceCredentialsType.ACCESS_TOKEN
        ):
            return None

        host = commands.get_host(base_url, info, protocol)
        if self.config.edge_mode:
            port = f":{get_port_from_base_url(base_url)}"
        else:
            settings_port = commands.get_port(info)
            port = (
                ""
                if settings_port in ("", HTTP_DEFAULT_PORT, HTTPS_DEFAULT_PORT)
                else f":{settings_port}"
            )
        return commands.get_http_publish_command(protocol, host, port, creds)

    # ------------------------------------------------------------------
    # MQTT
    # ------------------------------------------------------------------

    def _mqtt_protocol_enabled(self, protocol: str, settings: dict[str, Any] | None) -> bool:
        if self.config.edge_mode:
            return self.config.mqtt_ssl_enabled if protocol == MQTTS else self.config.mqtt_enabled
        info = self._parse_connectivity(settings, protocol)
        return info is not None and info.enabled

    def _mqtt_port(self, protocol: str, base_url: str, info: DeviceConnectivityInfo | None) -> str:
        if not self.config.edge_mode:
            return commands.get_port(info)
        if protocol == MQTTS:
            return str(self.config.mqtt_ssl_bind_port)
        return _shift_port(str(self.config.mqtt_bind_port), base_url)

    def _mqtt_commands(
        self,
        base_url: str,
        topic: str,
        creds: DeviceCredentials,
        settings: dict[str, Any] | None,
    ) -> Commands | None:
        mqtt_commands: Commands = {}

        if creds.credentials_type == DeviceCredentialsType.X509_CERTIFICATE:
            mqtt_commands[MQTTS] = CHECK_DOCUMENTATION
            return mqtt_commands

        docker_commands: Commands = {}

        if self._mqtt_protocol_enabled(MQTT, settings):
            info = self._parse_connectivity(settings, MQTT)
            host = commands.get_host(base_url, info, MQTT)
            port = self._mqtt_port(MQTT, base_url, info)
            self._put_if_present(
                mqtt_commands,
                MQTT,
                commands.get_mqtt_publish_command(MQTT, host, port, topic, creds),
            )
            self._put_if_present(
                docker_commands,
                MQTT,
                commands.get_docker_mqtt_publish_command(
                    MQTT, base_url, host, port, topic, creds, image=self.config.mqtt_client_image
                ),
            )

        if self._mqtt_protocol_enabled(MQTTS, settings):
            info = self._parse_connectivity(settings, MQTTS)
            host = commands.get_host(base_url, info, MQTTS)
            port = self._mqtt_port(MQTTS, base_url, info)
            publish = commands.get_mqtt_publish_command(MQTTS, host, port, topic, creds)
            if publish is not None:
                mqtt_commands[MQTTS] = [
                    commands.get_curl_pem_cert_command(base_url, MQTTS),
                    publish,
                ]
            self._put_if_present(
                docker_commands,
                MQTTS,
                commands.get_docker_mqtt_publish_command(
                    MQTTS, base_url, host, port, topic, creds, image=self.config.mqtt_client_image
                ),
            )

        if docker_commands:
            mqtt_commands[DOCKER] = docker_commands
        return mqtt_commands or None

    # ------------------------------------------------------------------
    # CoAP
    # ------------------------------------------------------------------

    def _coap_protocol_enabled(self, protocol: str, settings: dict[str, Any] | None) -> bool:
        if self.config.edge_mode:
            return self.config.coap_dtls_enabled if protocol == COAPS else self.config.coap_enabled
        info = self._parse_connectivity(settings, protocol)
        return info is not None and info.enabled

    def _coap_port(self, protocol: str, base_url: str, info: DeviceConnectivityInfo | None) -> str:
        """Port suffix including ':' (empty when the protocol default applies)."""
        if not self.config.edge_mode:
            port = commands.get_port(info)
            return f":{port}" if port else ""
        if protocol == COAPS:
            port = str(self.config.coap_dtls_bind_port)
        else:
            port = str(self.config.coap_bind_port)
        return f":{_shift_port(port, base_url)}"

    def _coap_commands(
        self, base_url: str, creds: DeviceCredentials, settings: dict[str, Any] | None
    ) -> Commands | None:
        coap_commands: Commands = {}

        if creds.credentials_type == DeviceCredentialsType.X509_CERTIFICATE:
            coap_commands[COAPS] = CHECK_DOCUMENTATION
            return coap_commands

        docker_commands: Commands = {}
        for protocol in (COAP, COAPS):
            if not self._coap_protocol_enabled(protocol, settings):
                continue
            info = self._parse_connectivity(settings, protocol)
            host = commands.get_host(base_url, info, protocol)
            port = self._coap_port(protocol, base_url, info)
            self._put_if_present(
                coap_commands,
                protocol,
                commands.get_coap_publish_command(protocol, host, port, creds),
            )
            self._put_if_present(
                docker_commands,
                protocol,
                commands.get_docker_coap_publish_command(
                    protocol, host, port, creds, image=self.config.coap_client_image
                ),
            )

        if docker_commands:
            coap_commands[DOCKER] = docker_commands
        return coap_commands or None

    @staticmethod
    def _put_if_present(target: Commands, key: str, value: Any) -> None:
        if value is not None:
            target[key] = value
