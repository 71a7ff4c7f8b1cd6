"""Publish-command templates for device connectivity instructions.

Pure functions turning a host, a port and device credentials into the shell
commands a device owner can paste to send a first telemetry message, plus the
docker-compose file that launches an IoT gateway against this edge.

A function returns None when the credentials cannot be expressed for that
protocol (e.g. X.509 over HTTP); callers drop such entries.
"""

from __future__ import annotations

import ipaddress
import logging
from urllib.parse import urlsplit

from pydantic import ValidationError

from edgeconnect.contracts.connectivity import DeviceConnectivityInfo
from edgeconnect.contracts.device import (
    BasicMqttCredentials,
    DeviceCredentials,
    DeviceCredentialsType,
)

logger = logging.getLogger(__name__)

HTTP = "http"
HTTPS = "https"
MQTT = "mqtt"
MQTTS = "mqtts"
COAP = "coap"
COAPS = "coaps"
DOCKER = "docker"

CHECK_DOCUMENTATION = "Check documentation"
PEM_CERT_FILE_NAME = "tb-server-chain.pem"
JSON_EXAMPLE_PAYLOAD = '"{temperature:25}"'

DOCKER_RUN = "docker run --rm -it "
DOCKER_HOST_NETWORK = "--network=host "
MQTT_IMAGE = "thingsboard/mosquitto-clients"
COAP_IMAGE = "thingsboard/coap-clients"
GATEWAY_IMAGE = "thingsboard/tb-gateway"
DOCKER_HOST_ALIAS = "host.docker.internal"

GATEWAY_CONFIG_DIR = "/thingsboard_gateway/config"


def get_http_publish_command(
    protocol: str, host: str, port: str, credentials: DeviceCredentials
) -> str:
    """curl command posting a sample payload; port includes its ':' prefix or is empty."""
    return (
        f"curl -v -X POST {protocol}://{host}{port}/api/v1/{credentials.credentials_id}/telemetry"
        f" --header Content-Type:application/json --data {JSON_EXAMPLE_PAYLOAD}"
    )


def _parse_basic_credentials(credentials: DeviceCredentials) -> BasicMqttCredentials | None:
    if not credentials.credentials_value:
        return None
    try:
        return BasicMqttCredentials.model_validate_json(credentials.credentials_value)
    except ValidationError:
        logger.warning("Unparseable MQTT_BASIC credentials for device %s", credentials.device_id)
        return None


def _mqtt_auth_args(credentials: DeviceCredentials) -> list[str] | None:
    if credentials.credentials_type == DeviceCredentialsType.ACCESS_TOKEN:
        return ["-u", str(credentials.credentials_id)]

    if credentials.credentials_type == DeviceCredentialsType.MQTT_BASIC:
        basic = _parse_basic_credentials(credentials)
        if basic is None:
            return None
        args: list[str] = []
        if basic.client_id is not None:
            args += ["-i", basic.client_id]
        if basic.user_name is not None:
            args += ["-u", basic.user_name]
        if basic.password is not None:
            args += ["-P", basic.password]
        return args

    return None


def get_mqtt_publish_command(
    protocol: str,
    host: str,
    port: str | None,
    topic: str,
    credentials: DeviceCredentials,
) -> str | None:
    """mosquitto_pub command; MQTTS adds the downloaded server chain as CA file."""
    auth = _mqtt_auth_args(credentials)
    if auth is None:
        return None

    parts = ["mosquitto_pub -d -q 1"]
    if protocol == MQTTS:
        parts += ["--cafile", PEM_CERT_FILE_NAME]
    parts += ["-h", host]
    if port:
        parts += ["-p", port]
    parts += ["-t", topic]
    parts += auth
    parts += ["-m", JSON_EXAMPLE_PAYLOAD]
    return " ".join(parts)


def get_docker_mqtt_publish_command(
    protocol: str,
    base_url: str,
    host: str,
    port: str | None,
    topic: str,
    credentials: DeviceCredentials,
    image: str = MQTT_IMAGE,
) -> str | None:
    mqtt_command = get_mqtt_publish_command(protocol, host, port, topic, credentials)
    if mqtt_command is None:
        return None

    prefix = f"{DOCKER_RUN}{DOCKER_HOST_NETWORK if is_localhost(host) else ''}{image} "
    if protocol == MQTTS:
        # Both steps run in one container so the certificate is on disk for mosquitto_pub
        inner = mqtt_command.replace('"', '\\"')
        return f'{prefix}/bin/sh -c "{get_curl_pem_cert_command(base_url, protocol)} && {inner}"'
    return prefix + mqtt_command


def get_curl_pem_cert_command(base_url: str, protocol: str) -> str:
    return (
        f"curl -f -S -o {PEM_CERT_FILE_NAME} "
        f"{get_url(base_url)}/api/device-connectivity/{protocol}/certificate/download"
    )


def get_coap_publish_command(
    protocol: str, host: str, port: str, credentials: DeviceCredentials
) -> str | None:
    """coap-client command; only access-token credentials fit in the URI."""
    if credentials.credentials_type != DeviceCredentialsType.ACCESS_TOKEN:
        return None
    client = "coap-client-openssl" if protocol == COAPS else "coap-client"
    return (
        f"{client} -v 6 -m POST {protocol}://{host}{port}/api/v1/{credentials.credentials_id}/telemetry"
        f" -t json -e {JSON_EXAMPLE_PAYLOAD}"
    )


def get_docker_coap_publish_command(
    protocol: str,
    host: str,
    port: str,
    credentials: DeviceCredentials,
    image: str = COAP_IMAGE,
) -> str | None:
    coap_command = get_coap_publish_command(protocol, host, port, credentials)
    if coap_command is None:
        return None
    return f"{DOCKER_RUN}{DOCKER_HOST_NETWORK if is_localhost(host) else ''}{image} {coap_command}"


def _parse_hostname(value: str) -> str | None:
    try:
        parts = urlsplit(value if "://" in value else f"//{value}")
        return parts.hostname
    except ValueError:
        return None


def _as_ipv6(host: str) -> ipaddress.IPv6Address | None:
    try:
        address = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return None
    return address if isinstance(address, ipaddress.IPv6Address) else None


def get_host(base_url: str, info: DeviceConnectivityInfo | None, protocol: str) -> str:
    """Host devices should connect to.

    The host configured for the protocol wins over the base URL. IPv6
    literals are bracketed for URL-style commands (HTTP, CoAP) and left bare
    for mosquitto_pub's -h flag.
    """
    initial_host = info.host.strip() if info is not None and info.host.strip() else base_url
    host = _parse_hostname(initial_host) or initial_host
    host = host.removeprefix("https://").removeprefix("http://")

    ipv6 = _as_ipv6(host)
    if ipv6 is None:
        return host
    if protocol in (MQTT, MQTTS):
        return str(ipv6)
    return f"[{ipv6}]"


def get_port(info: DeviceConnectivityInfo | None) -> str:
    if info is None or not info.port.strip():
        return ""
    return info.port.strip()


def is_localhost(host: str) -> bool:
    """True for 'localhost' and loopback literals; no DNS lookups are made."""
    if host.lower() == "localhost":
        return True
    try:
        return ipaddress.ip_address(host.strip("[]")).is_loopback
    except ValueError:
        return False


def get_url(base_url: str) -> str:
    """scheme://host[:port] of base_url, dropping any path and credentials."""
    parts = urlsplit(base_url)
    return f"{parts.scheme}://{parts.netloc.rpartition('@')[2]}"


def _gateway_credentials_env(credentials: DeviceCredentials, mqtt_type: str) -> list[str]:
    env: list[str] = []
    credentials_type = credentials.credentials_type

    if credentials_type == DeviceCredentialsType.ACCESS_TOKEN:
        env.append(f"accessToken={credentials.credentials_id}")
    elif credentials_type == DeviceCredentialsType.MQTT_BASIC:
        basic = _parse_basic_credentials(credentials)
        if basic is not None:
            if basic.client_id is not None:
                env.append(f"clientId={basic.client_id}")
            if basic.user_name is not None:
                env.append(f"username={basic.user_name}")
            if basic.password is not None:
                env.append(f"password={basic.password}")
    elif credentials_type == DeviceCredentialsType.X509_CERTIFICATE:
        env.append(f"caCert={GATEWAY_CONFIG_DIR}/ca.pem")
        env.append(f"privateKey={GATEWAY_CONFIG_DIR}/key.pem")
        env.append(f"cert={GATEWAY_CONFIG_DIR}/cert.pem")
        return env

    if mqtt_type == MQTTS:
        env.append(f"caCert={GATEWAY_CONFIG_DIR}/{PEM_CERT_FILE_NAME}")
    return env


def get_gateway_docker_compose(
    base_url: str,
    info: DeviceConnectivityInfo | None,
    credentials: DeviceCredentials,
    mqtt_type: str,
    default_port: str = "",
    image: str = GATEWAY_IMAGE,
) -> str:
    """docker-compose.yml launching the IoT gateway connected to this edge."""
    host = get_host(base_url, info, mqtt_type)
    port = get_port(info) or default_port

    lines = [
        "version: '3.4'",
        "services:",
        "  # IoT Gateway Service Configuration",
        "  tb-gateway:",
        f"    image: {image}",
        "    container_name: tb-gateway",
        "    restart: always",
        "",
        "    # Ports bindings - required by some connectors",
        "    ports:",
        "        - \"5000:5000\" # Comment if you don't use REST connector and change if you use another port",
        "        # Uncomment and modify the following ports based on connector usage:",
        "#        - \"1052:1052\" # BACnet connector",
        "#        - \"5026:5026\" # Modbus TCP connector (Modbus Slave)",
        "#        - \"50000:50000/tcp\" # Socket connector with type TCP",
        "#        - \"50000:50000/udp\" # Socket connector with type UDP",
        "",
        "    # Necessary mapping for Linux",
        "    extra_hosts:",
        f"      - \"{DOCKER_HOST_ALIAS}:host-gateway\"",
        "",
        "    # Environment variables",
        "    environment:",
        f"      - host={DOCKER_HOST_ALIAS if is_localhost(host) else host}",
        f"      - port={port}",
    ]
    lines += [f"      - {entry}" for entry in _gateway_credentials_env(credentials, mqtt_type)]
    lines += [
        "",
        "    # Volumes bind",
        "    volumes:",
        f"      - tb-gw-config:{GATEWAY_CONFIG_DIR}",
        "      - tb-gw-logs:/thingsboard_gateway/logs",
        "      - tb-gw-extensions:/thingsboard_gateway/extensions",
        "",
        "# Volumes declaration for configurations, extensions and configuration",
        "volumes:",
        "  tb-gw-config:",
        "    name: tb-gw-config",
        "  tb-gw-logs:",
        "    name: tb-gw-logs",
        "  tb-gw-extensions:",
        "    name: tb-gw-extensions",
    ]
    return "\n".join(lines) + "\n"
