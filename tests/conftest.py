"""Pytest configuration and fixtures for edgeconnect tests."""

from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from edgeconnect.adapters.memory_store import InMemoryAdminSettingsStore, InMemoryDeviceRegistry
from edgeconnect.contracts.connectivity import (
    CONNECTIVITY_SETTINGS_KEY,
    SYS_TENANT_ID,
    AdminSettings,
)
from edgeconnect.contracts.device import (
    Device,
    DeviceCredentials,
    DeviceCredentialsType,
    DeviceProfile,
    DeviceTransportType,
    MqttTransportConfiguration,
)

TENANT_ID = UUID("6f4b5a70-2f0e-11ee-9a5e-2b3c4d5e6f70")
ACCESS_TOKEN = "A1_TEST_TOKEN"


def make_certificate(common_name: str = "edge.local") -> tuple[bytes, bytes]:
    """Self-signed certificate as (PEM, DER)."""
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(UTC)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .sign(key, hashes.SHA256())
    )
    return (
        cert.public_bytes(serialization.Encoding.PEM),
        cert.public_bytes(serialization.Encoding.DER),
    )


def make_private_key_pem() -> bytes:
    key = ec.generate_private_key(ec.SECP256R1())
    return key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )


def connectivity_settings(**overrides: dict) -> AdminSettings:
    """Connectivity admin settings with every protocol enabled on default ports."""
    value = {
        "http": {"enabled": True, "host": "", "port": "8080"},
        "https": {"enabled": False, "host": "", "port": "443"},
        "mqtt": {"enabled": True, "host": "", "port": "1883"},
        "mqtts": {"enabled": False, "host": "", "port": "8883"},
        "coap": {"enabled": True, "host": "", "port": "5683"},
        "coaps": {"enabled": False, "host": "", "port": "5684"},
    }
    value.update(overrides)
    return AdminSettings(tenant_id=SYS_TENANT_ID, key=CONNECTIVITY_SETTINGS_KEY, json_value=value)


class DeviceFactory:
    """Registers a device with a profile and credentials in one call."""

    def __init__(self, registry: InMemoryDeviceRegistry) -> None:
        self.registry = registry

    def create(
        self,
        transport_type: DeviceTransportType = DeviceTransportType.DEFAULT,
        credentials_type: DeviceCredentialsType = DeviceCredentialsType.ACCESS_TOKEN,
        credentials_id: str | None = ACCESS_TOKEN,
        credentials_value: str | None = None,
        transport_configuration: MqttTransportConfiguration | None = None,
    ) -> Device:
        profile = self.registry.save_device_profile(
            DeviceProfile(
                id=uuid4(),
                tenant_id=TENANT_ID,
                transport_type=transport_type,
                transport_configuration=transport_configuration,
            )
        )
        device = self.registry.save_device(
            Device(id=uuid4(), tenant_id=TENANT_ID, device_profile_id=profile.id, name="sensor")
        )
        self.registry.save_device_credentials(
            DeviceCredentials(
                device_id=device.id,
                credentials_type=credentials_type,
                credentials_id=credentials_id,
                credentials_value=credentials_value,
            )
        )
        return device


@pytest.fixture
def registry() -> InMemoryDeviceRegistry:
    return InMemoryDeviceRegistry()


@pytest.fixture
def devices(registry: InMemoryDeviceRegistry) -> DeviceFactory:
    return DeviceFactory(registry)


@pytest.fixture
def settings_store() -> InMemoryAdminSettingsStore:
    return InMemoryAdminSettingsStore([connectivity_settings()])


@pytest.fixture
def certificate() -> tuple[bytes, bytes]:
    return make_certificate()


@pytest.fixture
def cert_file(tmp_path: Path, certificate: tuple[bytes, bytes]) -> Path:
    """Server chain with a private key in front of the certificate."""
    path = tmp_path / "server.pem"
    path.write_bytes(make_private_key_pem() + certificate[0])
    return path
