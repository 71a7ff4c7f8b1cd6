"""Unit tests for environment-driven settings."""

import pytest

from edgeconnect.config.settings import Settings
from edgeconnect.contracts.activity import ActivityStrategyType


def test_defaults_match_transport_defaults() -> None:
    settings = Settings(_env_file=None)

    config = settings.connectivity_config()

    assert config.edge_mode is True
    assert (config.mqtt_bind_port, config.mqtt_ssl_bind_port) == (1883, 8883)
    assert (config.coap_bind_port, config.coap_dtls_bind_port) == (5683, 5684)
    assert config.mqtt_enabled and config.coap_enabled
    assert not config.mqtt_ssl_enabled and not config.coap_dtls_enabled


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MQTT_SSL_ENABLED", "true")
    monkeypatch.setenv("MQTT_SSL_BIND_PORT", "9883")
    monkeypatch.setenv("CONNECTIVITY_EDGE_MODE", "false")
    monkeypatch.setenv("DEVICE_CONNECTIVITY_MQTTS_PEM_CERT_FILE", "/etc/edge/chain.pem")
    monkeypatch.setenv("ACTIVITY_STRATEGY", "FIRST_AND_LAST")

    settings = Settings(_env_file=None)
    config = settings.connectivity_config()

    assert config.mqtt_ssl_enabled is True
    assert config.mqtt_ssl_bind_port == 9883
    assert config.edge_mode is False
    assert config.mqtts_pem_cert_file == "/etc/edge/chain.pem"
    assert settings.activity_strategy is ActivityStrategyType.FIRST_AND_LAST


def test_field_names_are_accepted() -> None:
    settings = Settings(_env_file=None, mqtt_bind_port=2883, app_env="production")
    assert settings.connectivity_config().mqtt_bind_port == 2883
    assert settings.is_production


def test_config_is_immutable() -> None:
    config = Settings(_env_file=None).connectivity_config()
    with pytest.raises(ValueError):
        config.mqtt_bind_port = 1  # type: ignore[misc]
