"""
Main entry point for the edgeconnect device connectivity API.
"""

import asyncio
import logging
import os
import sys

from edgeconnect.config.settings import get_settings
from edgeconnect.core.observability import configure_stdlib_json_logging


def setup_logging() -> None:
    """Set up structured logging for stdout and, optionally, a file."""
    settings = get_settings()

    file_target = settings.app_log_file
    if file_target:
        log_dir = os.path.dirname(file_target)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    configure_stdlib_json_logging(level=settings.app_log_level, file_target=file_target)

    if not settings.app_debug:
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def health_check() -> None:
    """Validate configuration before serving requests."""
    logger = logging.getLogger(__name__)
    settings = get_settings()

    logger.info("Performing health checks...")

    cert_file = settings.mqtts_pem_cert_file.strip()
    if settings.mqtt_ssl_enabled and cert_file and not os.path.isfile(cert_file):
        logger.warning(
            "MQTTS is enabled but the certificate file %s does not exist; "
            "certificate downloads will return 404.",
            cert_file,
        )

    for name in ("admin_settings_file", "device_registry_file"):
        path = getattr(settings, name)
        if path and not os.path.isfile(path):
            logger.error("%s=%s does not exist", name.upper(), path)
            sys.exit(1)

    if settings.is_production and not settings.admin_settings_file:
        logger.error("Production requires ADMIN_SETTINGS_FILE with the 'connectivity' settings.")
        sys.exit(1)

    logger.info("Health checks passed")


async def main() -> None:
    """Main async entry point."""
    logger = logging.getLogger(__name__)
    setup_logging()
    health_check()

    settings = get_settings()
    logger.info("Starting %s...", settings.app_name)

    from edgeconnect.adapters.json_settings_adapter import JsonFileAdminSettingsAdapter
    from edgeconnect.adapters.memory_store import (
        InMemoryAdminSettingsStore,
        InMemoryDeviceRegistry,
    )
    from edgeconnect.api.connectivity_api import ConnectivityAPIServer
    from edgeconnect.core.services.device_connectivity_service import DeviceConnectivityService

    registry = (
        InMemoryDeviceRegistry.from_file(settings.device_registry_file)
        if settings.device_registry_file
        else InMemoryDeviceRegistry()
    )
    settings_store = (
        JsonFileAdminSettingsAdapter(settings.admin_settings_file)
        if settings.admin_settings_file
        else InMemoryAdminSettingsStore()
    )

    service = DeviceConnectivityService(
        credentials_store=registry,
        profile_store=registry,
        settings_store=settings_store,
        config=settings.connectivity_config(),
    )
    server = ConnectivityAPIServer(service=service, devices=registry)
    await server.start(host=settings.api_host, port=settings.api_port)

    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
