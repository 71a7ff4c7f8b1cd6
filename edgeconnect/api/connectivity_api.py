"""Device connectivity HTTP API (aiohttp).

Endpoints:
- GET /api/device-connectivity/{deviceId}
      → publish-telemetry commands for the device
- GET /api/device-connectivity/{protocol}/certificate/download
      → server certificate chain (PEM), referenced by the generated MQTTS commands
- GET /api/device-connectivity/gateway-launch/{deviceId}/docker-compose/download
      → docker-compose.yml launching an IoT gateway as the device
- GET /health
      → Liveness probe
"""

import logging
import uuid

from aiohttp import web

from edgeconnect.contracts.connectivity import DownloadableResource
from edgeconnect.contracts.device import Device
from edgeconnect.core.observability import clear_correlation_id, set_correlation_id
from edgeconnect.core.ports import DevicePort
from edgeconnect.core.services.device_connectivity_service import (
    INCORRECT_DEVICE_ID,
    CertificateReadError,
    DeviceConnectivityService,
)
from edgeconnect.core.validation import IncorrectParameterError, validate_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Request-ID"


@web.middleware
async def correlation_middleware(request: web.Request, handler):
    correlation_id = request.headers.get(CORRELATION_HEADER) or uuid.uuid4().hex
    set_correlation_id(correlation_id)
    try:
        response = await handler(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
    finally:
        clear_correlation_id()


def request_base_url(request: web.Request) -> str:
    """Base URL the caller used to reach us, honouring reverse-proxy headers."""
    scheme = request.headers.get("X-Forwarded-Proto", request.scheme).split(",")[0].strip()
    host = request.headers.get("X-Forwarded-Host", request.host).split(",")[0].strip()
    return f"{scheme}://{host}"


def _error(status: int, message: str) -> web.Response:
    return web.json_response({"status": status, "message": message}, status=status)


def _download(resource: DownloadableResource) -> web.Response:
    return web.Response(
        body=resource.content,
        content_type=resource.content_type,
        headers={"Content-Disposition": f'attachment; filename="{resource.filename}"'},
    )


class ConnectivityAPIServer:
    """HTTP server exposing device connectivity instructions."""

    def __init__(self, service: DeviceConnectivityService, devices: DevicePort) -> None:
        """Initialize API server.

        Args:
            service: Connectivity service producing commands and files
            devices: Device lookups by id
        """
        self.service = service
        self.devices = devices
        self.app = web.Application(middlewares=[correlation_middleware])
        self._runner: web.AppRunner | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup HTTP routes."""
        self.app.router.add_get(
            "/api/device-connectivity/gateway-launch/{deviceId}/docker-compose/download",
            self.handle_gateway_docker_compose,
        )
        self.app.router.add_get(
            "/api/device-connectivity/{protocol}/certificate/download",
            self.handle_certificate_download,
        )
        self.app.router.add_get("/api/device-connectivity/{deviceId}", self.handle_publish_commands)
        self.app.router.add_get("/health", self.health_check)

    async def _resolve_device(self, raw_device_id: str) -> Device | None:
        device_id = validate_id(raw_device_id, lambda v: f"{INCORRECT_DEVICE_ID}{v}")
        return await self.devices.find_device_by_id(device_id)

    async def handle_publish_commands(self, request: web.Request) -> web.Response:
        raw_device_id = request.match_info["deviceId"]
        try:
            device = await self._resolve_device(raw_device_id)
            if device is None:
                return _error(404, f"Device with id [{raw_device_id}] is not found")
            result = await self.service.find_device_publish_telemetry_commands(
                request_base_url(request), device
            )
        except IncorrectParameterError as e:
            return _error(400, str(e))
        except LookupError as e:
            logger.warning("Connectivity lookup failed for device %s: %s", raw_device_id, e)
            return _error(404, str(e))
        return web.json_response(result)

    async def handle_certificate_download(self, request: web.Request) -> web.Response:
        protocol = request.match_info["protocol"]
        try:
            resource = await self.service.get_pem_cert_file(protocol)
        except CertificateReadError as e:
            logger.error("Certificate download failed for %s: %s", protocol, e)
            return _error(500, str(e))
        if resource is None:
            return _error(404, f"Certificate for protocol [{protocol}] is not available")
        return _download(resource)

    async def handle_gateway_docker_compose(self, request: web.Request) -> web.Response:
        raw_device_id = request.match_info["deviceId"]
        try:
            device = await self._resolve_device(raw_device_id)
            if device is None:
                return _error(404, f"Device with id [{raw_device_id}] is not found")
            resource = await self.service.create_gateway_docker_compose_file(
                request_base_url(request), device
            )
        except IncorrectParameterError as e:
            return _error(400, str(e))
        except LookupError as e:
            logger.warning("Gateway compose lookup failed for device %s: %s", raw_device_id, e)
            return _error(404, str(e))
        return _download(resource)

    async def health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        return web.json_response({"status": "healthy"})

    async def start(self, host: str = "0.0.0.0", port: int = 8080) -> None:
        """Start the HTTP server.

        Args:
            host: Host to bind to
            port: Port to bind to
        """
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, host, port)
        await site.start()
        logger.info(f"Connectivity API started on {host}:{port}")

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        logger.info("Connectivity API stopped")
