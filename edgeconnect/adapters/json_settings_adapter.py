"""Admin settings read from a JSON file.

The file maps settings keys to their JSON values, e.g.

    {"connectivity": {"http": {"enabled": true, "host": "", "port": "8080"}, ...}}

The file is re-read when its modification time changes, so operators can edit
connectivity settings without restarting the process.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any
from uuid import UUID

from edgeconnect.contracts.connectivity import SYS_TENANT_ID, AdminSettings
from edgeconnect.core.ports import AdminSettingsPort

logger = logging.getLogger(__name__)


class AdminSettingsFileError(Exception):
    """Raised when the settings file exists but is not a JSON object."""


class JsonFileAdminSettingsAdapter(AdminSettingsPort):
    """System-tenant admin settings backed by a JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._mtime: float | None = None
        self._data: dict[str, Any] = {}

    def _reload_if_changed(self) -> dict[str, Any]:
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            if self._mtime is not None:
                logger.warning("Admin settings file %s disappeared", self.path)
            self._mtime, self._data = None, {}
            return self._data

        if mtime != self._mtime:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise AdminSettingsFileError(f"Invalid JSON in {self.path}: {e}") from e
            if not isinstance(data, dict):
                raise AdminSettingsFileError(f"{self.path} must contain a JSON object")
            self._mtime, self._data = mtime, data
            logger.info("Loaded admin settings from %s (keys: %s)", self.path, sorted(data))
        return self._data

    async def find_admin_settings_by_key(self, tenant_id: UUID, key: str) -> AdminSettings | None:
        if tenant_id != SYS_TENANT_ID:
            return None
        data = await asyncio.to_thread(self._reload_if_changed)
        if key not in data:
            return None
        value = data[key]
        return AdminSettings(
            tenant_id=tenant_id,
            key=key,
            json_value=value if isinstance(value, dict) else None,
        )
