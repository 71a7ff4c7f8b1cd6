"""Report only the last activity event of each reporting period."""

from __future__ import annotations

from edgeconnect.contracts.activity import ActivityStrategy


class LastEventActivityStrategy(ActivityStrategy):
    """Stateless; a single shared instance serves every device."""

    _instance: LastEventActivityStrategy | None = None

    @classmethod
    def get_instance(cls) -> LastEventActivityStrategy:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def on_activity(self) -> bool:
        return False

    def on_reporting_period_end(self) -> bool:
        return True
