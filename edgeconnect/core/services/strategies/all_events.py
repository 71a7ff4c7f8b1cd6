"""Report every activity event as it happens."""

from __future__ import annotations

from edgeconnect.contracts.activity import ActivityStrategy


class AllEventsActivityStrategy(ActivityStrategy):
    """Stateless; a single shared instance serves every device."""

    _instance: AllEventsActivityStrategy | None = None

    @classmethod
    def get_instance(cls) -> AllEventsActivityStrategy:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def on_activity(self) -> bool:
        return True

    def on_reporting_period_end(self) -> bool:
        return False
