"""Per-device activity tracking driven by an activity strategy.

Transports call `on_activity` for every uplink of a device; a scheduler calls
`on_reporting_period_end` once per reporting period. The configured
ActivityStrategyType decides which of those moments produce a report.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from edgeconnect.contracts.activity import ActivityStrategy, ActivityStrategyType

if TYPE_CHECKING:
    from edgeconnect.config.settings import Settings

logger = logging.getLogger(__name__)

ReportCallback = Callable[[str, int], None]


@dataclass
class _ActivityState:
    strategy: ActivityStrategy
    last_event_ts: int


class ActivityTracker:
    """Tracks device activity for the current reporting period.

    Thread Safety: all state changes happen under a lock; the report callback
    is invoked outside of it.
    """

    def __init__(self, strategy_type: ActivityStrategyType, report: ReportCallback) -> None:
        """Initialize the tracker.

        Args:
            strategy_type: Policy applied to every tracked device
            report: Called with (device key, event timestamp in ms)
        """
        self.strategy_type = strategy_type
        self._report = report
        self._states: dict[str, _ActivityState] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, report: ReportCallback) -> ActivityTracker:
        return cls(settings.activity_strategy, report)

    def on_activity(self, key: str, ts: int | None = None) -> bool:
        """Record an activity event for key.

        Returns:
            True if the event was reported immediately.
        """
        event_ts = ts if ts is not None else int(time.time() * 1000)
        with self._lock:
            state = self._states.get(key)
            if state is None:
                state = _ActivityState(self.strategy_type.to_strategy(), event_ts)
                self._states[key] = state
            else:
                state.last_event_ts = max(state.last_event_ts, event_ts)
            should_report = state.strategy.on_activity()

        if should_report:
            logger.debug("Reporting activity of %s at %s", key, event_ts)
            self._report(key, event_ts)
        return should_report

    def on_reporting_period_end(self) -> list[str]:
        """Close the reporting period for every device active in it.

        Returns:
            Keys whose last event was reported.
        """
        with self._lock:
            states, self._states = self._states, {}

        reported: list[str] = []
        for key, state in states.items():
            if state.strategy.on_reporting_period_end():
                self._report(key, state.last_event_ts)
                reported.append(key)

        logger.debug(
            "Reporting period closed: %d active, %d reported (%s)",
            len(states),
            len(reported),
            self.strategy_type.value,
        )
        return reported

    def tracked_keys(self) -> list[str]:
        with self._lock:
            return list(self._states)
