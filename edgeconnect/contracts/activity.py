"""
Device activity reporting contracts.

A strategy decides, event by event and at the end of each reporting period,
whether device activity should be reported upstream.
"""

from abc import ABC, abstractmethod
from enum import Enum


class ActivityStrategy(ABC):
    """Policy deciding which activity events of a reporting period get reported."""

    @abstractmethod
    def on_activity(self) -> bool:
        """Register an activity event.

        Returns:
            True if this event should be reported right away.
        """
        pass

    @abstractmethod
    def on_reporting_period_end(self) -> bool:
        """Close the current reporting period.

        Returns:
            True if the last event of the period should be reported now.
        """
        pass


class ActivityStrategyType(str, Enum):
    """Closed set of activity reporting policies."""

    ALL = "ALL"
    FIRST = "FIRST"
    LAST = "LAST"
    FIRST_AND_LAST = "FIRST_AND_LAST"

    def to_strategy(self) -> ActivityStrategy:
        """Resolve the policy to a strategy object.

        ALL and LAST share one stateless instance; FIRST and FIRST_AND_LAST
        keep per-period state, so every call returns a new object.
        """
        from edgeconnect.core.services.activity_strategy_factory import create_activity_strategy

        return create_activity_strategy(self)
