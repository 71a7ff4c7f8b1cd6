"""Activity Strategy Factory.

Resolves an ActivityStrategyType to its concrete ActivityStrategy.

- Stateless policies (ALL, LAST) return a shared singleton.
- Stateful policies (FIRST, FIRST_AND_LAST) return a new instance per call,
  so every device tracks its own reporting period.
- Concrete strategies are imported on demand; they depend on
  edgeconnect.contracts.activity, which calls back into this module.
"""

from typing import TYPE_CHECKING

from edgeconnect.contracts.activity import ActivityStrategyType

if TYPE_CHECKING:
    from edgeconnect.contracts.activity import ActivityStrategy


def create_activity_strategy(strategy_type: ActivityStrategyType) -> "ActivityStrategy":
    """Get the strategy implementing the given activity policy.

    Args:
        strategy_type: Policy selected in configuration

    Returns:
        Concrete ActivityStrategy for the policy

    Raises:
        ValueError: If strategy_type is not one of the known policies
    """
    if strategy_type is ActivityStrategyType.ALL:
        from edgeconnect.core.services.strategies.all_events import AllEventsActivityStrategy

        return AllEventsActivityStrategy.get_instance()

    elif strategy_type is ActivityStrategyType.FIRST:
        from edgeconnect.core.services.strategies.first_event import FirstEventActivityStrategy

        return FirstEventActivityStrategy()

    elif strategy_type is ActivityStrategyType.LAST:
        from edgeconnect.core.services.strategies.last_event import LastEventActivityStrategy

        return LastEventActivityStrategy.get_instance()

    elif strategy_type is ActivityStrategyType.FIRST_AND_LAST:
        from edgeconnect.core.services.strategies.first_and_last_event import (
            FirstAndLastEventActivityStrategy,
        )

        return FirstAndLastEventActivityStrategy()

    raise ValueError(f"Unsupported activity strategy type: {strategy_type!r}")
