"""Unit tests for activity strategy resolution and behaviour."""

import pytest

from edgeconnect.contracts.activity import ActivityStrategy, ActivityStrategyType
from edgeconnect.core.services.activity_strategy_factory import create_activity_strategy
from edgeconnect.core.services.strategies.all_events import AllEventsActivityStrategy
from edgeconnect.core.services.strategies.first_and_last_event import (
    FirstAndLastEventActivityStrategy,
)
from edgeconnect.core.services.strategies.first_event import FirstEventActivityStrategy
from edgeconnect.core.services.strategies.last_event import LastEventActivityStrategy


class TestStrategyResolution:
    @pytest.mark.parametrize(
        ("strategy_type", "expected_cls"),
        [
            (ActivityStrategyType.ALL, AllEventsActivityStrategy),
            (ActivityStrategyType.FIRST, FirstEventActivityStrategy),
            (ActivityStrategyType.LAST, LastEventActivityStrategy),
            (ActivityStrategyType.FIRST_AND_LAST, FirstAndLastEventActivityStrategy),
        ],
    )
    def test_every_type_resolves(self, strategy_type, expected_cls) -> None:
        strategy = strategy_type.to_strategy()
        assert isinstance(strategy, expected_cls)
        assert isinstance(strategy, ActivityStrategy)

    @pytest.mark.parametrize("strategy_type", [ActivityStrategyType.ALL, ActivityStrategyType.LAST])
    def test_stateless_strategies_are_shared(self, strategy_type) -> None:
        assert strategy_type.to_strategy() is strategy_type.to_strategy()

    @pytest.mark.parametrize(
        "strategy_type", [ActivityStrategyType.FIRST, ActivityStrategyType.FIRST_AND_LAST]
    )
    def test_stateful_strategies_are_fresh(self, strategy_type) -> None:
        assert strategy_type.to_strategy() is not strategy_type.to_strategy()

    def test_factory_rejects_unknown_values(self) -> None:
        with pytest.raises(ValueError, match="Unsupported activity strategy type"):
            create_activity_strategy("SOMETIMES")  # type: ignore[arg-type]

    def test_type_parses_from_config_string(self) -> None:
        assert ActivityStrategyType("FIRST_AND_LAST") is ActivityStrategyType.FIRST_AND_LAST


class TestStrategyBehaviour:
    def test_all_events_reports_every_event_and_nothing_at_period_end(self) -> None:
        strategy = ActivityStrategyType.ALL.to_strategy()
        assert [strategy.on_activity() for _ in range(3)] == [True, True, True]
        assert strategy.on_reporting_period_end() is False

    def test_last_event_reports_only_at_period_end(self) -> None:
        strategy = ActivityStrategyType.LAST.to_strategy()
        assert [strategy.on_activity() for _ in range(3)] == [False, False, False]
        assert strategy.on_reporting_period_end() is True

    def test_first_event_reports_once_per_period(self) -> None:
        strategy = ActivityStrategyType.FIRST.to_strategy()
        assert [strategy.on_activity() for _ in range(3)] == [True, False, False]
        assert strategy.on_reporting_period_end() is False
        # New period starts over
        assert strategy.on_activity() is True

    def test_first_and_last_reports_first_event_and_period_end(self) -> None:
        strategy = ActivityStrategyType.FIRST_AND_LAST.to_strategy()
        assert [strategy.on_activity() for _ in range(3)] == [True, False, False]
        assert strategy.on_reporting_period_end() is True
        assert strategy.on_activity() is True

    def test_first_event_instances_do_not_share_state(self) -> None:
        a = ActivityStrategyType.FIRST.to_strategy()
        b = ActivityStrategyType.FIRST.to_strategy()
        assert a.on_activity() is True
        assert b.on_activity() is True
