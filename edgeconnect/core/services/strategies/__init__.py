"""Concrete activity strategies.

- AllEventsActivityStrategy: report every event (shared instance)
- FirstEventActivityStrategy: report the first event of each period
- LastEventActivityStrategy: report the last event at period end (shared instance)
- FirstAndLastEventActivityStrategy: report the first event and the period's last one

Strategies are imported lazily by activity_strategy_factory; keep this module
free of imports.
"""
