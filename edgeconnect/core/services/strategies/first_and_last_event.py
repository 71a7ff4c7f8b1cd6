"""Report the first event of a period right away and the last one at its end."""

from edgeconnect.contracts.activity import ActivityStrategy


class FirstAndLastEventActivityStrategy(ActivityStrategy):
    def __init__(self) -> None:
        self._first_event_received = False

    def on_activity(self) -> bool:
        if not self._first_event_received:
            self._first_event_received = True
            return True
        return False

    def on_reporting_period_end(self) -> bool:
        self._first_event_received = False
        return True
