"""Report the first activity event of each reporting period."""

from edgeconnect.contracts.activity import ActivityStrategy


class FirstEventActivityStrategy(ActivityStrategy):
    """Remembers whether the current period already produced a report.

    Not shared between devices: each caller gets its own instance.
    """

    def __init__(self) -> None:
        self._first_event_received = False

    def on_activity(self) -> bool:
        if not self._first_event_received:
            self._first_event_received = True
            return True
        return False

    def on_reporting_period_end(self) -> bool:
        self._first_event_received = False
        return False
