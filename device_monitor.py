"""
Device Monitor - live polling loop for a connected device.

Turns periodic UI snapshots into window events for the EventRouter. A
package switch is reported as WINDOW_STATE_CHANGED, anything else as
WINDOW_CONTENT_CHANGED. Clicks cannot be observed by polling, so the
Instagram click context stays empty in this mode and detection relies on
the text rules alone.
"""
import logging
import time
from typing import Callable, Optional

from config import Config
from adb_controller import DeviceError
from event_router import AccessibilityEvent, EventRouter, EventType, RouteResult

logger = logging.getLogger(__name__)


class DeviceMonitor:
    """Polls a snapshot source and feeds the router, one event at a time."""

    def __init__(
        self,
        source,
        router: EventRouter,
        poll_interval: float = Config.POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            source: Object with current_package() and dump_tree()
                    (e.g. AppiumUIController).
            router: EventRouter to feed.
            poll_interval: Seconds between polls.
            sleep: Sleep function (injectable for tests).
        """
        self.source = source
        self.router = router
        self.poll_interval = poll_interval
        self.sleep = sleep

        self.last_package: Optional[str] = None
        self._running = False

        # Statistics
        self.polls = 0
        self.errors = 0

    def poll_once(self) -> Optional[RouteResult]:
        """Take one snapshot and route it.

        Returns:
            RouteResult, or None if the app is not monitored or the poll failed.
        """
        self.polls += 1
        try:
            package = self.source.current_package()
            root = self.source.dump_tree()
        except DeviceError as e:
            self.errors += 1
            logger.warning(f"Snapshot failed: {e}")
            return None

        if not package:
            return None

        event_type = (EventType.WINDOW_STATE_CHANGED if package != self.last_package
                      else EventType.WINDOW_CONTENT_CHANGED)
        self.last_package = package

        try:
            return self.router.handle(AccessibilityEvent(package=package, event_type=event_type, root=root))
        except DeviceError as e:
            self.errors += 1
            logger.warning(f"Block action failed: {e}")
            return None

    def run(self, max_polls: Optional[int] = None) -> None:
        """Poll until stop() is called (or max_polls is reached)."""
        self._running = True
        logger.info(f"Monitoring started (interval={self.poll_interval}s)")
        try:
            while self._running:
                self.poll_once()
                if max_polls is not None and self.polls >= max_polls:
                    break
                self.sleep(self.poll_interval)
        finally:
            self._running = False
            logger.info(f"Monitoring stopped after {self.polls} polls ({self.errors} errors)")

    def stop(self) -> None:
        """Ask the loop to exit after the current poll."""
        self._running = False
