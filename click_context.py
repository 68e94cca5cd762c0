"""
Click Context Tracker - remembers recent Instagram navigation clicks.

Instagram's reel viewer can keep stale home-feed / tray text in the tree for
a moment after it opens. Knowing that the user just tapped something that
opens a reel lets the classifier block anyway.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from config import Config

logger = logging.getLogger(__name__)


def monotonic_ms() -> float:
    """Default clock: monotonic time in milliseconds."""
    return time.monotonic() * 1000


@dataclass
class ClickEvent:
    """A click on a view inside a monitored app."""
    package: str
    class_name: Optional[str] = None
    text: Optional[str] = None
    desc: Optional[str] = None
    view_id: Optional[str] = None
    timestamp_ms: Optional[float] = None


def _contains(value: Optional[str], phrase: str) -> bool:
    return value is not None and phrase in value.lower()


class ClickContextTracker:
    """Tracks the last reel-opening click and the last Explore click.

    Both timestamps are readings of the injected clock and start as None
    (never clicked). State lives for the lifetime of the tracker only.
    """

    REELS_DESC = 'reels'
    REEL_BY = 'reel by'
    EXPLORE_DESC = 'search and explore'
    IMAGE_CLASS = 'ImageView'

    def __init__(self, clock: Callable[[], float] = monotonic_ms):
        """
        Args:
            clock: Function returning monotonic time in milliseconds.
        """
        self.clock = clock
        self.last_reel_click_ms: Optional[float] = None
        self.last_explore_click_ms: Optional[float] = None

    def record_click(self, click: ClickEvent) -> None:
        """Update the context from a click. Called for every click event.

        The click's own timestamp is used when set; it must come from the
        same clock as the tracker.
        """
        now = click.timestamp_ms if click.timestamp_ms is not None else self.clock()

        clicked_reels_tab = (
            click.view_id == Config.INSTAGRAM_REELS_TAB_ID
            or _contains(click.desc, self.REELS_DESC)
        )
        clicked_reel_card = (
            _contains(click.text, self.REEL_BY)
            or _contains(click.desc, self.REEL_BY)
        )
        clicked_explore_tab = (
            click.view_id == Config.INSTAGRAM_EXPLORE_TAB_ID
            or _contains(click.desc, self.EXPLORE_DESC)
        )

        if clicked_reels_tab or clicked_reel_card:
            self.last_reel_click_ms = now
            logger.debug(f"IG: marked reel click at {now:.0f}")

        if clicked_explore_tab:
            self.last_explore_click_ms = now
            logger.debug(f"IG: marked explore tab click at {now:.0f}")
        elif not (clicked_reels_tab or clicked_reel_card):
            # Explore grid items are image views without useful ids
            if self.recently_on_explore(now) and self.IMAGE_CLASS.lower() in (click.class_name or '').lower():
                self.last_reel_click_ms = now
                logger.debug(f"IG: marked explore item click ({click.class_name}) at {now:.0f}")

    def recently_on_explore(self, now: Optional[float] = None) -> bool:
        """True if Explore was entered less than EXPLORE_WINDOW_MS ago."""
        if self.last_explore_click_ms is None:
            return False
        now = self.clock() if now is None else now
        return 0 <= now - self.last_explore_click_ms < Config.EXPLORE_WINDOW_MS

    def recent_reel_click(self, now: Optional[float] = None) -> bool:
        """True if a reel click happened within the last REEL_CLICK_WINDOW_MS (inclusive)."""
        if self.last_reel_click_ms is None:
            return False
        now = self.clock() if now is None else now
        return 0 <= now - self.last_reel_click_ms <= Config.REEL_CLICK_WINDOW_MS
