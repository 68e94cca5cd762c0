"""
Block Dispatcher - cooldown-gated navigation action.

A single Shorts screen usually fires a burst of WINDOW_CONTENT_CHANGED
events. Each one classifies positive, but only the first inside the
cooldown window may press Back, otherwise the user is thrown out of the app
entirely.
"""
import logging
from enum import Enum, auto
from typing import Callable, Optional

from config import Config, BlockAction
from click_context import monotonic_ms

logger = logging.getLogger(__name__)


class DispatchOutcome(Enum):
    PERFORMED = auto()
    SUPPRESSED = auto()


class BlockDispatcher:
    """Performs at most one navigation action per cooldown window."""

    def __init__(
        self,
        navigate: Callable[[BlockAction], None],
        action_provider: Optional[Callable[[], BlockAction]] = None,
        clock: Callable[[], float] = monotonic_ms,
        cooldown_ms: int = Config.COOLDOWN_MS,
    ):
        """
        Args:
            navigate: Primitive that performs a navigation action on the device.
            action_provider: Returns the configured action (default: always BACK).
            clock: Function returning monotonic time in milliseconds.
            cooldown_ms: Minimum gap between two performed actions.
        """
        self.navigate = navigate
        self.action_provider = action_provider or (lambda: BlockAction.BACK)
        self.clock = clock
        self.cooldown_ms = cooldown_ms
        self.last_action_ms: Optional[float] = None

        # Statistics
        self.performed_count = 0
        self.suppressed_count = 0

    def attempt(self, action: Optional[BlockAction] = None) -> DispatchOutcome:
        """Perform a block action unless still cooling down.

        Args:
            action: Action to perform; defaults to the configured action.

        Returns:
            PERFORMED, or SUPPRESSED if the previous action was less than
            cooldown_ms ago.
        """
        now = self.clock()

        if self.last_action_ms is not None:
            since_last = now - self.last_action_ms
            if since_last < self.cooldown_ms:
                self.suppressed_count += 1
                logger.debug(f"Block action skipped - cooldown active ({since_last:.0f}ms since last block)")
                return DispatchOutcome.SUPPRESSED

        if action is None:
            action = self.action_provider()

        self.last_action_ms = now
        self.performed_count += 1
        logger.info(f"Performing block action: {action.name}")
        self.navigate(action)
        return DispatchOutcome.PERFORMED
