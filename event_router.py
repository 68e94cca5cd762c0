"""
Event Router - single entry point for accessibility events.

Routes each event by package to the matching classifier pipeline:

    click (Instagram)      -> ClickContextTracker
    window state/content   -> collect_all_texts -> detector -> BlockDispatcher

Events are handled one at a time, to completion; no state is shared with
any other thread.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Callable, List, Optional

from config import Config, BlockAction
from ui_tree import UiNode, collect_all_texts
from click_context import ClickContextTracker, ClickEvent, monotonic_ms
from screen_detector import YouTubeShortsDetector, InstagramReelsDetector, DetectionResult
from block_dispatcher import BlockDispatcher, DispatchOutcome
from flow_logger import DecisionLogger

logger = logging.getLogger(__name__)


class EventType(Enum):
    WINDOW_STATE_CHANGED = auto()
    WINDOW_CONTENT_CHANGED = auto()
    VIEW_CLICKED = auto()


WINDOW_EVENTS = (EventType.WINDOW_STATE_CHANGED, EventType.WINDOW_CONTENT_CHANGED)


@dataclass
class AccessibilityEvent:
    """An inbound event from the host."""
    package: str
    event_type: EventType
    class_name: Optional[str] = None     # class of the view that raised it
    root: Optional[UiNode] = None        # active window snapshot, if available
    source: Optional[ClickEvent] = None  # clicked view, for VIEW_CLICKED


@dataclass
class RouteResult:
    """What the router did with one event."""
    package: str
    detection: Optional[DetectionResult] = None
    outcome: Optional[DispatchOutcome] = None


class EventRouter:
    """Owns the click context and dispatcher; feeds events to detectors."""

    SAMPLE_SIZE = 12

    def __init__(
        self,
        navigate: Callable[[BlockAction], None],
        action_provider: Optional[Callable[[], BlockAction]] = None,
        clock: Callable[[], float] = monotonic_ms,
        decision_logger: Optional[DecisionLogger] = None,
    ):
        """
        Args:
            navigate: Primitive that performs a navigation action on the device.
            action_provider: Returns the configured BlockAction.
            clock: Monotonic clock in milliseconds, shared by all components.
            decision_logger: Optional JSONL sink for every decision.
        """
        self.click_context = ClickContextTracker(clock=clock)
        self.youtube = YouTubeShortsDetector()
        self.instagram = InstagramReelsDetector(self.click_context)
        self.dispatcher = BlockDispatcher(navigate, action_provider=action_provider, clock=clock)
        self.decision_logger = decision_logger

        self.handlers = {
            Config.YOUTUBE_PACKAGE: self._handle_youtube,
            Config.INSTAGRAM_PACKAGE: self._handle_instagram,
        }

    def handle(self, event: AccessibilityEvent) -> Optional[RouteResult]:
        """Handle one event.

        Returns:
            RouteResult, or None if the event came from an unmonitored app.
        """
        handler = self.handlers.get(event.package)
        if handler is None:
            return None
        return handler(event)

    def _handle_youtube(self, event: AccessibilityEvent) -> RouteResult:
        result = RouteResult(package=event.package)
        if event.event_type not in WINDOW_EVENTS:
            return result

        texts = collect_all_texts(event.root)
        logger.debug(f"YT event type={event.event_type.name} class={event.class_name} sample={texts[:10]}")

        result.detection = self.youtube.detect(texts)
        if result.detection.is_blocked:
            logger.info("Detected Shorts screen - blocking")
            result.outcome = self.dispatcher.attempt()

        self._log_decision(event, texts, result)
        return result

    def _handle_instagram(self, event: AccessibilityEvent) -> RouteResult:
        result = RouteResult(package=event.package)

        if event.event_type == EventType.VIEW_CLICKED:
            click = event.source or ClickEvent(package=event.package)
            if click.class_name is None:
                click = replace(click, class_name=event.class_name)
            logger.debug(
                f"IG CLICK: class={click.class_name} viewId={click.view_id} "
                f"text={click.text} desc={click.desc}"
            )
            self.click_context.record_click(click)

        # The same click may also change the content; only window events classify
        if event.event_type not in WINDOW_EVENTS:
            return result

        texts = collect_all_texts(event.root)
        logger.debug(f"IG SCREEN: type={event.event_type.name} class={event.class_name} sample={texts[:self.SAMPLE_SIZE]}")

        result.detection = self.instagram.detect(
            texts,
            event_class=event.class_name,
            is_window_state_change=event.event_type == EventType.WINDOW_STATE_CHANGED,
        )
        if result.detection.is_blocked:
            logger.info("Detected Instagram Reel - blocking")
            result.outcome = self.dispatcher.attempt()

        self._log_decision(event, texts, result)
        return result

    def _log_decision(self, event: AccessibilityEvent, texts: List[str], result: RouteResult):
        if self.decision_logger is None:
            return
        self.decision_logger.log_decision(
            package=event.package,
            event_type=event.event_type.name,
            class_name=event.class_name,
            texts=texts,
            rule=result.detection.rule,
            blocked=result.detection.is_blocked,
            predicates=result.detection.predicates,
            outcome=result.outcome.name if result.outcome else None,
        )
