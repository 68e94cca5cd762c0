"""Tests for EventRouter: routing, click tracking and end-to-end blocking."""
import json

import pytest

from block_dispatcher import DispatchOutcome
from click_context import ClickEvent
from config import BlockAction, Config
from event_router import AccessibilityEvent, EventRouter, EventType
from flow_logger import DecisionLogger

from conftest import screen

YT = Config.YOUTUBE_PACKAGE
IG = Config.INSTAGRAM_PACKAGE

SHORTS_SCREEN = screen("Go to channel", "Subscribe to Acme", "@acme")
REEL_SCREEN = screen("Reel by jane", "Double tap to play or pause", "Like number is 5")
FEED_REEL_SCREEN = screen("Reel by jane", "Like number is 5", "reels tray container")


@pytest.fixture
def router(clock, performed):
    return EventRouter(navigate=performed.append, clock=clock)


def window(package, root, event_type=EventType.WINDOW_CONTENT_CHANGED, class_name=None):
    return AccessibilityEvent(package=package, event_type=event_type, root=root, class_name=class_name)


def click(**kwargs):
    return AccessibilityEvent(package=IG, event_type=EventType.VIEW_CLICKED,
                              class_name=kwargs.pop('class_name', None),
                              source=ClickEvent(IG, **kwargs))


class TestRouting:
    def test_unknown_package_ignored(self, router, performed):
        assert router.handle(window('com.android.chrome', SHORTS_SCREEN)) is None
        assert performed == []

    def test_youtube_shorts_blocked(self, router, performed):
        result = router.handle(window(YT, SHORTS_SCREEN, EventType.WINDOW_STATE_CHANGED))
        assert result.detection.is_blocked
        assert result.outcome == DispatchOutcome.PERFORMED
        assert performed == [BlockAction.BACK]

    def test_youtube_click_ignored(self, router, performed):
        event = AccessibilityEvent(package=YT, event_type=EventType.VIEW_CLICKED, root=SHORTS_SCREEN)
        result = router.handle(event)
        assert result.detection is None
        assert performed == []

    def test_missing_root_not_blocked(self, router, performed):
        result = router.handle(window(YT, None))
        assert not result.detection.is_blocked
        assert result.outcome is None
        assert performed == []

    def test_duplicate_content_changes_one_action(self, router, clock, performed):
        outcomes = []
        for _ in range(5):
            outcomes.append(router.handle(window(IG, REEL_SCREEN)).outcome)
            clock.advance(50)
        assert outcomes[0] == DispatchOutcome.PERFORMED
        assert outcomes[1:] == [DispatchOutcome.SUPPRESSED] * 4
        assert len(performed) == 1

    def test_configured_action_used(self, clock, performed):
        router = EventRouter(navigate=performed.append, action_provider=lambda: BlockAction.HOME, clock=clock)
        router.handle(window(YT, SHORTS_SCREEN))
        assert performed == [BlockAction.HOME]


class TestInstagramClicks:
    def test_click_updates_context_without_classifying(self, router, clock, performed):
        result = router.handle(click(view_id=Config.INSTAGRAM_REELS_TAB_ID))
        assert result.detection is None
        assert router.click_context.last_reel_click_ms == clock.now
        assert performed == []

    def test_reels_tab_click_then_stale_feed_blocked(self, router, clock, performed):
        """Viewer still showing tray text is blocked right after a reel click."""
        router.handle(click(desc="Reels"))
        clock.advance(300)
        result = router.handle(window(IG, FEED_REEL_SCREEN, EventType.WINDOW_STATE_CHANGED))
        assert result.detection.rule == 'recent_reel_click'
        assert performed == [BlockAction.BACK]

    def test_stale_feed_without_click_allowed(self, router, performed):
        result = router.handle(window(IG, FEED_REEL_SCREEN))
        assert not result.detection.is_blocked
        assert performed == []

    def test_explore_image_click_then_reel(self, router, clock, performed):
        router.handle(click(view_id=Config.INSTAGRAM_EXPLORE_TAB_ID))
        clock.advance(5000)
        # Class name comes from the event when the source does not carry one
        router.handle(click(class_name='android.widget.ImageView'))
        clock.advance(400)
        result = router.handle(window(IG, FEED_REEL_SCREEN))
        assert result.detection.is_blocked
        assert performed == [BlockAction.BACK]

    def test_click_expires(self, router, clock, performed):
        router.handle(click(text="Reel by jane"))
        clock.advance(Config.REEL_CLICK_WINDOW_MS + 1)
        assert not router.handle(window(IG, FEED_REEL_SCREEN)).detection.is_blocked


class TestDecisionLogging:
    def test_decisions_written(self, tmp_path, clock, performed):
        with DecisionLogger(log_dir=str(tmp_path), session_name="test") as decision_logger:
            router = EventRouter(navigate=performed.append, clock=clock, decision_logger=decision_logger)
            router.handle(window(YT, SHORTS_SCREEN))
            router.handle(window(YT, SHORTS_SCREEN))
            router.handle(click(desc="Reels"))

        with open(decision_logger.log_file, encoding='utf-8') as f:
            entries = [json.loads(line) for line in f]

        decisions = [e for e in entries if e['event'] == 'decision']
        assert [d['outcome'] for d in decisions] == ['PERFORMED', 'SUPPRESSED']
        assert decisions[0]['package'] == YT
        assert decisions[0]['rule'] == 'shorts_viewer'
        assert decisions[0]['predicates']['handle'] is True
        assert decisions[0]['sample'] == ["Go to channel", "Subscribe to Acme", "@acme"]
