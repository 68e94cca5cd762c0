"""
ScreenDetector - Deterministic short-form video screen detection.

Decides from accessibility text alone whether the user is on the YouTube
Shorts viewer or the Instagram Reels viewer. Neither app exposes a stable
"this is a short" signal, so detection is a set of named phrase markers
combined with explicit boolean rules.

Every intermediate predicate is returned in DetectionResult.predicates so
decisions can be logged and tuned offline.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from click_context import ClickContextTracker

logger = logging.getLogger(__name__)


# ==================== Phrase Tables ====================
# All phrases are matched as lower-case substrings of the joined text.

YOUTUBE_MARKERS = {
    'go_to_channel': ('go to channel',),
    'subscribe_to': ('subscribe to',),
}

# Full (non-short) video player: player chrome AND a "play video" affordance
YOUTUBE_FULL_VIDEO_MARKERS = ('video player', 'play video')

HANDLE_MARKER = '@'

INSTAGRAM_MARKERS = {
    'reel_by': ('reel by ',),
    'double_tap': ('double tap to play or pause',),
    'like_info': ('like number is', 'view likes'),
    'comment_info': ('comment number is', 'view comments'),
    'has_tray': ('reels tray container',),
    'has_home': ('instagram home feed',),
}

SEEK_BAR_CLASS = 'SeekBar'


@dataclass
class DetectionResult:
    """Result of a blocking decision."""
    is_blocked: bool
    rule: str                                   # Which rule decided
    predicates: Dict[str, bool] = field(default_factory=dict)

    def describe(self) -> str:
        """One-line predicate dump for logs."""
        parts = ' '.join(f"{k}={v}" for k, v in self.predicates.items())
        return f"{parts} => {self.is_blocked}"


def _match(all_text: str, phrases: Tuple[str, ...]) -> bool:
    return any(p in all_text for p in phrases)


def _match_table(all_text: str, table: Dict[str, Tuple[str, ...]]) -> Dict[str, bool]:
    return {name: _match(all_text, phrases) for name, phrases in table.items()}


def join_lower(texts: List[str]) -> str:
    """Join labels into the lower-case blob the phrase tables match against."""
    return ' '.join(texts).lower()


class YouTubeShortsDetector:
    """Detects the YouTube Shorts viewer. Stateless."""

    def detect(self, texts: List[str]) -> DetectionResult:
        """Classify a text snapshot.

        Blocked iff the channel, subscribe and handle markers are all
        present and the full-video player veto is not.

        Args:
            texts: Labels from collect_all_texts().

        Returns:
            DetectionResult.
        """
        if not texts:
            return DetectionResult(False, 'empty_texts')

        all_text = join_lower(texts)
        predicates = _match_table(all_text, YOUTUBE_MARKERS)
        # Handles are case-sensitive in display, check the raw labels
        predicates['handle'] = any(HANDLE_MARKER in t for t in texts)
        predicates['full_video'] = all(m in all_text for m in YOUTUBE_FULL_VIDEO_MARKERS)

        if predicates['full_video']:
            result = DetectionResult(False, 'full_video_veto', predicates)
        elif predicates['go_to_channel'] and predicates['subscribe_to'] and predicates['handle']:
            result = DetectionResult(True, 'shorts_viewer', predicates)
        else:
            result = DetectionResult(False, 'no_match', predicates)

        logger.debug(f"isShortsScreen: {result.describe()}")
        return result


class InstagramReelsDetector:
    """Detects the Instagram Reels viewer.

    Reads (never writes) a ClickContextTracker: a viewer opened by a recent
    reel click is blocked even if stale feed/tray text is still on screen.
    """

    def __init__(self, click_context: ClickContextTracker):
        self.click_context = click_context

    def detect(
        self,
        texts: List[str],
        event_class: Optional[str] = None,
        is_window_state_change: bool = False,
    ) -> DetectionResult:
        """Classify a text snapshot.

        Args:
            texts: Labels from collect_all_texts().
            event_class: Class name of the view that raised the event.
            is_window_state_change: True for a new window, False for a
                content change inside the current one.

        Returns:
            DetectionResult.
        """
        if not texts:
            return DetectionResult(False, 'empty_texts')

        all_text = join_lower(texts)
        p = _match_table(all_text, INSTAGRAM_MARKERS)

        p['looks_like_viewer'] = p['reel_by'] and (p['double_tap'] or p['like_info'] or p['comment_info'])
        p['strong_viewer'] = p['reel_by'] and p['double_tap'] and (p['like_info'] or p['comment_info'])
        p['recent_click'] = self.click_context.recent_reel_click()

        # Logged only, not part of the rule
        p['seek_bar'] = SEEK_BAR_CLASS in (event_class or '')
        p['window_change'] = is_window_state_change

        if not p['looks_like_viewer']:
            result = DetectionResult(False, 'not_viewer', p)
        elif p['recent_click']:
            result = DetectionResult(True, 'recent_reel_click', p)
        elif not p['has_tray'] and not p['has_home']:
            result = DetectionResult(True, 'pure_viewer', p)
        elif p['strong_viewer']:
            result = DetectionResult(True, 'strong_viewer', p)
        else:
            result = DetectionResult(False, 'feed_context', p)

        logger.debug(f"isInstagramReelsScreen: {result.describe()}")
        return result
