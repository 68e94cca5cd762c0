"""
Centralized Configuration Module.

This is the SINGLE SOURCE OF TRUTH for package names, view ids, timing
windows and paths. All other modules should import from here instead of
defining their own constants.

Usage:
    from config import Config, BlockAction, BlockActionStore, setup_environment

    # At startup
    setup_environment()

    # Read the configured block action
    action = BlockActionStore().get()
"""

import os
import json
import logging
from enum import Enum
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """
    Centralized configuration constants.

    These values should NEVER be redefined in other files.
    If you need to change a value, change it HERE.
    """

    # ==================== MONITORED APPS ====================

    YOUTUBE_PACKAGE: str = "com.google.android.youtube"
    INSTAGRAM_PACKAGE: str = "com.instagram.android"

    # Instagram bottom navigation tab ids (full resource names)
    INSTAGRAM_REELS_TAB_ID: str = "com.instagram.android:id/clips_tab"
    INSTAGRAM_EXPLORE_TAB_ID: str = "com.instagram.android:id/search_tab"

    # ==================== TIMING (milliseconds) ====================

    # Minimum gap between two dispatched block actions
    COOLDOWN_MS: int = 1000

    # A reel click biases classification toward "viewer" for this long
    REEL_CLICK_WINDOW_MS: int = 1500

    # Image taps within this window after entering Explore count as reel clicks
    EXPLORE_WINDOW_MS: int = 30000

    # ==================== ANDROID KEYCODES ====================

    KEYCODE_HOME: int = 3
    KEYCODE_BACK: int = 4
    KEYCODE_APP_SWITCH: int = 187

    # ==================== DEVICE ====================

    # ADB executable - resolved from PATH unless overridden
    ADB_PATH: str = "adb"

    # Default Appium URL for live monitoring
    DEFAULT_APPIUM_URL: str = "http://127.0.0.1:4723"

    # ADB command timeout
    ADB_TIMEOUT: int = 10

    # Delay between UI polls in live monitoring (seconds)
    POLL_INTERVAL: float = 0.5

    # ==================== FILES ====================

    # Block action preference file
    PREFS_FILE: str = "shortsblocker_prefs.json"

    # Decision logs directory
    LOGS_DIR: str = "decision_logs"


class BlockAction(Enum):
    """Available actions when shorts/reels are detected."""
    BACK = 0      # Press back button (default)
    HOME = 1      # Go to home screen
    RECENTS = 2   # Open recent apps

    @classmethod
    def from_value(cls, value) -> 'BlockAction':
        """Map a stored value to an action, falling back to BACK."""
        # JSON true/false would otherwise compare equal to 1/0
        if not isinstance(value, int) or isinstance(value, bool):
            return cls.BACK
        for action in cls:
            if action.value == value:
                return action
        return cls.BACK

    @classmethod
    def from_name(cls, name: str) -> 'BlockAction':
        """Parse a case-insensitive action name (e.g. 'home')."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown block action: {name!r}")

    @property
    def keycode(self) -> int:
        """Android keycode that performs this action."""
        return {
            BlockAction.BACK: Config.KEYCODE_BACK,
            BlockAction.HOME: Config.KEYCODE_HOME,
            BlockAction.RECENTS: Config.KEYCODE_APP_SWITCH,
        }[self]


class BlockActionStore:
    """
    Persists the configured BlockAction in a small JSON preferences file.

    The settings surface writes it; the blocking core only reads it, once
    per dispatch, so changes apply without a restart.

    Usage:
        store = BlockActionStore("prefs.json")
        store.set(BlockAction.HOME)
        store.get()  # BlockAction.HOME
    """

    KEY_BLOCK_ACTION = "block_action"

    def __init__(self, path: Optional[str] = None):
        self.path = path or os.getenv("SHORTS_BLOCKER_PREFS", Config.PREFS_FILE)

    def _load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read preferences {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self) -> BlockAction:
        """Get the current block action preference (BACK if unset)."""
        value = self._load().get(self.KEY_BLOCK_ACTION, BlockAction.BACK.value)
        return BlockAction.from_value(value)

    def set(self, action: BlockAction) -> None:
        """Set the block action preference."""
        data = self._load()
        data[self.KEY_BLOCK_ACTION] = action.value

        parent = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(parent, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        logger.info(f"Block action set to {action.name}")


def setup_environment(dotenv_path: Optional[str] = None) -> None:
    """
    Load .env overrides for device settings.

    Call this early in your script, before building controllers.
    """
    load_dotenv(dotenv_path)


def get_adb_path() -> str:
    """ADB executable, honoring the ADB_PATH environment override."""
    return os.getenv("ADB_PATH", Config.ADB_PATH)


def get_appium_url() -> str:
    """Appium server URL, honoring the APPIUM_URL environment override."""
    return os.getenv("APPIUM_URL", Config.DEFAULT_APPIUM_URL)


def get_device_serial() -> Optional[str]:
    """Target device serial (None = the only attached device)."""
    return os.getenv("DEVICE_SERIAL") or None
