"""
ADB Controller - runs navigation key events on an attached Android device.

Provides the "perform navigation action" primitive used by the blocker.
"""
import logging
import subprocess
from typing import List, Optional

from config import Config, BlockAction, get_adb_path, get_device_serial

logger = logging.getLogger(__name__)


class DeviceError(Exception):
    """Raised when a device command cannot be executed."""
    pass


class ADBController:
    def __init__(self, serial: Optional[str] = None, adb_path: Optional[str] = None,
                 timeout: int = Config.ADB_TIMEOUT):
        """
        Args:
            serial: Device serial or ip:port (None = the only attached device).
            adb_path: ADB executable.
            timeout: Per-command timeout in seconds.
        """
        self.serial = serial or get_device_serial()
        self.adb_path = adb_path or get_adb_path()
        self.timeout = timeout

    def _base_cmd(self) -> List[str]:
        cmd = [self.adb_path]
        if self.serial:
            cmd += ["-s", self.serial]
        return cmd

    def shell(self, command: str) -> str:
        """Run shell command on device"""
        try:
            result = subprocess.run(
                self._base_cmd() + ["shell", command],
                capture_output=True, text=True, timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise DeviceError(f"ADB command timed out after {self.timeout}s: {command}")
        except FileNotFoundError:
            raise DeviceError(f"ADB executable not found: {self.adb_path}")

        if result.returncode != 0:
            raise DeviceError(f"ADB command failed ({result.returncode}): {result.stderr.strip()}")
        return result.stdout.strip()

    def key_event(self, keycode: int) -> str:
        """Send key event (e.g., KEYCODE_BACK=4, KEYCODE_HOME=3)"""
        return self.shell(f"input keyevent {keycode}")

    def perform_navigation(self, action: BlockAction) -> None:
        """Perform a block action (Back / Home / Recents)."""
        logger.debug(f"ADB key event {action.keycode} for {action.name}")
        self.key_event(action.keycode)

