"""
Appium UI Controller - reads accessibility snapshots from a live device.

Wraps an Appium WebDriver session: page source becomes a UiNode tree for
the blocker, and navigation actions go through press_keycode.
"""
import logging
from typing import Optional

from appium import webdriver
from appium.options.android import UiAutomator2Options
from selenium.common.exceptions import WebDriverException

from config import BlockAction, get_appium_url, get_device_serial
from ui_tree import UiNode, parse_ui_xml
from adb_controller import DeviceError

logger = logging.getLogger(__name__)


def build_options(serial: Optional[str] = None) -> UiAutomator2Options:
    """UiAutomator2 options for attaching to an already-running device."""
    options = UiAutomator2Options()
    options.platform_name = "Android"
    options.automation_name = "UiAutomator2"
    if serial:
        options.device_name = serial
        options.udid = serial
    options.no_reset = True
    options.new_command_timeout = 300
    # Leave the foreground app alone; we only observe it
    options.set_capability("appium:dontStopAppOnReset", True)
    return options


class AppiumUIController:
    """Controls Android UI through Appium WebDriver."""

    def __init__(self, driver: webdriver.Remote):
        """
        Initialize the controller.

        Args:
            driver: Appium WebDriver instance (must already be connected).
        """
        self._driver = driver

    @classmethod
    def connect(cls, appium_url: Optional[str] = None, serial: Optional[str] = None) -> 'AppiumUIController':
        """Open an Appium session against the device."""
        url = appium_url or get_appium_url()
        serial = serial or get_device_serial()
        logger.info(f"Connecting Appium at {url} (device={serial or 'default'})")
        try:
            driver = webdriver.Remote(command_executor=url, options=build_options(serial))
        except Exception as e:
            raise DeviceError(f"Appium connection failed: {e}") from e
        return cls(driver)

    @property
    def driver(self) -> webdriver.Remote:
        """Get the underlying Appium driver."""
        return self._driver

    def _require_driver(self, what: str):
        if not self._driver:
            raise DeviceError(f"Appium driver not connected - cannot {what}")

    def dump_tree(self) -> Optional[UiNode]:
        """Snapshot the active window as a UiNode tree (None if unavailable)."""
        self._require_driver("dump UI")
        try:
            xml_str = self._driver.page_source
        except WebDriverException as e:
            raise DeviceError(f"Page source failed: {e}") from e
        return parse_ui_xml(xml_str)

    def current_package(self) -> Optional[str]:
        """Package name of the foreground app."""
        self._require_driver("read current package")
        try:
            return self._driver.current_package
        except WebDriverException as e:
            raise DeviceError(f"Current package failed: {e}") from e

    def perform_navigation(self, action: BlockAction) -> None:
        """Perform a block action (Back / Home / Recents)."""
        self._require_driver("press key")
        try:
            self._driver.press_keycode(action.keycode)
        except WebDriverException as e:
            raise DeviceError(f"Key press {action.name} failed: {e}") from e

    def quit(self) -> None:
        """End the Appium session."""
        if self._driver:
            try:
                self._driver.quit()
            finally:
                self._driver = None
