"""
Shorts Blocker - command line entry point.

Usage:
    python shorts_blocker.py --watch                      # block live on the device
    python shorts_blocker.py --classify dump.xml --package com.instagram.android
    python shorts_blocker.py --set-action home
    python shorts_blocker.py --get-action
    python shorts_blocker.py --analyze decision_logs
"""
import sys
import signal
import logging
import argparse

from config import Config, BlockAction, BlockActionStore, setup_environment
from ui_tree import parse_ui_xml
from event_router import AccessibilityEvent, EventRouter, EventType
from flow_logger import DecisionLogger
from adb_controller import ADBController, DeviceError

logger = logging.getLogger(__name__)


def classify_file(path: str, package: str) -> int:
    """Classify a saved XML dump without touching a device."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            root = parse_ui_xml(f.read())
    except (OSError, UnicodeDecodeError) as e:
        print(f"ERROR: cannot read {path}: {e}")
        return 1

    performed = []
    router = EventRouter(navigate=performed.append)
    result = router.handle(AccessibilityEvent(
        package=package,
        event_type=EventType.WINDOW_STATE_CHANGED,
        root=root,
    ))

    if result is None:
        print(f"Package {package} is not monitored")
        return 1

    print(f"Rule:    {result.detection.rule}")
    print(f"Blocked: {result.detection.is_blocked}")
    for name, value in result.detection.predicates.items():
        print(f"  {name:<18} {value}")
    return 0


def watch(store: BlockActionStore, log_dir: str, no_log: bool, nav: str = "appium") -> int:
    """Monitor the connected device and block shorts live."""
    # Appium is only needed for live monitoring
    from appium_ui_controller import AppiumUIController
    from device_monitor import DeviceMonitor

    try:
        controller = AppiumUIController.connect()
    except DeviceError as e:
        print(f"ERROR: {e}")
        return 1

    if nav == "adb":
        navigate = ADBController().perform_navigation
    else:
        navigate = controller.perform_navigation

    decision_logger = None if no_log else DecisionLogger(log_dir=log_dir)
    router = EventRouter(
        navigate=navigate,
        action_provider=store.get,
        decision_logger=decision_logger,
    )
    monitor = DeviceMonitor(controller, router)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, stopping...")
        monitor.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        monitor.run()
    finally:
        controller.quit()
        if decision_logger:
            decision_logger.close()
            print(f"Decision log: {decision_logger.log_file}")

    print(f"Blocks performed: {router.dispatcher.performed_count}, "
          f"suppressed: {router.dispatcher.suppressed_count}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Shorts Blocker - leave YouTube Shorts and Instagram Reels automatically'
    )
    parser.add_argument('--prefs', default=None,
                        help=f'Preferences file (default: {Config.PREFS_FILE})')
    parser.add_argument('--log-dir', default=Config.LOGS_DIR,
                        help=f'Decision log directory (default: {Config.LOGS_DIR})')
    parser.add_argument('--no-log', action='store_true',
                        help='Do not write decision logs')
    parser.add_argument('--package', default=Config.YOUTUBE_PACKAGE,
                        help='App package for --classify')
    parser.add_argument('--nav', choices=['appium', 'adb'], default='appium',
                        help='How --watch performs block actions (default: appium)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Log every predicate (DEBUG)')

    # Action flags
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--watch', action='store_true',
                       help='Monitor the connected device and block live')
    group.add_argument('--classify', metavar='XML_FILE',
                       help='Classify a saved UI dump')
    group.add_argument('--set-action', choices=[a.name.lower() for a in BlockAction],
                       help='Set the block action')
    group.add_argument('--get-action', action='store_true',
                       help='Show the configured block action')
    group.add_argument('--analyze', metavar='LOG_DIR',
                       help='Summarize decision logs')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s [%(levelname)s] %(message)s'
    )
    setup_environment()

    store = BlockActionStore(args.prefs)

    if args.set_action:
        store.set(BlockAction.from_name(args.set_action))
        print(f"Block action: {store.get().name}")
        return 0

    if args.get_action:
        print(f"Block action: {store.get().name}")
        return 0

    if args.analyze:
        import analyze_logs
        return analyze_logs.main(args.analyze)

    if args.classify:
        return classify_file(args.classify, args.package)

    return watch(store, args.log_dir, args.no_log, args.nav)


if __name__ == "__main__":
    sys.exit(main())
