#!/usr/bin/env python3
"""
Touch Arbiter - Main Entry Point
Suppresses multi-finger touchscreen gestures before they reach the desktop.
"""

import argparse
import logging

from touch_arbiter.config.settings import ArbitrationConfig
from touch_arbiter.core.lifecycle import LifecycleController
from touch_arbiter.core.listener import TouchListener
from touch_arbiter.device.device_manager import DeviceManager
from touch_arbiter.exceptions import ConfigError
from touch_arbiter.utils.logger import TouchLogger

EPILOG = (
    "This front-end only filters the grabbed touchscreen. It toggles no host "
    "gesture subsystems and listens to no focus or fullscreen signals: a host "
    "integration supplies those through LifecycleController(subsystems=, "
    "signals=, event_source=)."
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[-1], epilog=EPILOG)
    parser.add_argument("--threshold", type=int, default=ArbitrationConfig.FINGER_THRESHOLD,
                        help="Finger count treated as a system gesture (default: %(default)s)")
    parser.add_argument("--device", metavar="PATH",
                        help="Touchscreen event device (default: first multitouch device)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Log dispositions without grabbing the device")
    parser.add_argument("--debug-log", metavar="FILE", default=ArbitrationConfig.DEBUG_LOG_FILE,
                        help="Write every decision to FILE")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print each touch decision")
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for the touch arbiter."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        controller = LifecycleController(threshold=args.threshold)
    except ConfigError as e:
        print(f"❌ {e}")
        return 2

    listener = TouchListener(
        controller,
        device_manager=DeviceManager(args.device),
        dry_run=args.dry_run,
        touch_logger=TouchLogger(args.debug_log, verbose=args.verbose),
    )

    if not listener.start():
        return 1

    try:
        listener.run()
    except KeyboardInterrupt:
        print("\n👋 Stopping...")
    finally:
        listener.logger.log_stats(controller.stats())
        listener.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
