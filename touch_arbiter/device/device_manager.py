"""
Device management for touchscreen discovery, grabbing and forwarding.
"""

import evdev
from evdev import InputDevice, UInput, ecodes
import logging
from typing import Optional

from ..config.settings import ArbitrationConfig

logger = logging.getLogger(__name__)


def is_multitouch(device) -> bool:
    """True if the device reports multitouch protocol B slots."""
    caps = device.capabilities()
    abs_caps = caps.get(ecodes.EV_ABS, [])
    abs_codes = [code for code, _ in abs_caps]
    return ecodes.ABS_MT_SLOT in abs_codes


class DeviceManager:
    """Manages touchscreen discovery, exclusive access and the virtual clone."""

    def __init__(self, device_path: Optional[str] = None):
        self.device_path = device_path
        self.device = None
        self.uinput = None
        self.grabbed = False

    def find_device(self):
        """Open the configured device, or the first multitouch one."""
        if self.device_path:
            device = InputDevice(self.device_path)
            if not is_multitouch(device):
                logger.error(f"{device.path} ({device.name}) has no multitouch slots")
                device.close()
                return None
            self.device = device
            logger.info(f"Using touchscreen: {device.name}")
            return device

        for path in evdev.list_devices():
            device = InputDevice(path)
            if is_multitouch(device):
                self.device = device
                logger.info(f"Found touchscreen: {device.name} ({device.path})")
                return device
            device.close()

        logger.error("No touchscreen device found")
        return None

    def grab(self):
        """Take exclusive access and create the virtual device passed events go to."""
        if self.device is None or self.grabbed:
            return
        self.uinput = UInput.from_device(
            self.device, name=ArbitrationConfig.VIRTUAL_DEVICE_NAME
        )
        self.device.grab()
        self.grabbed = True
        logger.info(f"Grabbed {self.device.name}, forwarding to '{self.uinput.name}'")

    def release(self):
        """Give the device back and remove the virtual clone."""
        if self.device is not None and self.grabbed:
            try:
                self.device.ungrab()
            except OSError as e:
                logger.warning(f"Could not ungrab {self.device.name}: {e}")
            self.grabbed = False
        if self.uinput is not None:
            self.uinput.close()
            self.uinput = None

    def close(self):
        self.release()
        if self.device is not None:
            self.device.close()
            self.device = None

    def get_device_info(self):
        """Get device information."""
        return {
            'device': self.device,
            'name': self.device.name if self.device else None,
            'path': self.device.path if self.device else None,
            'grabbed': self.grabbed,
        }
