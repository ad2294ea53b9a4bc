"""
Main touchscreen listener that feeds device events through arbitration.
"""

import logging
from typing import Dict, List, Optional

from evdev import InputEvent, UInputError, ecodes

from ..device.device_manager import DeviceManager
from ..utils.logger import TouchLogger
from .lifecycle import LifecycleController
from .policy import Disposition
from .tracker import TouchEvent, TouchPhase

logger = logging.getLogger(__name__)

MT_CODES = frozenset(
    code for name, code in ecodes.ecodes.items() if name.startswith("ABS_MT_")
)


class TouchListener:
    """Reads multitouch frames, arbitrates each contact and forwards the rest.

    Contacts are keyed by their ABS_MT_TRACKING_ID. Events of suppressed
    contacts are removed from the frame before it is written to the virtual
    device; everything that is not a multitouch axis passes unchanged.
    """

    def __init__(
        self,
        controller: LifecycleController,
        device_manager: Optional[DeviceManager] = None,
        dry_run: bool = False,
        touch_logger: Optional[TouchLogger] = None,
    ):
        self.controller = controller
        self.device_manager = device_manager or DeviceManager()
        self.dry_run = dry_run
        self.logger = touch_logger or TouchLogger()

        # State management
        self.running = False
        self.current_slot = 0
        self.slot_ids: Dict[int, int] = {}  # slot -> tracking id
        self._out_slot: Optional[int] = None
        self._frame: Dict[int, Disposition] = {}

    def start(self) -> bool:
        """Open the device and enable arbitration."""
        device = self.device_manager.find_device()
        if not device:
            print("❌ No touchscreen found")
            return False

        if not self.dry_run:
            try:
                self.device_manager.grab()
            except (UInputError, OSError) as e:
                print(f"❌ Could not take over the touchscreen: {e}")
                self.device_manager.close()
                self.logger.close()
                return False
        self.controller.enable()
        self.running = True
        self._print_startup_info()
        return True

    def stop(self):
        """Disable arbitration and release the device."""
        self.running = False
        self.controller.disable()
        self.device_manager.close()
        self.logger.close()

    def _print_startup_info(self):
        info = self.device_manager.get_device_info()
        print(f"✅ Found: {info['name']} ({info['path']})")
        print(f"✋ Finger threshold: {self.controller.threshold}")
        if self.dry_run:
            print("👀 Dry run: observing only, nothing is grabbed or suppressed")
        print("🎯 Ready!")

    def run(self):
        """Process frames until stop() is called or the device goes away."""
        try:
            event_batch = []
            for event in self.device_manager.device.read_loop():
                if not self.running:
                    break

                event_batch.append(event)

                if event.type == ecodes.EV_SYN and event.code == ecodes.SYN_REPORT:
                    self.process_frame(event_batch)
                    event_batch = []

        except OSError as e:
            logger.error(f"Error in event loop: {e}")

    def process_frame(self, event_batch: List[InputEvent]) -> List[InputEvent]:
        """Arbitrate one SYN_REPORT-terminated frame and return what was forwarded."""
        if any(ev.type == ecodes.EV_SYN and ev.code == ecodes.SYN_DROPPED for ev in event_batch):
            return self._resync(event_batch[-1])

        self._frame = {}
        forwarded = []
        for ev in event_batch:
            if ev.type != ecodes.EV_ABS or ev.code not in MT_CODES:
                forwarded.append(ev)
                continue

            if ev.code == ecodes.ABS_MT_SLOT:
                self.current_slot = ev.value
                continue

            disposition = self._handle_mt_event(ev)
            if disposition is Disposition.PASS:
                self._select_slot(forwarded, ev)
                forwarded.append(ev)

        self._forward(forwarded)
        return forwarded

    def _handle_mt_event(self, ev: InputEvent) -> Disposition:
        slot = self.current_slot

        if ev.code == ecodes.ABS_MT_TRACKING_ID:
            if ev.value == -1:
                disposition = self._dispatch(TouchPhase.END, slot)
                self.slot_ids.pop(slot, None)
            else:
                if slot in self.slot_ids:
                    # New contact without a lift: the old one is gone
                    self._dispatch(TouchPhase.END, slot)
                self.slot_ids[slot] = ev.value
                disposition = self._dispatch(TouchPhase.BEGIN, slot)
            self._frame[slot] = disposition
            return disposition

        if slot in self._frame:
            return self._frame[slot]
        disposition = self._dispatch(TouchPhase.UPDATE, slot)
        self._frame[slot] = disposition
        return disposition

    def _dispatch(self, phase: TouchPhase, slot: int) -> Disposition:
        tracking_id = self.slot_ids.get(slot)
        if tracking_id is None:
            # Contact that started before we were listening
            return Disposition.PASS
        event = TouchEvent(phase, tracking_id)
        disposition = self.controller.handle_event(event)
        self.logger.log_disposition(event, disposition, self.controller.active_touches)
        return disposition

    def _select_slot(self, forwarded: List[InputEvent], ev: InputEvent):
        slot = self.current_slot
        if self._out_slot != slot:
            forwarded.append(InputEvent(ev.sec, ev.usec, ecodes.EV_ABS, ecodes.ABS_MT_SLOT, slot))
            self._out_slot = slot

    def _resync(self, last: InputEvent) -> List[InputEvent]:
        """Recover from a kernel buffer overrun.

        Every tracked contact is cancelled, and contacts that were being
        forwarded get a lift on the virtual device.
        """
        logger.warning(f"SYN_DROPPED: cancelling {len(self.slot_ids)} tracked contact(s)")
        forwarded = []
        for slot in sorted(self.slot_ids):
            disposition = self._dispatch(TouchPhase.CANCEL, slot)
            if disposition is Disposition.PASS:
                forwarded.append(InputEvent(last.sec, last.usec, ecodes.EV_ABS, ecodes.ABS_MT_SLOT, slot))
                forwarded.append(InputEvent(last.sec, last.usec, ecodes.EV_ABS, ecodes.ABS_MT_TRACKING_ID, -1))
                self._out_slot = slot
        self.slot_ids.clear()
        self._frame = {}

        if forwarded:
            forwarded.append(InputEvent(last.sec, last.usec, ecodes.EV_SYN, ecodes.SYN_REPORT, 0))
        self._forward(forwarded)
        return forwarded

    def _forward(self, events: List[InputEvent]):
        if self.dry_run or self.device_manager.uinput is None:
            return
        if all(ev.type == ecodes.EV_SYN for ev in events):
            return
        for ev in events:
            self.device_manager.uinput.write_event(ev)
