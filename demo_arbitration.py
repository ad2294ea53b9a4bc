#!/usr/bin/env python3
"""Touch Arbitration Demo with Visual Feedback.

Every finger on the window is drawn in the colour of its disposition:
green contacts pass through to the application, red ones are suppressed
as part of a system gesture. The left mouse button acts as one extra finger.
"""

import logging
from typing import Dict, Tuple

import pygame

from touch_arbiter.config.settings import ArbitrationConfig
from touch_arbiter.core.lifecycle import LifecycleController
from touch_arbiter.core.policy import Disposition
from touch_arbiter.core.signals import SignalHub
from touch_arbiter.core.tracker import TouchEvent, TouchPhase

MOUSE_ID = "mouse"


class DemoSubsystem:
    """Stand-in for a desktop swipe handler."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.enabled = True


class ArbitrationDemo:
    """Interactive demo for touch arbitration."""

    def __init__(self) -> None:
        pygame.init()
        self.screen = pygame.display.set_mode((1600, 1000))
        pygame.display.set_caption("Touch Arbitration Demo")

        self.subsystems = [
            DemoSubsystem("overview swipe"),
            DemoSubsystem("workspace swipe"),
        ]
        self.signals = SignalHub()
        self.events = SignalHub()
        self.controller = LifecycleController(
            subsystems=self.subsystems,
            signals=self.signals,
            event_source=self.events,
        )
        self.controller.enable()

        self.contacts: Dict[object, Tuple[Tuple[int, int], Disposition]] = {}

        # Colors
        self.BLACK = (0, 0, 0)
        self.WHITE = (255, 255, 255)
        self.RED = (220, 40, 40)
        self.GREEN = (40, 180, 60)
        self.GRAY = (128, 128, 128)

        # Fonts
        self.font = pygame.font.Font(None, 48)
        self.small_font = pygame.font.Font(None, 32)

    def run(self) -> None:
        """Run the demo loop."""
        clock = pygame.time.Clock()
        while True:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    return
                elif event.type == pygame.FINGERDOWN:
                    self.touch(TouchPhase.BEGIN, event.finger_id, self.finger_pos(event))
                elif event.type == pygame.FINGERMOTION:
                    self.touch(TouchPhase.UPDATE, event.finger_id, self.finger_pos(event))
                elif event.type == pygame.FINGERUP:
                    self.touch(TouchPhase.END, event.finger_id, self.finger_pos(event))
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    if event.button == 1 and not getattr(event, "touch", False):
                        self.touch(TouchPhase.BEGIN, MOUSE_ID, event.pos)
                elif event.type == pygame.MOUSEMOTION:
                    if MOUSE_ID in self.contacts and not getattr(event, "touch", False):
                        self.touch(TouchPhase.UPDATE, MOUSE_ID, event.pos)
                elif event.type == pygame.MOUSEBUTTONUP:
                    if event.button == 1 and not getattr(event, "touch", False):
                        self.touch(TouchPhase.END, MOUSE_ID, event.pos)
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_e:
                        self.controller.enable()
                    elif event.key == pygame.K_d:
                        self.controller.disable()
                    elif event.key == pygame.K_f:
                        self.signals.emit(ArbitrationConfig.FOCUS_CHANGED_SIGNAL)
                    elif event.key == pygame.K_u:
                        self.reenable_behind_back()

            self.draw()
            clock.tick(60)

    def finger_pos(self, event) -> Tuple[int, int]:
        width, height = self.screen.get_size()
        return int(event.x * width), int(event.y * height)

    def touch(self, phase: TouchPhase, touch_id, pos: Tuple[int, int]) -> None:
        """Send one touch event through the engine and record its disposition."""
        results = self.events.emit(
            ArbitrationConfig.TOUCH_EVENT_SIGNAL, TouchEvent(phase, touch_id)
        )
        disposition = results[0] if results else Disposition.PASS
        if phase.is_terminal:
            self.contacts.pop(touch_id, None)
        else:
            self.contacts[touch_id] = (pos, disposition)

    def reenable_behind_back(self) -> None:
        """Simulate the desktop switching the swipe handlers back on."""
        for subsystem in self.subsystems:
            subsystem.enabled = True

    def draw(self) -> None:
        """Render the status panel and current contacts."""
        self.screen.fill(self.WHITE)

        stats = self.controller.stats()
        state = "ENABLED" if stats.enabled else "DISABLED"
        lines = [
            f"Arbitration: {state}   threshold: {self.controller.threshold} fingers",
            f"Active touches: {stats.active_touches}   passed: {stats.passed}   "
            f"suppressed: {stats.suppressed}",
            "",
            "Controls:",
            "E: Enable   D: Disable   F: Focus changed   U: Re-enable handlers",
        ]
        for subsystem in self.subsystems:
            flag = "on" if subsystem.enabled else "off"
            lines.append(f"  {subsystem.name}: {flag}")

        y = 10
        for line in lines:
            txt = self.small_font.render(line, True, self.BLACK)
            self.screen.blit(txt, (10, y))
            y += 30

        for touch_id, (pos, disposition) in self.contacts.items():
            color = self.RED if disposition is Disposition.SUPPRESS else self.GREEN
            pygame.draw.circle(self.screen, color, pos, 40)
            label = self.small_font.render(str(touch_id), True, self.WHITE)
            self.screen.blit(label, (pos[0] - 10, pos[1] - 10))

        pygame.display.flip()

    def close(self) -> None:
        self.controller.disable()


def main() -> None:
    """Entry point for the demo."""
    logging.basicConfig(level=logging.INFO)
    demo = ArbitrationDemo()
    try:
        demo.run()
    except KeyboardInterrupt:
        pass
    finally:
        demo.close()
        pygame.quit()


if __name__ == "__main__":
    main()
