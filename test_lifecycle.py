"""Tests for enable/disable control and fail-open behaviour."""

import pytest

from touch_arbiter.config.settings import ArbitrationConfig
from touch_arbiter.core.lifecycle import LifecycleController
from touch_arbiter.core.policy import Disposition
from touch_arbiter.core.signals import SignalHub
from touch_arbiter.core.tracker import TouchEvent, TouchPhase
from touch_arbiter.exceptions import ConfigError

FOCUS = ArbitrationConfig.FOCUS_CHANGED_SIGNAL
FULLSCREEN = ArbitrationConfig.FULLSCREEN_CHANGED_SIGNAL
TOUCH = ArbitrationConfig.TOUCH_EVENT_SIGNAL


class Switch:
    def __init__(self, enabled=True):
        self.enabled = enabled


@pytest.fixture
def signals():
    return SignalHub()


@pytest.fixture
def events():
    return SignalHub()


class TestSignalHub:
    def test_emit_returns_results_in_order(self, signals):
        signals.connect("x", lambda v: v + 1)
        signals.connect("x", lambda v: v * 10)
        signals.connect("y", lambda v: "other")
        assert signals.emit("x", 2) == [3, 20]

    def test_disconnect(self, signals):
        handle = signals.connect("x", lambda: 1)
        assert signals.is_connected(handle)
        signals.disconnect(handle)
        assert not signals.is_connected(handle)
        assert signals.emit("x") == []

    def test_disconnect_unknown_handle_is_ignored(self, signals):
        signals.disconnect(12345)

    def test_handles_are_unique(self, signals):
        handles = {signals.connect("x", lambda: None) for _ in range(5)}
        assert len(handles) == 5


class TestLifecycleController:
    def test_starts_disabled(self):
        controller = LifecycleController()
        assert not controller.enabled
        assert controller.handle_event(TouchEvent(TouchPhase.BEGIN, 1)) is Disposition.PASS

    def test_round_trip_restores_flags(self):
        subsystems = [Switch(True), Switch(False), Switch(True)]
        controller = LifecycleController(subsystems)

        controller.enable()
        assert [s.enabled for s in subsystems] == [False, False, False]

        controller.disable()
        assert [s.enabled for s in subsystems] == [True, False, True]

    def test_single_subsystem_scenario(self):
        s1 = Switch(True)
        controller = LifecycleController([s1])
        controller.enable()
        assert s1.enabled is False
        controller.disable()
        assert s1.enabled is True

    def test_enable_twice_does_not_double_subscribe(self, signals, events):
        controller = LifecycleController([Switch()], signals=signals, event_source=events)
        controller.enable()
        controller.enable()

        assert signals.handler_count(FOCUS) == 1
        assert signals.handler_count(FULLSCREEN) == 1
        assert events.handler_count(TOUCH) == 1
        assert len(controller.lifecycle.listener_handles) == 3

    def test_enable_twice_keeps_original_flags(self):
        switch = Switch(True)
        controller = LifecycleController([switch])
        controller.enable()
        controller.enable()
        controller.disable()
        assert switch.enabled is True

    def test_disable_while_disabled_is_noop(self):
        switch = Switch(False)
        controller = LifecycleController([switch])
        controller.disable()
        assert switch.enabled is False
        assert not controller.enabled

    def test_disable_twice(self, signals):
        switch = Switch(True)
        controller = LifecycleController([switch], signals=signals)
        controller.enable()
        controller.disable()
        switch.enabled = False
        controller.disable()
        assert switch.enabled is False

    def test_disable_unsubscribes_everything(self, signals, events):
        controller = LifecycleController([Switch()], signals=signals, event_source=events)
        controller.enable()
        controller.disable()

        assert signals.handler_count(FOCUS) == 0
        assert signals.handler_count(FULLSCREEN) == 0
        assert events.handler_count(TOUCH) == 0
        assert controller.lifecycle.listener_handles == set()

    @pytest.mark.parametrize("signal", [FOCUS, FULLSCREEN])
    def test_reassertion_signal_resuppresses(self, signals, signal):
        switch = Switch(True)
        controller = LifecycleController([switch], signals=signals)
        controller.enable()

        switch.enabled = True
        signals.emit(signal)
        assert switch.enabled is False
        assert controller.stats().reassert_passes == 1

        controller.disable()
        assert switch.enabled is True

    def test_reassertion_ignored_after_disable(self, signals):
        switch = Switch(True)
        controller = LifecycleController([switch], signals=signals)
        controller.enable()
        controller.disable()
        controller.reassert()
        assert switch.enabled is True

    def test_subsystem_provider_requeried_each_pass(self, signals):
        current = [Switch(True)]
        controller = LifecycleController(lambda: current, signals=signals)
        controller.enable()

        late = Switch(True)
        current.append(late)
        signals.emit(FOCUS)
        assert late.enabled is False

        controller.disable()
        assert all(s.enabled for s in current)

    def test_subsystem_absent_for_one_pass_restored_on_disable(self, signals):
        switch = Switch(True)
        passes = [[switch], [], [switch]]
        controller = LifecycleController(lambda: passes.pop(0), signals=signals)
        controller.enable()
        signals.emit(FOCUS)
        signals.emit(FULLSCREEN)
        assert switch.enabled is False

        controller.disable()
        assert switch.enabled is True

    def test_events_through_event_source(self, events):
        controller = LifecycleController(event_source=events)
        controller.enable()
        results = [
            events.emit(TOUCH, TouchEvent(TouchPhase.BEGIN, touch_id))[0]
            for touch_id in "ABC"
        ]
        assert results == [Disposition.PASS, Disposition.PASS, Disposition.SUPPRESS]

    def test_disable_mid_gesture_clears_state(self):
        controller = LifecycleController()
        controller.enable()
        for touch_id in (1, 2, 3):
            controller.handle_event(TouchEvent(TouchPhase.BEGIN, touch_id))
        assert controller.stats().active_touches == 3

        controller.disable()
        assert controller.stats().active_touches == 0
        assert controller.handle_event(TouchEvent(TouchPhase.UPDATE, 3)) is Disposition.PASS

    def test_reenable_starts_fresh(self):
        controller = LifecycleController()
        controller.enable()
        for touch_id in (1, 2, 3):
            controller.handle_event(TouchEvent(TouchPhase.BEGIN, touch_id))
        controller.disable()
        controller.enable()
        assert controller.handle_event(TouchEvent(TouchPhase.BEGIN, 4)) is Disposition.PASS
        assert controller.stats().events_seen == 1

    def test_custom_threshold(self):
        controller = LifecycleController(threshold=2)
        controller.enable()
        assert controller.handle_event(TouchEvent(TouchPhase.BEGIN, 1)) is Disposition.PASS
        assert controller.handle_event(TouchEvent(TouchPhase.BEGIN, 2)) is Disposition.SUPPRESS

    def test_invalid_threshold(self):
        with pytest.raises(ConfigError):
            LifecycleController(threshold=0)

    def test_context_manager(self):
        switch = Switch(True)
        with LifecycleController([switch]) as controller:
            assert controller.enabled
            assert switch.enabled is False
        assert not controller.enabled
        assert switch.enabled is True

    def test_missing_subsystem_does_not_block_others(self):
        switch = Switch(True)
        controller = LifecycleController([None, switch])
        controller.enable()
        assert switch.enabled is False
        assert controller.stats().subsystem_warnings == 1
        controller.disable()
        assert switch.enabled is True


class TestFailOpen:
    def test_policy_error_disables_and_restores(self, signals):
        switch = Switch(True)
        controller = LifecycleController([switch], signals=signals)
        controller.enable()

        def boom(event):
            raise RuntimeError("corrupt")

        controller.policy.decide = boom
        assert controller.handle_event(TouchEvent(TouchPhase.BEGIN, 1)) is Disposition.PASS
        assert not controller.enabled
        assert switch.enabled is True
        assert signals.handler_count(FOCUS) == 0
        assert controller.stats().fail_opens == 1

    def test_provider_error_on_enable_fails_open(self, signals):
        def provider():
            raise RuntimeError("host not ready")

        controller = LifecycleController(provider, signals=signals)
        controller.enable()
        assert not controller.enabled
        assert signals.handler_count(FOCUS) == 0
        assert controller.stats().fail_opens == 1

    def test_provider_error_on_reassert_fails_open(self, signals):
        switch = Switch(True)
        calls = []

        def provider():
            calls.append(1)
            if len(calls) > 1:
                raise RuntimeError("host went away")
            return [switch]

        controller = LifecycleController(provider, signals=signals)
        controller.enable()
        signals.emit(FOCUS)
        assert not controller.enabled
        assert switch.enabled is True


class TestStats:
    def test_counts(self):
        controller = LifecycleController()
        controller.enable()
        for touch_id in (1, 2, 3):
            controller.handle_event(TouchEvent(TouchPhase.BEGIN, touch_id))
        controller.handle_event(TouchEvent(TouchPhase.END, 42))
        controller.handle_event(TouchEvent(TouchPhase.UPDATE, 9))
        controller.handle_event(TouchEvent(TouchPhase.BEGIN, 1))

        stats = controller.stats()
        assert stats.enabled
        assert stats.events_seen == 6
        assert stats.passed == 4
        assert stats.suppressed == 2
        assert stats.unmatched_ends == 1
        assert stats.synthetic_begins == 1
        assert stats.duplicate_begins == 1
        assert stats.active_touches == 4
