"""Tests for ActivityStateMachine."""

import pytest

from claufication.models.activity import ActivityState
from claufication.models.config import TimerConfig
from claufication.models.log_entry import EntryKind, LogEntry
from claufication.services.activity_state_machine import (
    NOTIFY_TIMER,
    SILENCE_TIMER,
    ActivityStateMachine,
    ActivityTrigger,
)

USER = LogEntry(kind=EntryKind.USER)
TURN_END = LogEntry(kind=EntryKind.SYSTEM, subtype="turn_duration")
OTHER = LogEntry(kind=EntryKind.OTHER)


def assistant(text: str = "", tool_use: bool = False) -> LogEntry:
    return LogEntry(kind=EntryKind.ASSISTANT, text=text, has_tool_invocation=tool_use)


@pytest.fixture
def machine(scheduler, mock_notifier, event_bus):
    """Create an ActivityStateMachine with default timers."""
    return ActivityStateMachine(
        scheduler=scheduler,
        notifier=mock_notifier,
        event_bus=event_bus,
        timers=TimerConfig(),
    )


class TestEntryRules:
    """Tests for the per-entry transition rules."""

    def test_initial_state_is_idle(self, machine):
        assert machine.state == ActivityState.IDLE
        assert machine.has_notification is False

    def test_user_entry_sets_working(self, machine):
        machine.handle_entries([USER])

        assert machine.state == ActivityState.WORKING

    def test_assistant_entry_sets_working_and_text(self, machine):
        machine.handle_entries([assistant("Looking at the code")])

        assert machine.state == ActivityState.WORKING
        assert machine.last_assistant_text == "Looking at the code"

    def test_empty_assistant_text_keeps_previous(self, machine):
        """Assistant entries without text keep the last non-empty text."""
        machine.handle_entries([assistant("Shall I continue?"), assistant("", tool_use=True)])

        assert machine.last_assistant_text == "Shall I continue?"
        assert machine.last_assistant_had_tool_use is True

    def test_contentless_assistant_keeps_tool_flag(self, machine, scheduler):
        """An assistant record with no content leaves the tool flag as it was."""
        contentless = LogEntry(kind=EntryKind.ASSISTANT, has_tool_invocation=None)

        machine.handle_entries([assistant("Running", tool_use=True), contentless])

        assert machine.last_assistant_had_tool_use is True
        assert machine.state == ActivityState.WORKING
        assert scheduler.is_pending(SILENCE_TIMER) is True

    def test_other_entries_do_not_change_state(self, machine):
        machine.handle_entries([OTHER, LogEntry(kind=EntryKind.SYSTEM, subtype="info")])

        assert machine.state == ActivityState.IDLE

    def test_empty_batch_is_noop(self, machine, scheduler):
        machine.handle_entries([])

        assert machine.state == ActivityState.IDLE
        assert scheduler.next_deadline() is None

    def test_transitions_recorded_with_triggers(self, machine):
        machine.handle_entries([USER, assistant("Done."), TURN_END])

        triggers = [t.trigger for t in machine.history]
        assert triggers == [ActivityTrigger.USER_MESSAGE, ActivityTrigger.TURN_ENDED]

    def test_state_change_events_emitted(self, machine, event_bus):
        machine.handle_entries([USER, TURN_END])

        events = event_bus.get_buffered_events("activity_state_changed")
        assert [e.data["to_state"] for e in events] == ["working", "waiting_input"]


class TestTurnEnd:
    """Tests for turn-end handling and the notify timer."""

    def test_statement_uses_short_delay(self, machine, scheduler, clock):
        machine.handle_entries([USER, assistant("Files updated."), TURN_END])

        assert machine.state == ActivityState.WAITING_INPUT
        handle = scheduler.get_pending(NOTIFY_TIMER)
        assert handle is not None
        assert handle.delay == 0.5

    def test_question_uses_long_delay(self, machine, scheduler):
        machine.handle_entries([USER, assistant("Proceed? (y/n)"), TURN_END])

        assert machine.state == ActivityState.WAITING_INPUT
        assert scheduler.get_pending(NOTIFY_TIMER).delay == 3.0

    def test_waiting_input_before_timer_fires(self, machine, mock_notifier):
        """State flips at turn end; the notification waits for the timer."""
        machine.handle_entries([assistant("Done."), TURN_END])

        assert machine.state == ActivityState.WAITING_INPUT
        assert machine.has_notification is False
        mock_notifier.notify_waiting_input.assert_not_called()

    def test_notify_fires_after_delay(self, machine, scheduler, clock, mock_notifier):
        machine.handle_entries([assistant("Done."), TURN_END])

        clock.advance(0.5)
        scheduler.fire_due()

        assert machine.has_notification is True
        mock_notifier.notify_waiting_input.assert_called_once_with("turn_ended")

    def test_question_notify_waits_full_delay(self, machine, scheduler, clock, mock_notifier):
        machine.handle_entries([assistant("Which option do you prefer?"), TURN_END])

        clock.advance(2.9)
        scheduler.fire_due()
        assert machine.has_notification is False

        clock.advance(0.1)
        scheduler.fire_due()
        assert machine.has_notification is True

    def test_turn_end_resets_tool_flag(self, machine):
        machine.handle_entries([assistant("", tool_use=True), TURN_END])

        assert machine.last_assistant_had_tool_use is False

    def test_notification_event_emitted(self, machine, scheduler, clock, event_bus):
        machine.handle_entries([assistant("Done."), TURN_END])
        clock.advance(1.0)
        scheduler.fire_due()

        events = event_bus.get_buffered_events("notification_fired")
        assert len(events) == 1
        assert events[0].data["reason"] == "turn_ended"

    def test_custom_delays(self, scheduler, mock_notifier, event_bus):
        machine = ActivityStateMachine(
            scheduler=scheduler,
            notifier=mock_notifier,
            event_bus=event_bus,
            timers=TimerConfig(question_delay=5.0, statement_delay=1.5),
        )

        machine.handle_entries([assistant("Done."), TURN_END])

        assert scheduler.get_pending(NOTIFY_TIMER).delay == 1.5


class TestUserEntryCancels:
    """A user entry always wins over pending notifications."""

    def test_user_cancels_pending_notify(self, machine, scheduler, clock, mock_notifier):
        machine.handle_entries([assistant("Done."), TURN_END])
        machine.handle_entries([USER])

        clock.advance(5.0)
        scheduler.fire_due()

        assert machine.state == ActivityState.WORKING
        assert machine.has_notification is False
        mock_notifier.notify_waiting_input.assert_not_called()

    def test_user_clears_notification_flag(self, machine, scheduler, clock, event_bus):
        machine.handle_entries([assistant("Done."), TURN_END])
        clock.advance(1.0)
        scheduler.fire_due()
        assert machine.has_notification is True

        machine.handle_entries([USER])

        assert machine.has_notification is False
        assert machine.state == ActivityState.WORKING
        assert len(event_bus.get_buffered_events("notification_cleared")) == 1

    @pytest.mark.parametrize(
        "prior",
        [
            [],
            [USER],
            [assistant("Working on it", tool_use=True)],
            [assistant("Done."), TURN_END],
        ],
    )
    def test_user_always_sets_working(self, machine, scheduler, prior):
        machine.handle_entries(prior)
        machine.handle_entries([USER])

        assert machine.state == ActivityState.WORKING
        assert scheduler.is_pending(NOTIFY_TIMER) is False
        assert machine.has_notification is False

    def test_user_in_same_batch_after_turn_end(self, machine, scheduler):
        """Entries are processed in order within one batch."""
        machine.handle_entries([assistant("Done."), TURN_END, USER])

        assert machine.state == ActivityState.WORKING
        assert scheduler.is_pending(NOTIFY_TIMER) is False

    def test_assistant_after_turn_end_does_not_cancel_notify(self, machine, scheduler, clock):
        """Only user entries cancel; the guard stops the stale notify."""
        machine.handle_entries([assistant("Done."), TURN_END])
        machine.handle_entries([assistant("One more thing")])

        clock.advance(1.0)
        scheduler.fire_due()

        assert machine.state == ActivityState.WORKING
        assert machine.has_notification is False


class TestSilenceTimer:
    """Tests for the tool-permission silence path."""

    def test_silence_after_tool_use_fires(self, machine, scheduler, clock, mock_notifier):
        machine.handle_entries([USER, assistant("Running tests", tool_use=True)])
        assert scheduler.get_pending(SILENCE_TIMER).delay == 1.0

        clock.advance(1.0)
        scheduler.fire_due()

        assert machine.state == ActivityState.WAITING_INPUT
        assert machine.has_notification is True
        mock_notifier.notify_waiting_input.assert_called_once_with("silence_timeout")
        assert machine.history[-1].trigger == ActivityTrigger.SILENCE_TIMEOUT

    def test_new_entries_reset_silence_timer(self, machine, scheduler, clock):
        """Output before the deadline pushes the silence timer back."""
        machine.handle_entries([assistant("", tool_use=True)])
        first_deadline = scheduler.get_pending(SILENCE_TIMER).deadline

        clock.advance(0.6)
        machine.handle_entries([OTHER])
        second = scheduler.get_pending(SILENCE_TIMER)
        assert second.deadline > first_deadline

        clock.advance(0.5)
        scheduler.fire_due()
        assert machine.state == ActivityState.WORKING
        assert machine.has_notification is False

        clock.advance(0.5)
        scheduler.fire_due()
        assert machine.state == ActivityState.WAITING_INPUT

    def test_tool_result_without_new_tool_cancels(self, machine, scheduler, clock):
        """An assistant entry without a tool call leaves the silence timer disarmed."""
        machine.handle_entries([assistant("", tool_use=True)])
        machine.handle_entries([assistant("Tests pass.")])

        assert scheduler.is_pending(SILENCE_TIMER) is False

        clock.advance(2.0)
        scheduler.fire_due()
        assert machine.state == ActivityState.WORKING

    def test_no_silence_timer_without_tool_use(self, machine, scheduler):
        machine.handle_entries([USER, assistant("Thinking about it")])

        assert scheduler.is_pending(SILENCE_TIMER) is False

    def test_turn_end_defuses_silence(self, machine, scheduler, clock, mock_notifier):
        """A turn end resets the tool flag, so the silence path stays quiet."""
        machine.handle_entries([assistant("", tool_use=True)])
        machine.handle_entries([TURN_END])

        clock.advance(0.5)
        scheduler.fire_due()

        mock_notifier.notify_waiting_input.assert_called_once_with("turn_ended")

    def test_silence_guard_rechecks_tool_flag(self, machine, scheduler, clock, mock_notifier):
        """A silence timer whose guard no longer holds is a no-op."""
        machine.handle_entries([assistant("", tool_use=True)])
        handle = scheduler.get_pending(SILENCE_TIMER)

        # Flag reset without touching the timer
        machine._last_assistant_had_tool_use = False
        clock.advance(1.0)
        scheduler.fire_due()

        assert handle.fired is True
        assert machine.state == ActivityState.WORKING
        mock_notifier.notify_waiting_input.assert_not_called()


class TestClearAndStop:
    """Tests for clear_notification, stop and snapshot."""

    def test_clear_notification(self, machine, scheduler, clock):
        machine.handle_entries([assistant("Done."), TURN_END])
        clock.advance(1.0)
        scheduler.fire_due()

        machine.clear_notification()

        assert machine.has_notification is False
        assert machine.state == ActivityState.WAITING_INPUT

    def test_clear_without_notification_emits_nothing(self, machine, event_bus):
        machine.clear_notification()

        assert event_bus.get_buffered_events("notification_cleared") == []

    def test_stop_cancels_timers(self, machine, scheduler):
        machine.handle_entries([assistant("", tool_use=True)])
        machine.handle_entries([TURN_END])

        machine.stop()

        assert scheduler.next_deadline() is None

    def test_snapshot(self, machine):
        machine.handle_entries([assistant("Proceed?"), TURN_END])

        snapshot = machine.snapshot()

        assert snapshot.state == ActivityState.WAITING_INPUT
        assert snapshot.state_label == "Waiting for Input"
        assert snapshot.last_assistant_text == "Proceed?"
        assert snapshot.has_notification is False
