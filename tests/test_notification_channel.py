"""Tests for the auto-dismissing notification channel."""
from state.session_state import Severity


def test_publish_shows_notification_and_starts_timer(channel, timers):
    notification = channel.publish("File uploaded successfully!", Severity.SUCCESS)

    assert channel.current is notification
    assert notification.severity == Severity.SUCCESS
    assert len(timers) == 1
    assert timers[0].started
    assert timers[0].interval == 5.0
    assert timers[0].daemon


def test_timer_expiry_clears_notification(channel, timers):
    channel.publish("CSV file selected!")
    timers[0].fire()
    assert channel.current is None


def test_dismiss_clears_and_cancels_timer(channel, timers):
    channel.publish("Training failed: boom", Severity.ERROR)
    channel.dismiss()

    assert channel.current is None
    assert timers[0].cancelled


def test_second_publish_replaces_and_resets_window(channel, timers):
    channel.publish("first", Severity.INFO)
    second = channel.publish("second", Severity.ERROR)

    assert channel.current is second
    assert timers[0].cancelled
    assert not timers[1].cancelled

    # The superseded timer must not clear the new notification.
    timers[0].function(*timers[0].args)
    assert channel.current is second

    timers[1].fire()
    assert channel.current is None


def test_severity_accepts_plain_strings(channel):
    notification = channel.publish("Prediction successful!", "success")
    assert notification.severity == Severity.SUCCESS


def test_dismiss_without_notification_is_harmless(channel):
    channel.dismiss()
    assert channel.current is None
