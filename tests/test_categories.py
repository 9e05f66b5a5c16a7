"""Tests for the per-user notification category filter."""
import logging

import pytest

from crewnotify.notifications.categories import (
    CATEGORIES,
    NOTIFICATION_TYPE_TO_CATEGORY,
    get_notification_category,
    should_send_notification,
)


@pytest.mark.parametrize("notification_type", sorted(NOTIFICATION_TYPE_TO_CATEGORY))
def test_stored_category_boolean_is_returned(notification_type):
    category = NOTIFICATION_TYPE_TO_CATEGORY[notification_type]
    enabled = {c: True for c in CATEGORIES}
    disabled = {**enabled, category: False}
    assert should_send_notification(enabled, notification_type) is True
    assert should_send_notification(disabled, notification_type) is False


@pytest.mark.parametrize("notification_type", sorted(NOTIFICATION_TYPE_TO_CATEGORY))
def test_absent_settings_allow_everything(notification_type):
    assert should_send_notification(None, notification_type) is True


def test_missing_category_key_counts_as_enabled():
    assert should_send_notification({"pollsAndVoting": False}, "event_created") is True


def test_unknown_type_fails_open_with_one_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="crewnotify.notifications.categories"):
        assert should_send_notification({c: False for c in CATEGORIES}, "brand_new_type") is True
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "brand_new_type" in warnings[0].getMessage()


def test_every_type_maps_to_a_known_category():
    assert set(NOTIFICATION_TYPE_TO_CATEGORY.values()) <= set(CATEGORIES)
    assert get_notification_category("poke_crew") == "messagesAndCommunication"
    assert get_notification_category("contact_joined") == "socialAndDiscovery"
    assert get_notification_category("nope") is None
