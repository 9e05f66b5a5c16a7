from crewnotify.notifications.categories import get_notification_category, should_send_notification
from crewnotify.notifications.compose import PushContent
from crewnotify.notifications.context import NotificationContext, build_context, get_context, set_context
from crewnotify.notifications.notifier import deliver, deliver_isolated, notify_users
from crewnotify.notifications.tokens import PushTokenCollector

__all__ = [
    "NotificationContext",
    "PushContent",
    "PushTokenCollector",
    "build_context",
    "deliver",
    "deliver_isolated",
    "get_context",
    "get_notification_category",
    "notify_users",
    "set_context",
    "should_send_notification",
]
