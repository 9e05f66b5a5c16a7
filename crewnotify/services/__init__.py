from crewnotify.services.push import ExpoPushClient, PushMessage, PushTicket, PushTransport, is_expo_push_token

__all__ = ["ExpoPushClient", "PushMessage", "PushTicket", "PushTransport", "is_expo_push_token"]
