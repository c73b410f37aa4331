from .mailer import EmailNotifier, NotificationError, get_notifier

__all__ = ["EmailNotifier", "NotificationError", "get_notifier"]
