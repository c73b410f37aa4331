"""
E-mail delivery for customer notifications.

Delivery is best-effort from the caller's point of view: the notifier raises
``NotificationError`` on transport failure and the calling service decides to
log and move on. With no ``SMTP_HOST`` configured every send is a logged no-op.
"""
from email.message import EmailMessage

import aiosmtplib
import structlog

from shared.config import settings
from . import templates

logger = structlog.get_logger(__name__)


class NotificationError(Exception):
    pass


class EmailNotifier:
    def __init__(
        self,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        username: str = settings.SMTP_USER,
        password: str = settings.SMTP_PASS,
        from_name: str = settings.SMTP_FROM_NAME,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_name = from_name

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    async def send(self, to: str, subject: str, body: str) -> None:
        if not self.enabled:
            logger.info("email.skipped", to=to, subject=subject, reason="smtp_not_configured")
            return

        message = EmailMessage()
        message["From"] = f"{self.from_name} <{self.username}>"
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=self.port == 465,
                start_tls=self.port == 587,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("email.failed", to=to, subject=subject, error=str(e))
            raise NotificationError("Email could not be sent") from e

        logger.info("email.sent", to=to, subject=subject)

    async def welcome(self, user) -> None:
        await self.send(user.email, *templates.welcome(user))

    async def order_created(self, buyer, order) -> None:
        await self.send(buyer.email, *templates.order_confirmation(buyer, order))

    async def order_status_changed(self, buyer, order) -> None:
        await self.send(buyer.email, *templates.order_status_update(buyer, order))


def get_notifier() -> EmailNotifier:
    """FastAPI dependency; override it to swap the transport."""
    return EmailNotifier()
