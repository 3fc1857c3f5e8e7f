import logging
from typing import Protocol

from notus.env import SRC_LOG_LEVELS
from notus.services.email.graph_mail_client import (
    GraphMailClient,
    render_deletion_email,
    render_deletion_subject,
    render_reactivation_email,
    render_reactivation_subject,
)

log = logging.getLogger(__name__)
log.setLevel(SRC_LOG_LEVELS["EMAIL"])


class Notifier(Protocol):
    async def send_deletion_confirmation(self, email: str, display_name: str) -> None: ...

    async def send_reactivation_confirmation(
        self, email: str, display_name: str
    ) -> None: ...


class EmailNotifier:
    def __init__(
        self, client: GraphMailClient, locale: str = "en", retention_days: int = 30
    ):
        self.client = client
        self.locale = locale
        self.retention_days = retention_days

    async def send_deletion_confirmation(self, email: str, display_name: str) -> None:
        await self.client.send_mail(
            to_address=email,
            subject=render_deletion_subject(locale=self.locale),
            html_body=render_deletion_email(
                display_name, locale=self.locale, retention_days=self.retention_days
            ),
        )
        log.info(f"Sent deletion confirmation to {email}")

    async def send_reactivation_confirmation(
        self, email: str, display_name: str
    ) -> None:
        await self.client.send_mail(
            to_address=email,
            subject=render_reactivation_subject(locale=self.locale),
            html_body=render_reactivation_email(display_name, locale=self.locale),
        )
        log.info(f"Sent reactivation confirmation to {email}")


class NullNotifier:
    """Used when account emails are disabled."""

    async def send_deletion_confirmation(self, email: str, display_name: str) -> None:
        log.debug(f"Account emails disabled; not notifying {email} of deletion")

    async def send_reactivation_confirmation(
        self, email: str, display_name: str
    ) -> None:
        log.debug(f"Account emails disabled; not notifying {email} of reactivation")
