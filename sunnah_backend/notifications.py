"""Operator notifications.

Notifiers are fire-and-forget: ``notify`` schedules delivery and returns
immediately, and delivery failures are logged and dropped. Callers never
await a notification or see its outcome.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from sunnah_backend.core.config import Settings

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "Sunnah Assistant Api Failure"
SENDER_NAME = "Sunnah Assistant Backend"


class Notifier(Protocol):
    """Best-effort channel to the operator."""

    def notify(self, message: str) -> None: ...


@dataclass(frozen=True)
class NotificationPolicy:
    """Which events are reported to the operator."""

    notify_on_rate_limit: bool = False
    notify_on_provider_fallback: bool = False
    notify_on_fault: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationPolicy":
        return cls(
            notify_on_rate_limit=settings.NOTIFY_ON_RATE_LIMIT,
            notify_on_provider_fallback=settings.NOTIFY_ON_PROVIDER_FALLBACK,
            notify_on_fault=settings.NOTIFY_ON_FAULT,
        )


class LoggingNotifier:
    """Notifier used when no delivery channel is configured."""

    def notify(self, message: str) -> None:
        logger.warning(f"Operator notification (no channel configured): {message}")


class SendGridNotifier:
    """Send notifications as plain-text e-mail through the SendGrid v3 API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        email: str,
        url: str = "https://api.sendgrid.com/v3/mail/send",
    ) -> None:
        self._client = client
        self._api_key = api_key
        self._email = email
        self._url = url
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        """Number of deliveries still in flight."""
        return len(self._pending)

    def build_message(self, message: str) -> dict[str, Any]:
        return {
            "personalizations": [{"to": [{"email": self._email}]}],
            "from": {"email": self._email, "name": SENDER_NAME},
            "subject": EMAIL_SUBJECT,
            "content": [{"type": "text/plain", "value": message}],
        }

    def notify(self, message: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.error(f"Dropping notification outside an event loop: {message}")
            return

        task = loop.create_task(self._send(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _send(self, message: str) -> None:
        try:
            response = await self._client.post(
                self._url,
                json=self.build_message(message),
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Error sending email: {e}")
        except Exception as e:
            # Nothing awaits this task, so anything raised here would be lost
            logger.error(f"Error sending email: {type(e).__name__}: {e}")

    async def drain(self) -> None:
        """Wait for in-flight deliveries, used on shutdown."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)


def create_notifier(settings: Settings, client: httpx.AsyncClient) -> Notifier:
    """Pick the notifier for the configured credentials."""
    if settings.notifications_configured:
        return SendGridNotifier(
            client,
            api_key=settings.SENDGRID_API_KEY,
            email=settings.MY_EMAIL,
            url=settings.SENDGRID_URL,
        )
    return LoggingNotifier()
