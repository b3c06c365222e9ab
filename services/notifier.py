"""Notification delivery for waitlist signups.

The notifier is built once per process (see ``main.lifespan``) and handed to
request handlers through ``api.deps.get_notifier``.
"""

import logging
from typing import Protocol

import httpx

import config
from errors import NotificationDispatchError
from services.email_templates import EmailContent

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Sends one message to one address. Raises NotificationDispatchError."""

    async def send(self, email: str, content: EmailContent) -> None: ...

    async def aclose(self) -> None: ...


class HttpEmailNotifier:
    """Delivers email through an HTTP email API (Resend-compatible payload)."""

    def __init__(
        self,
        *,
        api_url: str,
        api_key: str,
        from_email: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_url = api_url
        self.from_email = from_email
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._headers = {"Authorization": f"Bearer {api_key}"}

    async def send(self, email: str, content: EmailContent) -> None:
        payload = {
            "from": self.from_email,
            "to": [email],
            "subject": content.subject,
            "text": content.text,
            "html": content.html,
        }
        try:
            resp = await self._client.post(self.api_url, json=payload, headers=self._headers)
        except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
            # Request never reached the provider
            raise NotificationDispatchError(f"email API unreachable: {exc}", ambiguous=False) from exc
        except httpx.TimeoutException as exc:
            raise NotificationDispatchError(f"email API timed out: {exc}", ambiguous=True) from exc
        except httpx.TransportError as exc:
            raise NotificationDispatchError(f"email API transport error: {exc}", ambiguous=True) from exc

        if resp.status_code >= 500:
            raise NotificationDispatchError(
                f"email API returned {resp.status_code}: {resp.text[:200]}",
                ambiguous=True,
            )
        if resp.status_code >= 300:
            raise NotificationDispatchError(
                f"email API rejected message with {resp.status_code}: {resp.text[:200]}",
                ambiguous=False,
            )
        logger.info("Email sent to %s (status %s)", email, resp.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()


class LogOnlyNotifier:
    """Development notifier: logs the message instead of sending it."""

    async def send(self, email: str, content: EmailContent) -> None:
        logger.info("Email to %s not sent (log-only delivery): %s", email, content.subject)

    async def aclose(self) -> None:
        return None


def build_notifier() -> Notifier:
    """Build the process notifier from settings."""
    settings = config.settings
    if not settings.EMAIL_API_KEY:
        logger.warning("EMAIL_API_KEY not configured, using log-only delivery")
        return LogOnlyNotifier()
    return HttpEmailNotifier(
        api_url=settings.EMAIL_API_URL,
        api_key=settings.EMAIL_API_KEY,
        from_email=settings.EMAIL_FROM,
        timeout=settings.EMAIL_API_TIMEOUT_SECONDS,
    )
