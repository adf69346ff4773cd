"""Mail relay client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Any, Dict
from fleet_deductions.config import settings
from fleet_deductions.domain.exceptions import EmailDeliveryError
from fleet_deductions.domain.models import PenaltyNotification
from fleet_deductions.domain.notifications import render_penalty_email
from fleet_deductions.infrastructure.observability.metrics import email_latency_histogram


class EmailClient:
    """Client for sending transactional email through an HTTP mail relay"""

    def __init__(
        self,
        api_url: str | None = None,
        api_key: str | None = None,
        sender: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_url = settings.email_api_url if api_url is None else api_url
        self.api_key = settings.email_api_key if api_key is None else api_key
        self.sender = sender or settings.email_from
        self.timeout = settings.http_timeout_seconds
        self.max_retries = settings.email_max_retries
        self.backoff_base = settings.email_backoff_base
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_url)

    async def send_penalty_notification(self, recipient_email: str, notification: PenaltyNotification) -> bool:
        """
        Email a penalty notification to one recipient.

        Returns:
            True if the relay accepted the message, False if email is not configured

        Raises:
            EmailDeliveryError: After all retries fail
        """
        if not self.is_configured:
            logging.warning("Email relay not configured. Skipping email send.", extra={"recipient": recipient_email})
            return False

        subject, text, html = render_penalty_email(notification, settings.currency_symbol)
        await self.send(
            {
                "from": self.sender,
                "to": recipient_email,
                "subject": subject,
                "text": text,
                "html": html,
                "context": notification.to_dict(),
            }
        )
        logging.info(
            "Penalty notification email sent",
            extra={"recipient": recipient_email, "driver_code": notification.driver.driver_code},
        )
        return True

    async def send(self, message: Dict[str, Any]) -> None:
        """
        Post a message to the relay with retry logic.

        Retry strategy:
        - Exponential backoff: base * 2^(attempt-1)
        - Retries on 5xx/4xx errors and network failures
        - Tracks latency histogram
        """
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            while attempt < self.max_retries:
                try:
                    with email_latency_histogram.time():
                        response = await client.post(self.api_url, json=message, headers=headers)
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1

                    if attempt >= self.max_retries:
                        # Final failure after all retries
                        raise EmailDeliveryError(
                            f"Mail relay failed after {attempt} attempts: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
