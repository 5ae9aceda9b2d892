"""SMTP mail delivery with retry."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from collections.abc import Callable
from email.message import EmailMessage

from tenacity import (
    RetryCallState,
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from garagehub.config import SMTPConfig
from garagehub.exceptions import EmailDeliveryError

logger = logging.getLogger(__name__)


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    wait_s = state.next_action.sleep if state.next_action else None
    logger.warning(
        "smtp retrying (attempt=%s, wait_s=%s, error=%s)",
        state.attempt_number,
        wait_s,
        exc,
    )


class Mailer:
    def __init__(
        self,
        config: SMTPConfig,
        *,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        wait_min_s: float = 1.0,
        wait_max_s: float = 10.0,
    ) -> None:
        self.config = config
        self._smtp_factory = smtp_factory
        self._wait = wait_exponential(min=wait_min_s, max=wait_max_s)

    def build_message(self, *, to: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.config.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(body)
        return msg

    def _send_once(self, msg: EmailMessage) -> None:
        cfg = self.config
        with self._smtp_factory(cfg.host, cfg.port, timeout=cfg.timeout_s) as server:
            if cfg.use_tls:
                server.starttls()
            server.login(cfg.user, cfg.password)
            server.send_message(msg)

    def send_sync(self, *, to: str, subject: str, body: str) -> None:
        if not self.config.configured:
            raise EmailDeliveryError("email service not configured (set SMTP_USER and SMTP_PASSWORD)")
        if not to:
            raise EmailDeliveryError("no recipient email address provided")

        msg = self.build_message(to=to, subject=subject, body=body)
        retrying = Retrying(
            stop=stop_after_attempt(int(self.config.max_attempts)),
            wait=self._wait,
            retry=retry_if_exception_type((smtplib.SMTPException, OSError)),
            before_sleep=_log_retry,
            reraise=False,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._send_once(msg)
        except RetryError as exc:
            last = exc.last_attempt.exception()
            logger.error("smtp delivery failed (to=%s): %s", to, last)
            raise EmailDeliveryError(f"failed to send email: {last}") from last
        logger.info("email sent (to=%s, subject=%s)", to, subject)

    async def send(self, *, to: str, subject: str, body: str) -> None:
        await asyncio.to_thread(self.send_sync, to=to, subject=subject, body=body)
