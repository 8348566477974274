"""Outbound notifications: email and real-time channel events.

Delivery is fire-and-forget. Failures are logged and never reach the
workflow that triggered them.
"""

import asyncio
import logging
import smtplib
from abc import ABC, abstractmethod
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path
from typing import Any

from fastapi import WebSocket
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from pressroom.core.config import Settings, get_settings
from pressroom.core.exceptions import NotifierUnavailable

logger = logging.getLogger(__name__)

ADMIN_CHANNEL = "admin:dashboard"

_templates = Environment(
    loader=FileSystemLoader(str(Path(__file__).resolve().parent / "templates")),
    autoescape=select_autoescape(["html", "xml"]),
)


def user_channel(user_id: int) -> str:
    """Private channel for one user."""
    return f"user:{user_id}"


def render_template(template_name: str, **context: Any) -> str:
    """Render an email body, always exposing ``platform_name``."""
    context.setdefault("platform_name", get_settings().platform_name)
    return _templates.get_template(template_name).render(**context)


class Notifier(ABC):
    """Abstract notification sink used by the workflows."""

    @abstractmethod
    async def send_email(self, to: str, subject: str, html: str) -> None:
        """Send an HTML email. Must not raise."""
        ...

    @abstractmethod
    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        """Push an event to a real-time channel. Must not raise."""
        ...

    async def send_template_email(
        self, to: str, subject: str, template_name: str, **context: Any
    ) -> None:
        """Render ``template_name`` and send it. A render failure drops the email."""
        try:
            html = render_template(template_name, **context)
        except TemplateError:
            logger.exception("Email template %s failed to render; %s not sent", template_name, subject)
            return
        await self.send_email(to, subject, html)


class RealtimeHub:
    """Manage websocket connections grouped by channel key."""

    def __init__(self):
        # Map of channel key -> list of connections
        self.channels: dict[str, list[WebSocket]] = {}

    async def connect(self, websocket: WebSocket, channels: list[str]) -> None:
        await websocket.accept()
        for channel in channels:
            self.channels.setdefault(channel, []).append(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        for channel in list(self.channels):
            connections = self.channels[channel]
            if websocket in connections:
                connections.remove(websocket)
            if not connections:
                del self.channels[channel]

    def subscribers(self, channel: str) -> int:
        return len(self.channels.get(channel, []))

    async def deliver(self, channel: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every connection on ``channel``.

        Returns:
            Number of connections that received the message
        """
        delivered = 0
        for connection in list(self.channels.get(channel, [])):
            try:
                await connection.send_json(message)
                delivered += 1
            except Exception:
                # Connection may be closing
                logger.warning("Dropping dead websocket on %s", channel)
                self.disconnect(connection)
        return delivered


class Mailer:
    """SMTP delivery. Without an ``smtp_host`` every send is skipped."""

    def __init__(self, settings: Settings):
        self.settings = settings

    @property
    def is_configured(self) -> bool:
        return bool(self.settings.smtp_host)

    async def send(self, to: str, subject: str, html: str) -> None:
        if not self.is_configured:
            logger.info("SMTP not configured; skipping email to %s (%s)", to, subject)
            return
        try:
            await asyncio.to_thread(self._send_sync, to, subject, html)
        except (smtplib.SMTPException, OSError) as e:
            raise NotifierUnavailable(f"Email delivery to {to} failed: {e}") from e

    def _send_sync(self, to: str, subject: str, html: str) -> None:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.settings.mail_from
        msg["To"] = to
        msg.attach(MIMEText(html, "html", "utf-8"))

        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=10) as server:
            if self.settings.smtp_use_starttls:
                server.starttls()
            if self.settings.smtp_user and self.settings.smtp_password:
                server.login(self.settings.smtp_user, self.settings.smtp_password)
            server.sendmail(self.settings.mail_from, [to], msg.as_string())


class PlatformNotifier(Notifier):
    """Notifier backed by SMTP and the in-process websocket hub."""

    def __init__(self, mailer: Mailer, hub: RealtimeHub):
        self.mailer = mailer
        self.hub = hub

    async def send_email(self, to: str, subject: str, html: str) -> None:
        try:
            await self.mailer.send(to, subject, html)
        except NotifierUnavailable:
            logger.exception("Email notification dropped: %s", subject)

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        message = {
            "type": event,
            "timestamp": datetime.utcnow().isoformat(),
            **payload,
        }
        try:
            delivered = await self.hub.deliver(channel, message)
        except Exception:
            logger.exception("Realtime event %s on %s dropped", event, channel)
            return
        logger.debug("Event %s delivered to %d connection(s) on %s", event, delivered, channel)


hub = RealtimeHub()
notifier = PlatformNotifier(Mailer(get_settings()), hub)


def get_notifier() -> Notifier:
    """Dependency returning the process-wide notifier."""
    return notifier
