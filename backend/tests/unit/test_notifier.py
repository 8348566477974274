"""Unit tests for notification delivery."""

import smtplib
from datetime import datetime

import pytest

from pressroom.core.config import Settings
from pressroom.core.exceptions import NotifierUnavailable
from pressroom.services.notifier import (
    Mailer,
    PlatformNotifier,
    RealtimeHub,
    render_template,
    user_channel,
)


class FakeSocket:
    """Stands in for a websocket connection."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []
        self.accepted = False

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(message)


class BrokenMailer(Mailer):
    async def send(self, to, subject, html):
        raise NotifierUnavailable("smtp down")


class BrokenHub(RealtimeHub):
    async def deliver(self, channel, message):
        raise RuntimeError("hub down")


@pytest.mark.asyncio
class TestRealtimeHub:
    """Tests for channel delivery."""

    async def test_deliver_to_channel(self):
        hub = RealtimeHub()
        socket = FakeSocket()
        await hub.connect(socket, [user_channel(7)])

        delivered = await hub.deliver("user:7", {"type": "ping"})

        assert socket.accepted
        assert delivered == 1
        assert socket.sent == [{"type": "ping"}]

    async def test_dead_connection_is_dropped(self):
        hub = RealtimeHub()
        dead = FakeSocket(fail=True)
        await hub.connect(dead, ["user:1"])

        assert await hub.deliver("user:1", {"type": "x"}) == 0
        assert hub.subscribers("user:1") == 0

    async def test_unknown_channel(self):
        assert await RealtimeHub().deliver("user:404", {"type": "x"}) == 0


@pytest.mark.asyncio
class TestPlatformNotifier:
    """Failures are logged and never raised."""

    async def test_email_failure_is_swallowed(self, caplog):
        notifier = PlatformNotifier(BrokenMailer(Settings()), RealtimeHub())

        await notifier.send_email("a@pressroom.org", "Subject", "<p>x</p>")

        assert "Email notification dropped" in caplog.text

    async def test_publish_failure_is_swallowed(self, caplog):
        notifier = PlatformNotifier(Mailer(Settings()), BrokenHub())

        await notifier.publish("user:1", "role:approved", {"newRole": "editor"})

        assert "dropped" in caplog.text

    async def test_template_failure_drops_email(self, caplog, monkeypatch):
        mailer = Mailer(Settings(smtp_host=None))
        sent = []

        async def record(to, subject, html):
            sent.append(to)

        monkeypatch.setattr(mailer, "send", record)
        notifier = PlatformNotifier(mailer, RealtimeHub())

        await notifier.send_template_email("a@pressroom.org", "Subject", "missing.html", name="Dana")

        assert sent == []
        assert "failed to render" in caplog.text

    async def test_template_email_renders_and_sends(self, monkeypatch):
        mailer = Mailer(Settings(smtp_host=None))
        sent = []

        async def record(to, subject, html):
            sent.append((to, subject, html))

        monkeypatch.setattr(mailer, "send", record)
        notifier = PlatformNotifier(mailer, RealtimeHub())

        await notifier.send_template_email(
            "a@pressroom.org",
            "Role Access Update",
            "role_revoked.html",
            name="Dana",
            role="editor",
            changed_at=datetime(2026, 3, 1),
        )

        assert sent[0][:2] == ("a@pressroom.org", "Role Access Update")
        assert "Dana" in sent[0][2]

    async def test_publish_wraps_payload(self):
        hub = RealtimeHub()
        socket = FakeSocket()
        await hub.connect(socket, ["user:3"])
        notifier = PlatformNotifier(Mailer(Settings()), hub)

        await notifier.publish("user:3", "role:revoked", {"newRole": "user"})

        message = socket.sent[0]
        assert message["type"] == "role:revoked"
        assert message["newRole"] == "user"
        assert "timestamp" in message


@pytest.mark.asyncio
class TestMailer:
    """Tests for SMTP delivery."""

    async def test_unconfigured_mailer_skips(self):
        mailer = Mailer(Settings(smtp_host=None))

        assert not mailer.is_configured
        await mailer.send("a@pressroom.org", "Subject", "<p>x</p>")

    async def test_smtp_error_becomes_notifier_unavailable(self, monkeypatch):
        mailer = Mailer(Settings(smtp_host="smtp.invalid"))

        def refuse(*args, **kwargs):
            raise smtplib.SMTPConnectError(421, "refused")

        monkeypatch.setattr(mailer, "_send_sync", refuse)

        with pytest.raises(NotifierUnavailable):
            await mailer.send("a@pressroom.org", "Subject", "<p>x</p>")


def test_render_role_revoked_template():
    html = render_template(
        "role_revoked.html", name="Dana", role="editor", changed_at=datetime(2026, 3, 1)
    )

    assert "Dana" in html
    assert "2026-03-01" in html
    assert "Planning Insights" in html
