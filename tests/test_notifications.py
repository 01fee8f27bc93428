import smtplib

from django.core import mail

from jobs import notifications
from jobs.monitoring import Alert


def test_send_notification_sends_html_and_text(settings):
    html = "<h2>크롤러 알림</h2><p>saramin 실패</p>"
    assert notifications.send_notification("ops@rebridge.kr", "[ReBridge] 알림", html) is True

    message = mail.outbox[0]
    assert message.to == ["ops@rebridge.kr"]
    assert message.body == "크롤러 알림\nsaramin 실패"
    assert message.alternatives[0][0] == html


def test_send_notification_swallows_smtp_errors(monkeypatch):
    def broken(*args, **kwargs):
        raise smtplib.SMTPServerDisconnected("gone")

    monkeypatch.setattr(notifications, "send_mail", broken)
    assert notifications.send_notification("ops@rebridge.kr", "s", "<p>x</p>") is False


def test_send_notification_without_recipient_is_skipped():
    assert notifications.send_notification("", "s", "<p>x</p>") is False
    assert mail.outbox == []


def test_render_alert_email_escapes_messages():
    alert = Alert(source="saramin", type="slow_crawl", message="<script>", severity="critical")
    html = notifications.render_alert_email([alert])
    assert "&lt;script&gt;" in html
    assert "크롤러 알림 (1건)" in html
