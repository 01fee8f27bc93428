import logging
import smtplib

from bs4 import BeautifulSoup
from django.conf import settings
from django.core.mail import send_mail
from django.utils.html import format_html, format_html_join

logger = logging.getLogger(__name__)

SEVERITY_COLORS = {
    "critical": "#d32f2f",
    "warning": "#f57c00",
}


def html_to_text(html):
    """메일 text/plain 파트용."""
    if not html:
        return ""
    return BeautifulSoup(html, "html.parser").get_text("\n", strip=True)


def send_notification(recipient, subject, body_html):
    """
    알림 메일 한 통. 실패해도 호출자에게 예외를 올리지 않는다 (fire-and-forget).
    성공 여부만 bool 로 돌려준다.
    """
    if not recipient:
        logger.info("send_notification: no recipient, skipped (subject=%s)", subject)
        return False
    try:
        send_mail(
            subject,
            html_to_text(body_html),
            settings.DEFAULT_FROM_EMAIL,
            [recipient],
            html_message=body_html,
        )
    except (smtplib.SMTPException, OSError) as e:
        logger.warning("send_notification failed (to=%s, %s)", recipient, e)
        return False
    logger.info("send_notification: sent (to=%s, subject=%s)", recipient, subject)
    return True


def render_alert_email(alerts):
    rows = format_html_join(
        "\n",
        '<tr><td>{}</td><td>{}</td><td style="color:{}">{}</td><td>{}</td><td>{}</td></tr>',
        (
            (
                a.source,
                a.type,
                SEVERITY_COLORS.get(a.severity, "#333"),
                a.severity,
                a.message,
                a.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            )
            for a in alerts
        ),
    )
    return format_html(
        "<h2>크롤러 알림 ({}건)</h2>"
        "<table border=\"1\" cellpadding=\"4\" cellspacing=\"0\">"
        "<thead><tr><th>소스</th><th>유형</th><th>심각도</th><th>내용</th><th>시각</th></tr></thead>"
        "<tbody>{}</tbody></table>",
        len(alerts),
        rows,
    )
