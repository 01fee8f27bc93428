from datetime import timedelta

import pytest
from django.utils import timezone

from jobs.cache import JobCache
from jobs.models import CrawlRun
from jobs.monitoring import (
    CONSECUTIVE_FAILURES,
    CRITICAL,
    HIGH_FAILURE_RATE,
    SLOW_CRAWL,
    WARNING,
    CrawlerMonitoring,
)

pytestmark = pytest.mark.django_db


class NotifyRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, recipient, subject, body_html):
        self.calls.append((recipient, subject, body_html))
        return True


@pytest.fixture
def notify():
    return NotifyRecorder()


@pytest.fixture
def monitoring(fake_redis, notify):
    return CrawlerMonitoring(sources=["saramin"], cache=JobCache(client=fake_redis), notify=notify)


def _run(status, started_ago, minutes=1, source="saramin"):
    started = timezone.now() - started_ago
    return CrawlRun.objects.create(
        source=source,
        status=status,
        started_at=started,
        completed_at=started + timedelta(minutes=minutes),
    )


def _runs(failed, total, started_ago=timedelta(hours=1)):
    for i in range(total):
        status = CrawlRun.STATUS_FAILED if i < failed else CrawlRun.STATUS_SUCCESS
        _run(status, started_ago + timedelta(minutes=i))


def test_failure_rate_warning_at_two_of_six(monitoring):
    _runs(failed=2, total=6)
    alert = monitoring.check_failure_rate("saramin")
    assert alert.type == HIGH_FAILURE_RATE
    assert alert.severity == WARNING


def test_failure_rate_critical_at_four_of_six(monitoring):
    _runs(failed=4, total=6)
    assert monitoring.check_failure_rate("saramin").severity == CRITICAL


def test_failure_rate_quiet_at_one_of_six(monitoring):
    _runs(failed=1, total=6)
    assert monitoring.check_failure_rate("saramin") is None


def test_failure_rate_ignores_runs_outside_window_and_empty_window(monitoring):
    assert monitoring.check_failure_rate("saramin") is None
    _runs(failed=3, total=3, started_ago=timedelta(hours=7))
    assert monitoring.check_failure_rate("saramin") is None


def test_slow_crawl_thresholds(monitoring):
    _run(CrawlRun.STATUS_SUCCESS, timedelta(hours=2), minutes=20)
    _run(CrawlRun.STATUS_SUCCESS, timedelta(hours=3), minutes=20)
    alert = monitoring.check_crawl_time("saramin")
    assert alert.type == SLOW_CRAWL
    assert alert.severity == WARNING

    _run(CrawlRun.STATUS_SUCCESS, timedelta(hours=4), minutes=100)
    assert monitoring.check_crawl_time("saramin").severity == CRITICAL


def test_slow_crawl_ignores_failed_runs(monitoring):
    _run(CrawlRun.STATUS_FAILED, timedelta(hours=2), minutes=90)
    _run(CrawlRun.STATUS_SUCCESS, timedelta(hours=3), minutes=5)
    assert monitoring.check_crawl_time("saramin") is None


def test_three_consecutive_failures_is_critical(monitoring, fake_redis, notify, settings):
    settings.ALERT_EMAIL = "ops@rebridge.kr"
    for hours in (10, 9, 8):
        _run(CrawlRun.STATUS_FAILED, timedelta(hours=hours))

    alerts = monitoring.check_and_alert()

    assert [(a.type, a.severity) for a in alerts] == [(CONSECUTIVE_FAILURES, CRITICAL)]
    assert monitoring.get_active_alerts()[0]["type"] == CONSECUTIVE_FAILURES
    assert 0 < fake_redis.ttl("crawler:alerts:active") <= 3600

    recipient, subject, body = notify.calls[0]
    assert recipient == "ops@rebridge.kr"
    assert "consecutive" in body


def test_two_failures_ever_is_not_enough(monitoring):
    _run(CrawlRun.STATUS_FAILED, timedelta(hours=10))
    _run(CrawlRun.STATUS_FAILED, timedelta(hours=9))
    assert monitoring.check_consecutive_failures("saramin") is None


def test_recent_success_breaks_the_streak(monitoring):
    for hours in (10, 9, 8):
        _run(CrawlRun.STATUS_FAILED, timedelta(hours=hours))
    _run(CrawlRun.STATUS_SUCCESS, timedelta(hours=7))
    assert monitoring.check_consecutive_failures("saramin") is None


def test_warning_alerts_are_not_mailed(monitoring, notify, settings):
    settings.ALERT_EMAIL = "ops@rebridge.kr"
    _runs(failed=2, total=6)

    alerts = monitoring.check_and_alert()

    assert [a.severity for a in alerts] == [WARNING]
    assert notify.calls == []


def test_empty_check_overwrites_and_clear_removes(monitoring, fake_redis):
    fake_redis.set("crawler:alerts:active", '[{"type": "old"}]')

    assert monitoring.check_and_alert() == []
    assert monitoring.get_active_alerts() == []
    assert fake_redis.exists("crawler:alerts:active")

    assert monitoring.clear_alerts() is True
    assert not fake_redis.exists("crawler:alerts:active")
