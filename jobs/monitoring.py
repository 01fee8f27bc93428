"""
CrawlRun 이력으로 소스별 상태를 계산하고 알림을 만든다.

- high_failure_rate: 최근 6시간 실패율 > 20% warning, > 50% critical (run 0건이면 없음)
- slow_crawl: 최근 24시간 성공 run 평균 소요 > 15분 warning, > 30분 critical
- consecutive_failures: 가장 최근 종료된 3건이 모두 failed 면 critical (3건 미만이면 판단 안 함)

결과는 crawler:alerts:active 에 1시간 TTL 로 저장하고,
critical 은 ALERT_EMAIL 로 메일 발송.
"""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta

import redis
from django.conf import settings
from django.utils import timezone

from .cache import REDIS_KEYS, JobCache
from .models import CrawlRun
from .notifications import render_alert_email, send_notification

logger = logging.getLogger(__name__)

HIGH_FAILURE_RATE = "high_failure_rate"
SLOW_CRAWL = "slow_crawl"
CONSECUTIVE_FAILURES = "consecutive_failures"

WARNING = "warning"
CRITICAL = "critical"


@dataclass
class Alert:
    source: str
    type: str
    message: str
    severity: str
    timestamp: datetime = field(default_factory=timezone.now)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        return data


class CrawlerMonitoring:
    def __init__(self, sources=None, cache: JobCache | None = None, thresholds=None, notify=send_notification):
        self.sources = list(sources or settings.CRAWL_SOURCES)
        self.cache = cache or JobCache()
        self.thresholds = {**settings.CRAWL_MONITORING, **(thresholds or {})}
        self.notify = notify

    def check_and_alert(self, now=None) -> list[Alert]:
        now = now or timezone.now()
        alerts: list[Alert] = []
        for source in self.sources:
            for check in (self.check_failure_rate, self.check_crawl_time):
                alert = check(source, now)
                if alert:
                    alerts.append(alert)
            alert = self.check_consecutive_failures(source)
            if alert:
                alerts.append(alert)

        for alert in alerts:
            if alert.severity == CRITICAL:
                logger.error("ALERT [%s] %s: %s", alert.severity, alert.source, alert.message)
            else:
                logger.warning("ALERT [%s] %s: %s", alert.severity, alert.source, alert.message)

        self._store(alerts)
        self._send_critical(alerts)
        return alerts

    def check_failure_rate(self, source, now=None) -> Alert | None:
        now = now or timezone.now()
        since = now - timedelta(hours=self.thresholds["failure_window_hours"])
        runs = CrawlRun.objects.filter(source=source, started_at__gte=since)
        total = runs.count()
        if total == 0:
            return None

        failed = runs.filter(status=CrawlRun.STATUS_FAILED).count()
        rate = failed / total
        if rate <= self.thresholds["failure_rate"]:
            return None

        severity = CRITICAL if rate > self.thresholds["critical_failure_rate"] else WARNING
        return Alert(
            source=source,
            type=HIGH_FAILURE_RATE,
            message=(
                f"High failure rate: {rate:.0%} ({failed}/{total}) "
                f"in the last {self.thresholds['failure_window_hours']}h"
            ),
            severity=severity,
            timestamp=now,
        )

    def check_crawl_time(self, source, now=None) -> Alert | None:
        now = now or timezone.now()
        since = now - timedelta(hours=self.thresholds["duration_window_hours"])
        runs = CrawlRun.objects.filter(
            source=source,
            status=CrawlRun.STATUS_SUCCESS,
            started_at__gte=since,
            completed_at__isnull=False,
        )
        durations = [run.duration.total_seconds() for run in runs]
        if not durations:
            return None

        avg = sum(durations) / len(durations)
        limit = self.thresholds["avg_crawl_seconds"]
        if avg <= limit:
            return None

        severity = CRITICAL if avg > limit * 2 else WARNING
        return Alert(
            source=source,
            type=SLOW_CRAWL,
            message=f"Slow crawl: average {avg / 60:.1f} min over {len(durations)} runs",
            severity=severity,
            timestamp=now,
        )

    def check_consecutive_failures(self, source) -> Alert | None:
        limit = self.thresholds["consecutive_failures"]
        statuses = list(
            CrawlRun.objects.filter(source=source)
            .exclude(status=CrawlRun.STATUS_RUNNING)
            .order_by("-started_at", "-id")
            .values_list("status", flat=True)[:limit]
        )
        if len(statuses) < limit:
            return None
        if any(status != CrawlRun.STATUS_FAILED for status in statuses):
            return None
        return Alert(
            source=source,
            type=CONSECUTIVE_FAILURES,
            message=f"{limit} consecutive crawl failures",
            severity=CRITICAL,
        )

    # ============== 활성 알림 ==============

    def _store(self, alerts):
        try:
            self.cache.set_with_ttl(
                REDIS_KEYS["alerts"],
                [a.to_dict() for a in alerts],
                ttl=self.thresholds["alert_ttl"],
            )
        except redis.RedisError as e:
            logger.warning("could not store active alerts (%s)", e)

    def _send_critical(self, alerts):
        critical = [a for a in alerts if a.severity == CRITICAL]
        if not critical or not settings.ALERT_EMAIL:
            return
        self.notify(
            settings.ALERT_EMAIL,
            f"[ReBridge] 크롤러 critical 알림 {len(critical)}건",
            render_alert_email(critical),
        )

    def get_active_alerts(self) -> list[dict]:
        try:
            return self.cache.get(REDIS_KEYS["alerts"]) or []
        except redis.RedisError as e:
            logger.warning("could not read active alerts (%s)", e)
            return []

    def clear_alerts(self):
        try:
            self.cache.client.delete(REDIS_KEYS["alerts"])
        except redis.RedisError as e:
            logger.warning("could not clear alerts (%s)", e)
            return False
        logger.info("active alerts cleared")
        return True
