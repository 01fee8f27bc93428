"""
크롤 오케스트레이터.

run_crawl(source, page) 한 번 = CrawlRun 한 행:
  1) source 에 맞는 어댑터 찾기 (없으면 ConfigurationError, run 기록 없음)
  2) CrawlRun(status=running) 생성
  3) fetch_listings(page) 를 RetryPolicy 로 감싸 호출
  4) 항목별 normalize -> 필수 필드 없으면 skip
  5) (source, external_id) 기준 upsert
  6) run 을 success/failed 로 종료, 성공 시 캐시 갱신

jobs_found 는 어댑터가 돌려준 원본 항목 수 (skip 된 항목 포함).
"""
from __future__ import annotations

import logging
import time
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import timedelta

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import Count
from django.utils import timezone

from crawler.adapters import build_adapters
from crawler.exceptions import ConfigurationError, MalformedItem
from crawler.retry import RetryPolicy, with_retry

from .cache import JobCache
from .keywords import DatabaseKeywordProvider
from .models import CrawlRun, Job

logger = logging.getLogger(__name__)

NEW = "new"
UPDATED = "updated"


@dataclass
class CrawlResult:
    source: str
    page: int = 1
    jobs_found: int = 0
    jobs_new: int = 0
    jobs_updated: int = 0
    error: str | None = None
    run_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return asdict(self)


def retry_policy_from_settings() -> RetryPolicy:
    return RetryPolicy(
        max_retries=settings.CRAWL_MAX_RETRIES,
        backoff=tuple(settings.CRAWL_RETRY_BACKOFF),
        ceiling=settings.CRAWL_RETRY_BACKOFF_CEILING,
    )


class CrawlerManager:
    def __init__(
        self,
        keyword_provider=None,
        *,
        sources=None,
        retry_policy: RetryPolicy | None = None,
        cache: JobCache | None = None,
        sleep=time.sleep,
    ):
        self.keyword_provider = keyword_provider or DatabaseKeywordProvider()
        self.sources = list(sources or settings.CRAWL_SOURCES)
        self.retry_policy = retry_policy or retry_policy_from_settings()
        self.cache = cache or JobCache()
        self.sleep = sleep
        self.adapters: dict = {}
        self.initialized = False

    def initialize(self, adapters=None):
        """source -> 어댑터 맵 구성. adapters 를 주면 그대로 사용한다."""
        if adapters is None:
            adapters = build_adapters(self.keyword_provider, self.sources)
        self.adapters = dict(adapters)
        self.initialized = True
        logger.info("crawler manager initialized (sources=%s)", ",".join(self.adapters))
        return self

    def get_adapter(self, source):
        if not self.initialized:
            self.initialize()
        try:
            return self.adapters[source]
        except KeyError:
            raise ConfigurationError(f"No adapter found for source: {source}", source=source) from None

    # ============== 크롤 ==============

    def run_crawl(self, source, page=1) -> CrawlResult:
        adapter = self.get_adapter(source)
        result = CrawlResult(source=source, page=page)

        run = self._start_run(source, page)
        result.run_id = run.pk if run else None
        logger.info("run_crawl: start (source=%s, page=%s, run=%s)", source, page, result.run_id)

        try:
            with adapter.keyword_snapshot():
                raw_items = with_retry(
                    self.retry_policy,
                    lambda: adapter.fetch_listings(page),
                    sleep=self.sleep,
                    label=f"{source} page={page} fetch_listings",
                )
                result.jobs_found = len(raw_items)

                for raw in raw_items:
                    job = self._normalize(adapter, raw)
                    if job is None:
                        continue
                    outcome = self._upsert(job)
                    if outcome == NEW:
                        result.jobs_new += 1
                    elif outcome == UPDATED:
                        result.jobs_updated += 1
        except Exception as e:  # noqa: BLE001 - 어떤 오류든 run 을 failed 로 닫고 결과로 돌려준다
            result.error = str(e) or e.__class__.__name__
            if getattr(e, "retryable", False):
                logger.error("run_crawl: failed (source=%s, page=%s, error=%s)", source, page, result.error)
            else:
                logger.exception("run_crawl: unexpected error (source=%s, page=%s)", source, page)
            self._finish_run(run, result)
            return result

        self._finish_run(run, result)
        self.cache.refresh()

        logger.info(
            "run_crawl: done (source=%s, page=%s, found=%s, new=%s, updated=%s)",
            source, page, result.jobs_found, result.jobs_new, result.jobs_updated,
        )
        return result

    def _start_run(self, source, page):
        try:
            return CrawlRun.objects.create(source=source, page=page, status=CrawlRun.STATUS_RUNNING)
        except DatabaseError:
            logger.exception("run_crawl: could not create crawl run (source=%s, page=%s)", source, page)
            return None

    def _finish_run(self, run, result: CrawlResult):
        if run is None:
            return
        try:
            if result.ok:
                run.mark_success(result.jobs_found, result.jobs_new, result.jobs_updated)
            else:
                run.mark_failed(result.error, result.jobs_found, result.jobs_new, result.jobs_updated)
        except DatabaseError:
            logger.exception("run_crawl: could not finish crawl run %s", run.pk)

    def _normalize(self, adapter, raw):
        # 항목 하나의 오류로 배치 전체를 멈추지 않는다
        try:
            job = adapter.normalize(raw)
            missing = job.missing_fields
            if missing:
                raise MalformedItem(f"missing {','.join(missing)}", source=raw.source)
        except MalformedItem as e:
            logger.warning(
                "skip item: %s (source=%s, external_id=%s, url=%s)",
                e, raw.source, raw.external_id, raw.url,
            )
            return None
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "skip item: normalize failed (source=%s, external_id=%s, %r)",
                raw.source, raw.external_id, e,
            )
            return None
        return job

    def _upsert(self, job):
        """
        (source, external_id) 자연키 upsert. NEW / UPDATED / None(저장 실패) 반환.
        동시 insert 로 IntegrityError 가 나면 먼저 들어간 행을 갱신한다.
        """
        fields = job.model_fields()
        key = {"source": job.source, "external_id": job.external_id}
        try:
            with transaction.atomic():
                existing = Job.objects.select_for_update().filter(**key).first()
                if existing is not None:
                    for name, value in fields.items():
                        setattr(existing, name, value)
                    existing.save()
                    return UPDATED
                try:
                    with transaction.atomic():
                        Job.objects.create(**key, **fields)
                except IntegrityError:
                    Job.objects.filter(**key).update(updated_at=timezone.now(), **fields)
                    return UPDATED
                return NEW
        except DatabaseError:
            logger.exception(
                "upsert failed (source=%s, external_id=%s)", job.source, job.external_id,
            )
            return None

    # ============== 유지보수 / 통계 ==============

    def cleanup_expired_jobs(self, now=None) -> int:
        try:
            deleted, _ = Job.objects.expired(now).delete()
        except DatabaseError:
            logger.exception("cleanup_expired_jobs: failed")
            return 0

        logger.info("cleanup_expired_jobs: deleted=%s", deleted)
        if deleted:
            self.cache.refresh()
        return deleted

    def get_stats(self) -> dict:
        by_source = (
            Job.objects.order_by()
            .values("source")
            .annotate(count=Count("id"))
            .order_by("source")
        )
        return {
            "total_jobs": Job.objects.count(),
            "jobs_by_source": {row["source"]: row["count"] for row in by_source},
            "recent_crawl_runs": list(CrawlRun.objects.order_by("-started_at")[:10]),
        }

    def source_overview(self, hours=24, now=None) -> list[dict]:
        """소스별 최근 hours 시간 성공률 / 평균 소요 시간."""
        now = now or timezone.now()
        runs = CrawlRun.objects.filter(started_at__gte=now - timedelta(hours=hours)).order_by("started_at")

        grouped = defaultdict(list)
        for run in runs:
            grouped[run.source].append(run)

        overview = []
        for source in sorted(set(self.sources) | set(grouped)):
            source_runs = grouped.get(source, [])
            finished = [r for r in source_runs if r.status == CrawlRun.STATUS_SUCCESS and r.completed_at]
            failed = sum(1 for r in source_runs if r.status == CrawlRun.STATUS_FAILED)
            durations = [r.duration.total_seconds() for r in finished]
            last = source_runs[-1] if source_runs else None
            overview.append({
                "source": source,
                "total": len(source_runs),
                "success": len(finished),
                "failed": failed,
                "success_rate": round(len(finished) / len(source_runs), 3) if source_runs else None,
                "avg_duration_seconds": round(sum(durations) / len(durations), 1) if durations else None,
                "last_status": last.status if last else None,
                "last_started_at": last.started_at if last else None,
            })
        return overview

    def cleanup(self):
        for source, adapter in self.adapters.items():
            try:
                adapter.cleanup()
            except Exception as e:  # noqa: BLE001
                logger.warning("cleanup failed for %s (%s)", source, e)


_manager: CrawlerManager | None = None


def get_manager() -> CrawlerManager:
    """워커 프로세스당 하나."""
    global _manager
    if _manager is None:
        _manager = CrawlerManager().initialize()
    return _manager


def reset_manager():
    global _manager
    if _manager is not None:
        _manager.cleanup()
    _manager = None
