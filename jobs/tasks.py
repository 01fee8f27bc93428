# jobs/tasks.py

import logging
import uuid

import redis
from celery import shared_task
from celery.signals import task_failure, task_success, worker_process_shutdown
from django.conf import settings
from django.db import close_old_connections

from crawler.adapters import get_adapter_class
from crawler.exceptions import ConfigurationError

from .cache import REDIS_KEYS, get_redis
from .history import JobHistory
from .manager import get_manager, reset_manager
from .monitoring import CrawlerMonitoring
from .schedule import default_schedule

logger = logging.getLogger(__name__)


class CrawlTaskError(Exception):
    """run_crawl 이 error 를 담아 돌아왔을 때 큐 레벨 재시도를 위해 올린다."""

    retryable = True

    def __init__(self, result):
        super().__init__(f"{result.get('source')} page={result.get('page')}: {result.get('error')}")
        self.result = result


def queue_backoff(retries):
    """큐 재시도 대기: 1s, 2s, 4s ... (지터 없음)"""
    return 2 ** retries


# ============== 락 ==============

def _lock_key(source, page):
    return REDIS_KEYS["lock"].format(source=source, page=page)


def acquire_crawl_lock(source, page):
    """
    (source, page) 단위 advisory lock.
    토큰을 돌려주면 획득, None 이면 다른 워커가 실행 중.
    redis 장애 시에는 락 없이 진행한다.
    """
    token = uuid.uuid4().hex
    if not settings.CRAWL_LOCK_ENABLED:
        return token
    try:
        acquired = get_redis().set(_lock_key(source, page), token, nx=True, ex=settings.CRAWL_LOCK_TTL)
    except redis.RedisError as e:
        logger.warning("crawl lock unavailable, running unlocked (source=%s, page=%s, %s)", source, page, e)
        return token
    return token if acquired else None


# 토큰이 같을 때만 지운다 (GET/DEL 을 한 번에)
_RELEASE_LOCK_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def release_crawl_lock(source, page, token):
    if not settings.CRAWL_LOCK_ENABLED:
        return
    key = _lock_key(source, page)
    try:
        release = get_redis().register_script(_RELEASE_LOCK_SCRIPT)
        release(keys=[key], args=[token])
    except redis.RedisError as e:
        logger.warning("crawl lock release failed (source=%s, page=%s, %s)", source, page, e)


# ============== 태스크 ==============

@shared_task(bind=True, name="jobs.tasks.crawl_source")
def crawl_source(self, source, page=1):
    """
    (source, page) 하나 크롤.
    - 같은 (source, page) 가 이미 돌고 있으면 skip
    - 결과에 error 가 있으면 헬스체크 후 큐 레벨 재시도 (총 CRAWL_QUEUE_ATTEMPTS 회)
    - ConfigurationError 는 재시도하지 않는다
    """
    close_old_connections()

    token = acquire_crawl_lock(source, page)
    if token is None:
        logger.info("crawl_source: skipped, already running (source=%s, page=%s)", source, page)
        return {"source": source, "page": page, "skipped": True}

    try:
        result = get_manager().run_crawl(source, page)
    except ConfigurationError:
        logger.error("crawl_source: configuration error (source=%s)", source)
        raise
    finally:
        release_crawl_lock(source, page, token)

    payload = result.to_dict()
    if result.ok:
        return payload

    check_crawler_health.delay()

    attempt = self.request.retries + 1
    logger.warning(
        "crawl_source: attempt %s/%s failed (source=%s, page=%s, error=%s)",
        attempt, settings.CRAWL_QUEUE_ATTEMPTS, source, page, result.error,
    )
    raise self.retry(
        exc=CrawlTaskError(payload),
        countdown=queue_backoff(self.request.retries),
        max_retries=settings.CRAWL_QUEUE_ATTEMPTS - 1,
    )


@shared_task
def schedule_crawls():
    """정기 실행: 설정된 모든 source 의 1페이지를 큐에 넣는다."""
    task_ids = enqueue_scheduled_crawls()
    logger.info("schedule_crawls: enqueued=%s", len(task_ids))
    return task_ids


@shared_task
def check_crawler_health():
    close_old_connections()
    alerts = CrawlerMonitoring().check_and_alert()
    logger.info("check_crawler_health: alerts=%s", len(alerts))
    return [a.to_dict() for a in alerts]


@shared_task
def cleanup_expired_jobs():
    close_old_connections()
    return get_manager().cleanup_expired_jobs()


# ============== 수동/정기 enqueue ==============

def enqueue_crawl(source, page=1):
    """알 수 없는 source 는 큐에 넣기 전에 ConfigurationError."""
    get_adapter_class(source)
    async_result = crawl_source.apply_async(args=[source, int(page)])
    logger.info("enqueue_crawl: source=%s page=%s task=%s", source, page, async_result.id)
    return async_result.id


def enqueue_scheduled_crawls(schedule=None):
    schedule = (schedule or default_schedule()).validate()
    return [enqueue_crawl(job["source"], job["page"]) for job in schedule.jobs()]


# ============== 큐 이력 / 종료 ==============

def _is_crawl_task(sender):
    return getattr(sender, "name", None) == crawl_source.name


@task_success.connect
def record_crawl_success(sender=None, result=None, **kwargs):
    if not _is_crawl_task(sender):
        return
    entry = dict(result or {})
    entry["task_id"] = getattr(sender.request, "id", None)
    JobHistory().record_completed(entry)


@task_failure.connect
def record_crawl_failure(sender=None, task_id=None, exception=None, args=None, kwargs=None, **extra):
    if not _is_crawl_task(sender):
        return
    args = list(args or [])
    kwargs = kwargs or {}
    entry = getattr(exception, "result", None) or {
        "source": args[0] if args else kwargs.get("source"),
        "page": args[1] if len(args) > 1 else kwargs.get("page", 1),
    }
    entry = dict(entry)
    entry["task_id"] = task_id
    entry["error"] = entry.get("error") or str(exception)
    JobHistory().record_failed(entry)


@worker_process_shutdown.connect
def cleanup_adapters(**kwargs):
    logger.info("worker shutdown: cleaning up crawler adapters")
    reset_manager()
