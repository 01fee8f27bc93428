from datetime import timedelta

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class JobQuerySet(models.QuerySet):
    def by_key(self, source, external_id):
        """(source, external_id) 자연키로 조회. 없으면 None."""
        return self.filter(source=source, external_id=external_id).first()

    def expired(self, now=None, retention_months=None):
        """
        보존 기간이 끝난 공고:
          - 마감일이 지났거나
          - 마감일이 없고 마지막 수집이 retention_months 보다 오래됨
        """
        now = now or timezone.now()
        months = retention_months or settings.JOB_RETENTION_MONTHS
        stale_before = now - relativedelta(months=months)
        return self.filter(
            Q(expires_at__lt=now)
            | Q(expires_at__isnull=True, crawled_at__lt=stale_before)
        )


class Job(models.Model):
    source = models.CharField(max_length=50, verbose_name="수집 사이트")
    external_id = models.CharField(max_length=255, verbose_name="사이트 공고 ID")
    title = models.CharField(max_length=255, verbose_name="공고 제목")
    company = models.CharField(max_length=255, blank=True, null=True, verbose_name="회사명")
    location = models.JSONField(blank=True, null=True, verbose_name="근무지")
    salary_range = models.JSONField(blank=True, null=True, verbose_name="급여 범위")
    employment_type = models.CharField(max_length=100, blank=True, null=True, verbose_name="고용 형태")
    description = models.TextField(blank=True, null=True, verbose_name="상세 설명")
    is_disability_friendly = models.BooleanField(default=False, verbose_name="장애인 채용 여부")
    crawled_at = models.DateTimeField(default=timezone.now, verbose_name="수집 시각")
    expires_at = models.DateTimeField(blank=True, null=True, verbose_name="마감일")
    external_url = models.CharField(max_length=2083, blank=True, default="", verbose_name="원문 URL")
    raw_data = models.JSONField(blank=True, null=True, verbose_name="원본 데이터")

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="생성일")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일")

    objects = JobQuerySet.as_manager()

    def __str__(self):
        return f"[{self.source}] {self.title}"

    class Meta:
        db_table = "jobs"
        verbose_name = "채용공고"
        verbose_name_plural = "채용공고 목록"
        ordering = ["-crawled_at"]
        constraints = [
            models.UniqueConstraint(fields=["source", "external_id"], name="uniq_job_source_external_id"),
        ]
        indexes = [
            models.Index(fields=["crawled_at"], name="idx_job_crawled_at"),
            models.Index(fields=["expires_at"], name="idx_job_expires_at"),
        ]


class CrawlRun(models.Model):
    STATUS_RUNNING = "running"
    STATUS_SUCCESS = "success"
    STATUS_FAILED = "failed"
    STATUS_CHOICES = [
        (STATUS_RUNNING, "Running"),
        (STATUS_SUCCESS, "Success"),
        (STATUS_FAILED, "Failed"),
    ]

    source = models.CharField(max_length=50, verbose_name="수집 사이트")
    page = models.PositiveIntegerField(default=1, verbose_name="페이지")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_RUNNING, verbose_name="상태")
    jobs_found = models.IntegerField(default=0, verbose_name="발견 공고 수")
    jobs_new = models.IntegerField(default=0, verbose_name="신규 공고 수")
    jobs_updated = models.IntegerField(default=0, verbose_name="갱신 공고 수")
    error_message = models.TextField(blank=True, null=True, verbose_name="오류 메시지")
    started_at = models.DateTimeField(default=timezone.now, verbose_name="시작 시각")
    completed_at = models.DateTimeField(blank=True, null=True, verbose_name="완료 시각")

    def __str__(self):
        return f"{self.source} p{self.page} ({self.status})"

    @property
    def duration(self) -> timedelta | None:
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    def _finish(self, **fields) -> bool:
        # running 인 행만 종료 상태로 바꾼다. 이미 끝난 run 은 건드리지 않음
        fields.setdefault("completed_at", timezone.now())
        changed = CrawlRun.objects.filter(pk=self.pk, status=self.STATUS_RUNNING).update(**fields)
        if changed:
            for name, value in fields.items():
                setattr(self, name, value)
        return bool(changed)

    def mark_success(self, found, new, updated) -> bool:
        return self._finish(
            status=self.STATUS_SUCCESS,
            jobs_found=found,
            jobs_new=new,
            jobs_updated=updated,
        )

    def mark_failed(self, error, found=0, new=0, updated=0) -> bool:
        return self._finish(
            status=self.STATUS_FAILED,
            error_message=str(error),
            jobs_found=found,
            jobs_new=new,
            jobs_updated=updated,
        )

    class Meta:
        db_table = "crawl_runs"
        verbose_name = "크롤링 실행 기록"
        verbose_name_plural = "크롤링 실행 기록 목록"
        ordering = ["-started_at"]
        indexes = [
            models.Index(fields=["source", "started_at"], name="idx_crawlrun_source_started"),
        ]


class CrawlerConfig(models.Model):
    """키워드 설정 싱글톤 (pk=1 한 행만 쓴다)."""

    SINGLETON_PK = 1

    keywords = models.JSONField(default=list, verbose_name="검색 키워드")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="수정일")

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(
            pk=cls.SINGLETON_PK,
            defaults={"keywords": list(settings.DEFAULT_CRAWLER_KEYWORDS)},
        )
        return obj

    def __str__(self):
        return ", ".join(self.keywords or [])

    class Meta:
        db_table = "crawler_config"
        verbose_name = "크롤러 설정"
        verbose_name_plural = "크롤러 설정"
