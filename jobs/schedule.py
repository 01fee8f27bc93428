from dataclasses import dataclass

from django.conf import settings

from crawler.adapters import ADAPTER_CLASSES
from crawler.exceptions import ConfigurationError

CRON_FIELDS = ("minute", "hour", "day_of_month", "month_of_year", "day_of_week")


@dataclass(frozen=True)
class CrawlSchedule:
    """
    정기 크롤 정책. 큐/워커와 무관하게 '무엇을 언제 넣을지'만 표현한다.
    cron 은 5필드 (분 시 일 월 요일).
    """

    cron: str = "0 */6 * * *"
    sources: tuple = ()
    page: int = 1

    def validate(self):
        unknown = [s for s in self.sources if s not in ADAPTER_CLASSES]
        if unknown:
            raise ConfigurationError(f"Unknown crawl sources: {', '.join(unknown)}")
        self.crontab_kwargs()
        return self

    def jobs(self):
        return [{"source": source, "page": self.page} for source in self.sources]

    def crontab_kwargs(self):
        parts = self.cron.split()
        if len(parts) != len(CRON_FIELDS):
            raise ConfigurationError(f"Invalid cron expression: {self.cron!r}")
        return dict(zip(CRON_FIELDS, parts))


def default_schedule():
    return CrawlSchedule(cron=settings.CRAWL_CRON, sources=tuple(settings.CRAWL_SOURCES))
