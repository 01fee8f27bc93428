"""
키워드 설정 저장소 (CrawlerConfig 싱글톤).

어댑터는 DatabaseKeywordProvider.current() 를 크롤마다 호출하므로
관리자가 키워드를 바꾸면 다음 크롤부터 바로 반영된다.
"""
import logging

from django.conf import settings
from django.db import DatabaseError

from crawler.keywords import clean_keywords

from .models import CrawlerConfig

logger = logging.getLogger(__name__)


def get_keywords():
    try:
        keywords = clean_keywords(CrawlerConfig.load().keywords or [])
    except DatabaseError as e:
        logger.warning("get_keywords: falling back to defaults (%s)", e)
        return list(settings.DEFAULT_CRAWLER_KEYWORDS)
    return keywords or list(settings.DEFAULT_CRAWLER_KEYWORDS)


def set_keywords(keywords):
    cleaned = clean_keywords(keywords)
    if not cleaned:
        raise ValueError("keywords must contain at least one non-empty string")
    config = CrawlerConfig.load()
    config.keywords = cleaned
    config.save(update_fields=["keywords", "updated_at"])
    logger.info("set_keywords: updated (keywords=%s)", cleaned)
    return cleaned


class DatabaseKeywordProvider:
    def current(self):
        return get_keywords()
