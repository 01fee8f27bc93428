"""
사이트 어댑터 공통 계약.

    fetch_listings(page) -> list[RawJob]
    fetch_detail(external_id) -> JobDetail
    normalize(raw) -> NormalizedJob
    cleanup()

HTTP 세션은 요청 단위로 열고 어떤 경로로 빠져나가든 닫는다 (open_session).
같은 source 를 여러 페이지 동시에 돌려도 세션 상태가 섞이지 않는다.
"""
from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator

import requests
from scrapy.selector import Selector

from .. import settings as crawl_settings
from ..exceptions import FetchFailure
from ..keywords import KeywordProvider, StaticKeywordProvider, contains_keyword
from ..parsing import (
    dedupe,
    normalize_whitespace,
    parse_deadline,
    parse_salary_range,
    split_items,
)
from ..types import JobDetail, NormalizedJob, RawJob

logger = logging.getLogger(__name__)


def text_of(selector) -> str:
    """하위 텍스트 노드를 전부 모아 공백 정리."""
    if selector is None:
        return ""
    return normalize_whitespace(" ".join(selector.xpath(".//text()").getall()))


def nth_text(selectors, index: int) -> str:
    return text_of(selectors[index]) if index < len(selectors) else ""


def first_text(sel, *css_queries: str) -> str:
    """여러 후보 셀렉터 중 처음으로 텍스트가 있는 것."""
    for query in css_queries:
        found = text_of(sel.css(query)[:1])
        if found:
            return found
    return ""


class DetailLabels:
    """상세 페이지 라벨/값 테이블에서 찾을 라벨 후보들 (사이트 공통)."""

    salary = ("급여", "임금", "연봉", "급여조건")
    deadline = ("모집마감일", "접수마감일", "접수마감", "마감일", "모집마감")
    employment = ("고용형태", "근무형태", "모집직종")
    location = ("근무지역", "근무지", "근무예정지", "지역")
    requirements = ("자격요건", "자격조건", "지원자격", "응시자격", "모집조건")
    preferred = ("우대사항", "우대조건")
    benefits = ("복리후생", "복지", "혜택")
    phone = ("담당자 연락처", "연락처", "전화번호")
    email = ("담당자 이메일", "이메일")
    website = ("홈페이지",)


class BaseCrawlerAdapter(ABC):
    source: str = ""
    base_url: str = ""

    # 목록 페이지가 정상 로드됐는지 판단할 컨테이너 셀렉터
    listing_container: str = ""
    detail_container: str = ""

    # 장애인 채용 전용 사이트면 분류를 키워드에 맡기지 않는다
    dedicated: bool = False

    def __init__(
        self,
        keyword_provider: KeywordProvider | None = None,
        *,
        session_factory: Callable[[], requests.Session] = requests.Session,
        sleep: Callable[[float], None] = time.sleep,
        request_delay: float | None = None,
        timeout=crawl_settings.NAVIGATION_TIMEOUT,
    ):
        self.keyword_provider = keyword_provider or StaticKeywordProvider()
        self.session_factory = session_factory
        self.sleep = sleep
        self.request_delay = (
            request_delay
            if request_delay is not None
            else crawl_settings.REQUEST_DELAY.get(self.source, crawl_settings.DEFAULT_REQUEST_DELAY)
        )
        self.timeout = timeout
        self._open_sessions: set = set()
        self._keyword_snapshot: list[str] | None = None

    # ============== 계약 ==============

    @abstractmethod
    def fetch_listings(self, page: int = 1) -> list[RawJob]:
        ...

    @abstractmethod
    def fetch_detail(self, external_id: str) -> JobDetail:
        ...

    @abstractmethod
    def normalize(self, raw: RawJob) -> NormalizedJob:
        ...

    def cleanup(self) -> None:
        """남아 있는 세션을 닫는다. 여러 번 호출해도 된다."""
        while self._open_sessions:
            session = self._open_sessions.pop()
            try:
                session.close()
            except Exception as e:  # noqa: BLE001
                logger.warning("%s: session close failed (%s)", self.source, e)

    # ============== 키워드 ==============

    def keywords(self) -> list[str]:
        # 크롤 중에는 시작 시점 스냅샷, 그 밖에서는 매번 다시 읽는다
        if self._keyword_snapshot is not None:
            return list(self._keyword_snapshot)
        return self.keyword_provider.current()

    @contextmanager
    def keyword_snapshot(self) -> Iterator[list[str]]:
        """크롤 한 번 동안 키워드를 한 번만 읽는다. 관리자 변경은 다음 크롤부터 반영된다."""
        self._keyword_snapshot = self.keyword_provider.current()
        try:
            yield list(self._keyword_snapshot)
        finally:
            self._keyword_snapshot = None

    def is_disability_friendly(self, text: str | None, full_page: bool = False) -> bool:
        if self.dedicated:
            return True
        return contains_keyword(text, self.keywords(), expand=full_page)

    # ============== HTTP ==============

    @contextmanager
    def open_session(self) -> Iterator[requests.Session]:
        session = self.session_factory()
        session.headers.update(crawl_settings.DEFAULT_REQUEST_HEADERS)
        self._open_sessions.add(session)
        try:
            yield session
        finally:
            self._open_sessions.discard(session)
            session.close()

    def fetch_page(self, url: str, params: dict | None = None, container: str = "") -> Selector:
        """
        GET 한 번 + 파싱. 아래는 전부 FetchFailure 로 바꿔서 올린다.
        - 네트워크 오류 / 타임아웃
        - 4xx, 5xx
        - 기대한 컨테이너 셀렉터가 없음
        성공하면 사이트별 요청 간격만큼 쉬고 돌아간다.
        """
        with self.open_session() as session:
            try:
                resp = session.get(url, params=params, timeout=self.timeout)
                resp.raise_for_status()
            except requests.RequestException as e:
                raise FetchFailure(
                    f"{self.source}: request failed for {url} ({e})",
                    source=self.source,
                    url=url,
                ) from e

            html = resp.text

        sel = Selector(text=html)
        if container and not sel.css(container):
            raise FetchFailure(
                f"{self.source}: selector {container!r} not found on {url}",
                source=self.source,
                url=url,
            )

        self.sleep(self.request_delay)
        return sel

    # ============== 파싱 헬퍼 ==============

    def absolute_url(self, href: str) -> str:
        href = (href or "").strip()
        if href.startswith("http://") or href.startswith("https://"):
            return href
        if href.startswith("//"):
            return "https:" + href
        if not href.startswith("/"):
            href = "/" + href
        return f"{self.base_url}{href}"

    def collect_details(self, sel: Selector, row_css: str) -> dict[str, str]:
        """
        th/td 테이블 행과 dt/dd 목록을 {라벨: 값} 으로 모은다.
        한 행에 th 가 여러 개면 같은 순서의 td 와 짝을 맞춘다.
        """
        details: dict[str, str] = {}
        for row in sel.css(row_css):
            headers = row.css("th")
            cells = row.css("td")
            for index, th in enumerate(headers):
                label = text_of(th)
                value = text_of(cells[index]) if index < len(cells) else ""
                if label and value:
                    details[label] = value

        for dl in sel.css("dl"):
            for dt, dd in zip(dl.css("dt"), dl.css("dd")):
                label = text_of(dt)
                value = text_of(dd)
                if label and value:
                    details.setdefault(label, value)
        return details

    @staticmethod
    def pick(details: dict[str, str], *labels: str) -> str:
        for label in labels:
            if details.get(label):
                return details[label]
        return ""

    def build_detail(
        self,
        sel: Selector,
        external_id: str,
        url: str,
        *,
        title: str,
        company: str,
        description: str,
        details: dict[str, str],
        location_text: str = "",
        extra_requirements=(),
        extra_benefits=(),
    ) -> JobDetail:
        labels = DetailLabels

        requirements = [details[label] for label in labels.requirements if details.get(label)]
        requirements.extend(extra_requirements)
        preferred = self.pick(details, *labels.preferred)
        if preferred:
            requirements.append(f"우대: {preferred}")

        benefits = split_items(self.pick(details, *labels.benefits))
        benefits.extend(extra_benefits)

        contact = {
            "phone": self.pick(details, *labels.phone),
            "email": self.pick(details, *labels.email),
            "website": self.pick(details, *labels.website),
        }

        company = company or self.pick(details, "기업명", "회사명")
        if not title and company:
            title = f"{company} 채용공고"

        location = location_text or self.pick(details, *labels.location)
        page_text = text_of(sel.css("body")) or text_of(sel)

        return JobDetail(
            source=self.source,
            external_id=external_id,
            url=url,
            title=title,
            company=company or None,
            location={"address": location} if location else None,
            salary_range=parse_salary_range(self.pick(details, *labels.salary)),
            employment_type=self.pick(details, *labels.employment) or None,
            description=description or None,
            is_disability_friendly=self.is_disability_friendly(page_text, full_page=True),
            crawled_at=datetime.now(),
            expires_at=parse_deadline(self.pick(details, *labels.deadline)),
            requirements=dedupe(requirements),
            benefits=dedupe(benefits),
            contact_info={k: v for k, v in contact.items() if v},
        )

    def base_normalize(self, raw: RawJob, **overrides) -> NormalizedJob:
        """
        목록 데이터만으로 만들 수 있는 만큼 채운다.
        급여/상세 설명은 상세 페이지에서만 나오므로 여기서는 None.
        """
        data = raw.data or {}
        title = normalize_whitespace(data.get("title"))
        location = normalize_whitespace(data.get("location"))
        fields = {
            "source": self.source,
            "external_id": raw.external_id or "",
            "title": title,
            "company": normalize_whitespace(data.get("company")) or None,
            "location": {"address": location} if location else None,
            "salary_range": parse_salary_range(data.get("salary")),
            "employment_type": normalize_whitespace(data.get("employment_type")) or None,
            "description": None,
            "is_disability_friendly": self.is_disability_friendly(title),
            "crawled_at": datetime.now(),
            "expires_at": parse_deadline(data.get("deadline")),
            "external_url": raw.url or "",
            "raw_data": raw.to_dict(),
        }
        fields.update(overrides)
        return NormalizedJob(**fields)

    def __repr__(self):
        return f"<{self.__class__.__name__} source={self.source}>"
