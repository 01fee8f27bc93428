import logging

from ..keywords import primary_keyword
from ..parsing import extract_first, normalize_whitespace
from ..types import JobDetail, NormalizedJob, RawJob
from .base import BaseCrawlerAdapter, first_text, text_of

logger = logging.getLogger(__name__)


class JobKoreaAdapter(BaseCrawlerAdapter):
    """잡코리아 키워드 검색. 검색어는 키워드 목록의 첫 번째 값만 쓴다."""

    source = "jobkorea"
    base_url = "https://www.jobkorea.co.kr"
    listing_container = ".list-post, .recruit-list, .job-list"
    detail_container = ".tit-area, .detail-header, .job-header"

    ITEM_SELECTOR = ".list-post .post, .recruit-list .list-item, .job-list .item"

    def fetch_listings(self, page: int = 1) -> list[RawJob]:
        sel = self.fetch_page(
            f"{self.base_url}/Search/",
            params={"stext": primary_keyword(self.keywords()), "Page_No": page},
            container=self.listing_container,
        )

        results = []
        for item in sel.css(self.ITEM_SELECTOR):
            link = item.css(".title a, .job-title a, a.title")[:1]
            href = (link.attrib.get("href") or "").strip()
            if not href:
                continue

            results.append(RawJob(
                source=self.source,
                external_id=self.extract_job_id(href),
                url=self.absolute_url(href),
                data={
                    "title": normalize_whitespace(link.attrib.get("title") or text_of(link)),
                    "company": first_text(item, ".name", ".company", ".corp-name"),
                    "location": first_text(item, ".loc", ".location", ".area"),
                    "deadline": first_text(item, ".date", ".deadline", ".d-day"),
                    "listing_html": item.get(),
                },
            ))

        logger.info("jobkorea: page=%s items=%s", page, len(results))
        return results

    def fetch_detail(self, external_id: str) -> JobDetail:
        url = f"{self.base_url}/Recruit/GI_Read/{external_id}"
        sel = self.fetch_page(url, container=self.detail_container)

        details = self.collect_details(
            sel, ".tbRow tr, .info-table tr, .detail-table tr, table.table-info tr"
        )

        # <li><strong>급여</strong> 3000만원</li> 형태의 요약 영역
        for li in sel.css(".summary li"):
            label = text_of(li.css("strong"))
            if label:
                value = normalize_whitespace(text_of(li).replace(label, "", 1))
                if value:
                    details[label] = value

        requirements = [text_of(li) for li in sel.css(".requirement li, .qualify li")]
        benefits = [text_of(li) for li in sel.css(".benefit li, .welfare li")]

        return self.build_detail(
            sel,
            external_id,
            url,
            title=first_text(sel, ".tit-area .tit", ".detail-header h2", ".job-header .title", "h2.title"),
            company=first_text(sel, ".co-name", ".company-name", ".corp-info .name"),
            description=first_text(sel, ".cont", ".detail-content", ".job-description"),
            details=details,
            extra_requirements=[r for r in requirements if r],
            extra_benefits=[b for b in benefits if b],
        )

    def normalize(self, raw: RawJob) -> NormalizedJob:
        return self.base_normalize(raw, employment_type=None)

    @staticmethod
    def extract_job_id(href: str) -> str:
        # /Recruit/GI_Read/12345678 또는 ?Gicode=12345678
        return extract_first([r"/Recruit/GI_Read/(\d+)", r"[?&]Gicode=(\d+)"], href)
