import logging

from ..keywords import build_search_query
from ..parsing import extract_first, normalize_whitespace
from ..types import JobDetail, NormalizedJob, RawJob
from .base import BaseCrawlerAdapter, first_text, nth_text, text_of

logger = logging.getLogger(__name__)


class SaraminAdapter(BaseCrawlerAdapter):
    """사람인 키워드 검색 결과."""

    source = "saramin"
    base_url = "https://www.saramin.co.kr"
    listing_container = ".item_recruit"
    detail_container = ".wrap_jv_header, .jv_header"

    SEARCH_PATH = "/zf_user/search"
    DETAIL_PATH = "/zf_user/jobs/relay/view"

    def search_params(self, page: int) -> dict:
        return {
            "search_area": "main",
            "search_done": "y",
            "search_optional_item": "n",
            "searchType": "search",
            "searchword": build_search_query(self.keywords()),
            "recruitPage": page,
        }

    def fetch_listings(self, page: int = 1) -> list[RawJob]:
        sel = self.fetch_page(
            f"{self.base_url}{self.SEARCH_PATH}",
            params=self.search_params(page),
            container=self.listing_container,
        )

        results = []
        for item in sel.css(".item_recruit"):
            link = item.css(".job_tit a")
            href = (link.attrib.get("href") or "").strip()
            if not href:
                continue

            conditions = item.css(".job_condition span")
            results.append(RawJob(
                source=self.source,
                external_id=self.extract_job_id(href),
                url=self.absolute_url(href),
                data={
                    "title": normalize_whitespace(link.attrib.get("title") or text_of(link)),
                    "company": text_of(item.css(".corp_name a")),
                    "location": nth_text(conditions, 0),
                    "experience": nth_text(conditions, 1),
                    "education": nth_text(conditions, 2),
                    "employment_type": nth_text(conditions, 3),
                    "deadline": text_of(item.css(".job_date .date")),
                    "listing_html": item.get(),
                },
            ))

        logger.info("saramin: page=%s items=%s", page, len(results))
        return results

    def fetch_detail(self, external_id: str) -> JobDetail:
        url = f"{self.base_url}{self.DETAIL_PATH}?rec_idx={external_id}"
        sel = self.fetch_page(url, container=self.detail_container)

        details = self.collect_details(sel, ".jv_summary tr, .jv_cont table tr")

        requirements = []
        for box in sel.css(".cont.box, .jv_detail .cont"):
            heading = text_of(box.css("h3"))
            if "자격요건" in heading or "우대사항" in heading:
                requirements.extend(text_of(li) for li in box.css("li"))

        benefits = [text_of(li) for li in sel.css(".jv_benefit .benefit_list li")]

        return self.build_detail(
            sel,
            external_id,
            url,
            title=first_text(sel, ".wrap_jv_header .tit_job", ".jv_header .tit_job", "h1"),
            company=first_text(sel, ".wrap_jv_header .jv_company a", ".jv_header .company"),
            description=first_text(sel, ".jv_detail", ".cont.box"),
            details=details,
            location_text=first_text(sel, ".jv_location address", ".jv_location"),
            extra_requirements=[r for r in requirements if r],
            extra_benefits=[b for b in benefits if b],
        )

    def normalize(self, raw: RawJob) -> NormalizedJob:
        return self.base_normalize(raw)

    @staticmethod
    def extract_job_id(href: str) -> str:
        return extract_first([r"rec_idx=(\d+)"], href)
