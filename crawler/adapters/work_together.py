import logging

from ..parsing import extract_first
from ..types import JobDetail, NormalizedJob, RawJob
from .base import BaseCrawlerAdapter, first_text, nth_text, text_of

logger = logging.getLogger(__name__)


class WorkTogetherAdapter(BaseCrawlerAdapter):
    """워크투게더 (장애인 채용 전문 포털)."""

    source = "workTogether"
    base_url = "https://www.worktogether.or.kr"
    listing_container = ".board_list"
    detail_container = ".view_top, .view_table"
    dedicated = True

    LIST_PATH = "/empInfo/empInfoSrch/list/retriveWorkRegionEmpIntroList.do"
    DETAIL_PATH = "/empInfo/empInfoSrch/detail/empDetailAuthView.do"

    def fetch_listings(self, page: int = 1) -> list[RawJob]:
        sel = self.fetch_page(
            f"{self.base_url}{self.LIST_PATH}",
            params={"pageIndex": page},
            container=self.listing_container,
        )

        results = []
        for row in sel.css(".board_list tbody tr"):
            link = row.css("td.tit a")
            href = (link.attrib.get("href") or "").strip()
            if not href:
                continue

            cells = row.css("td")
            results.append(RawJob(
                source=self.source,
                external_id=self.extract_job_id(href),
                url=self.absolute_url(href),
                data={
                    "title": text_of(link),
                    "company": nth_text(cells, 1),
                    "location": nth_text(cells, 2),
                    "deadline": nth_text(cells, 4),
                    "listing_html": row.get(),
                },
            ))

        logger.info("workTogether: page=%s items=%s", page, len(results))
        return results

    def fetch_detail(self, external_id: str) -> JobDetail:
        url = f"{self.base_url}{self.DETAIL_PATH}?searchEpSeq={external_id}"
        sel = self.fetch_page(url, container=self.detail_container)

        return self.build_detail(
            sel,
            external_id,
            url,
            title=first_text(sel, ".view_top h3"),
            company=first_text(sel, ".company_name"),
            description=first_text(sel, ".view_content"),
            details=self.collect_details(sel, ".view_table tr"),
        )

    def normalize(self, raw: RawJob) -> NormalizedJob:
        return self.base_normalize(raw)

    @staticmethod
    def extract_job_id(href: str) -> str:
        return extract_first([r"searchEpSeq=(\d+)"], href)
