import logging

from ..parsing import extract_first
from ..types import JobDetail, NormalizedJob, RawJob
from .base import BaseCrawlerAdapter, first_text, nth_text, text_of

logger = logging.getLogger(__name__)


class Work24Adapter(BaseCrawlerAdapter):
    """고용24 채용정보. 장애인 우대(srchDisablGbn=Y) 필터가 걸린 목록만 본다."""

    source = "work24"
    base_url = "https://www.work24.go.kr"
    listing_container = ".tbl-type01"
    detail_container = ".content, .detail-content, .job-content"
    dedicated = True

    LIST_PATH = "/wk/a/c/CA0101.do"
    DETAIL_PATH = "/wk/a/c/CA0301.do"
    ROWS_PER_PAGE = 20

    def list_params(self, page: int) -> dict:
        return {
            "srchType": "12",
            "srchKeyword": "",
            "rowsPerPage": self.ROWS_PER_PAGE,
            "pageNo": page,
            "srchDisablGbn": "Y",
        }

    def fetch_listings(self, page: int = 1) -> list[RawJob]:
        sel = self.fetch_page(
            f"{self.base_url}{self.LIST_PATH}",
            params=self.list_params(page),
            container=self.listing_container,
        )

        results = []
        for row in sel.css(".tbl-type01 tbody tr:not(.no-data)"):
            link = row.css(".al-l a")
            onclick = link.attrib.get("onclick") or ""
            if not onclick:
                continue

            external_id = self.extract_job_id(onclick)
            cells = row.css("td")
            results.append(RawJob(
                source=self.source,
                external_id=external_id,
                url=self.detail_url(external_id),
                data={
                    "title": text_of(link),
                    "company": nth_text(cells, 2),
                    "location": nth_text(cells, 3),
                    "deadline": nth_text(cells, 5),
                    "listing_html": row.get(),
                },
            ))

        logger.info("work24: page=%s items=%s", page, len(results))
        return results

    def detail_url(self, external_id: str) -> str:
        return f"{self.base_url}{self.DETAIL_PATH}?jobId={external_id}"

    def fetch_detail(self, external_id: str) -> JobDetail:
        url = self.detail_url(external_id)
        sel = self.fetch_page(url, container=self.detail_container)

        details = self.collect_details(
            sel, ".job-info-table tr, .detail-table tr, .info-table tr, table.tbl-type01 tr"
        )

        return self.build_detail(
            sel,
            external_id,
            url,
            title=first_text(sel, ".job-detail-top h3", ".detail-title", "h2.title", "h3.title"),
            company=first_text(sel, ".company-info .name", ".company-name", ".corp-name"),
            description=first_text(sel, ".job-detail-content", ".detail-content", ".job-content"),
            details=details,
        )

    def normalize(self, raw: RawJob) -> NormalizedJob:
        return self.base_normalize(raw)

    @staticmethod
    def extract_job_id(onclick: str) -> str:
        # onclick="fnJobDetail('12345')"
        return extract_first([r"fnJobDetail\(\s*'(\d+)'\s*\)"], onclick)
