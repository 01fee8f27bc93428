from datetime import datetime

import pytest
import requests

from crawler.adapters import (
    JobKoreaAdapter,
    SaraminAdapter,
    Work24Adapter,
    WorkTogetherAdapter,
    build_adapters,
    get_adapter_class,
)
from crawler.exceptions import ConfigurationError, FetchFailure
from crawler.keywords import StaticKeywordProvider
from crawler.types import RawJob

from .helpers import SessionFactory, make_response

SARAMIN_LISTING = """
<html><body><div class="content">
  <div class="item_recruit">
    <div class="area_job">
      <h2 class="job_tit">
        <a href="/zf_user/jobs/relay/view?view_type=search&rec_idx=49012345" title="[장애인채용] 사무보조">[장애인채용] 사무보조</a>
      </h2>
      <div class="job_date"><span class="date">~ 12/31(화)</span></div>
      <div class="job_condition">
        <span>서울 강남구</span><span>신입</span><span>고졸이상</span><span>정규직</span>
      </div>
    </div>
    <div class="area_corp"><strong class="corp_name"><a href="/company">(주)리브릿지</a></strong></div>
  </div>
  <div class="item_recruit">
    <div class="area_job">
      <h2 class="job_tit"><a href="/zf_user/jobs/relay/view?rec_idx=49012346" title="웹 개발자">웹 개발자</a></h2>
      <div class="job_date"><span class="date">상시채용</span></div>
      <div class="job_condition"><span>부산</span></div>
    </div>
    <div class="area_corp"><strong class="corp_name"><a>테크컴퍼니</a></strong></div>
  </div>
  <div class="item_recruit"><h2 class="job_tit"><a>링크 없음</a></h2></div>
</div></body></html>
"""

WORK24_LISTING = """
<html><body>
<table class="tbl-type01">
  <tbody>
    <tr>
      <td>1</td>
      <td class="al-l"><a href="#none" onclick="fnJobDetail('K151234567')">경리 사무원</a></td>
      <td>한빛상사</td>
      <td>경기 성남시</td>
      <td>경력무관</td>
      <td>2025-03-15</td>
    </tr>
    <tr>
      <td>2</td>
      <td class="al-l"><a href="#none" onclick="fnJobDetail('2024110700')">물류 보조</a></td>
      <td>물류센터</td>
      <td>인천</td>
      <td>신입</td>
      <td>채용시까지</td>
    </tr>
    <tr class="no-data"><td colspan="6">검색 결과가 없습니다</td></tr>
  </tbody>
</table>
</body></html>
"""

WORK_TOGETHER_DETAIL = """
<html><body>
<div class="view_top"><h3>사무보조원 모집</h3><p class="company_name">리브릿지</p></div>
<table class="view_table">
  <tr><th>급여</th><td>월 250만원</td><th>고용형태</th><td>계약직</td></tr>
  <tr><th>근무지역</th><td>서울 마포구</td><th>모집마감일</th><td>2025-01-31</td></tr>
  <tr><th>자격요건</th><td>고졸 이상</td></tr>
  <tr><th>우대사항</th><td>컴퓨터활용능력</td></tr>
  <tr><th>복리후생</th><td>4대보험, 퇴직금·식대</td></tr>
  <tr><th>연락처</th><td>02-123-4567</td></tr>
  <tr><th>이메일</th><td>hr@rebridge.kr</td></tr>
</table>
<div class="view_content">사무 보조 업무 전반</div>
</body></html>
"""

JOBKOREA_DETAIL = """
<html><body>
<div class="tit-area"><div class="co-name">리브릿지</div></div>
<div class="summary"><ul>
  <li><strong>급여</strong> 3000만원~4000만원</li>
  <li><strong>마감일</strong> 2025.02.28</li>
</ul></div>
<div class="cont">장애인 우대 채용입니다</div>
<ul class="benefit"><li>재택근무</li></ul>
</body></html>
"""


def _adapter(cls, factory, sleeps, keywords=None):
    return cls(
        StaticKeywordProvider(keywords),
        session_factory=factory,
        sleep=sleeps,
    )


def test_saramin_listing_rows(sleeps):
    factory = SessionFactory(make_response(SARAMIN_LISTING))
    adapter = _adapter(SaraminAdapter, factory, sleeps)

    items = adapter.fetch_listings(page=2)

    assert [i.external_id for i in items] == ["49012345", "49012346"]
    first = items[0]
    assert first.url == "https://www.saramin.co.kr/zf_user/jobs/relay/view?view_type=search&rec_idx=49012345"
    assert first.data["title"] == "[장애인채용] 사무보조"
    assert first.data["company"] == "(주)리브릿지"
    assert first.data["location"] == "서울 강남구"
    assert first.data["employment_type"] == "정규직"
    assert "item_recruit" in first.data["listing_html"]

    call = factory.calls[0]
    assert call["params"]["searchword"] == "장애인"
    assert call["params"]["recruitPage"] == 2
    assert call["timeout"] == adapter.timeout
    assert sleeps.calls == [2]


def test_saramin_normalize_classifies_by_title(sleeps):
    factory = SessionFactory(make_response(SARAMIN_LISTING))
    adapter = _adapter(SaraminAdapter, factory, sleeps)
    first, second = adapter.fetch_listings()

    job = adapter.normalize(first)
    assert job.is_disability_friendly is True
    assert job.company == "(주)리브릿지"
    assert job.location == {"address": "서울 강남구"}
    assert job.expires_at == datetime(datetime.now().year, 12, 31)
    assert job.raw_data["external_id"] == "49012345"
    assert job.missing_fields == []

    other = adapter.normalize(second)
    assert other.is_disability_friendly is False
    assert other.expires_at > datetime.now()


def test_keywords_are_reread_on_every_call(sleeps):
    class MutableProvider:
        def __init__(self):
            self.keywords = ["장애인"]

        def current(self):
            return list(self.keywords)

    provider = MutableProvider()
    factory = SessionFactory(make_response(SARAMIN_LISTING), make_response(SARAMIN_LISTING))
    adapter = SaraminAdapter(provider, session_factory=factory, sleep=sleeps)

    adapter.fetch_listings()
    provider.keywords = ["보훈", "장애"]
    adapter.fetch_listings()

    assert factory.calls[0]["params"]["searchword"] == "장애인"
    assert factory.calls[1]["params"]["searchword"] == "보훈 OR 장애"


def test_work24_listing_skips_placeholder_rows_and_is_dedicated(sleeps):
    factory = SessionFactory(make_response(WORK24_LISTING))
    adapter = _adapter(Work24Adapter, factory, sleeps)

    items = adapter.fetch_listings()

    assert [i.external_id for i in items] == ["", "2024110700"]
    assert items[1].url == "https://www.work24.go.kr/wk/a/c/CA0301.do?jobId=2024110700"
    assert items[1].data["company"] == "물류센터"
    assert items[1].data["location"] == "인천"
    assert factory.calls[0]["params"]["srchDisablGbn"] == "Y"

    job = adapter.normalize(items[1])
    assert job.is_disability_friendly is True
    assert job.expires_at > datetime.now()
    assert sleeps.calls == [5]


def test_work24_item_without_numeric_id_is_marked_missing(sleeps):
    factory = SessionFactory(make_response(WORK24_LISTING))
    adapter = _adapter(Work24Adapter, factory, sleeps)

    job = adapter.normalize(adapter.fetch_listings()[0])
    assert job.missing_fields == ["external_id"]


def test_work_together_detail(sleeps):
    factory = SessionFactory(make_response(WORK_TOGETHER_DETAIL))
    adapter = _adapter(WorkTogetherAdapter, factory, sleeps)

    detail = adapter.fetch_detail("778899")

    assert detail.url.endswith("?searchEpSeq=778899")
    assert detail.title == "사무보조원 모집"
    assert detail.company == "리브릿지"
    assert detail.salary_range == {"min": 30_000_000, "currency": "KRW"}
    assert detail.employment_type == "계약직"
    assert detail.location == {"address": "서울 마포구"}
    assert detail.application_deadline == datetime(2025, 1, 31)
    assert detail.requirements == ["고졸 이상", "우대: 컴퓨터활용능력"]
    assert detail.benefits == ["4대보험", "퇴직금", "식대"]
    assert detail.contact_info == {"phone": "02-123-4567", "email": "hr@rebridge.kr"}
    assert detail.description == "사무 보조 업무 전반"
    assert detail.is_disability_friendly is True
    assert sleeps.calls == [3]


def test_jobkorea_detail_synthesizes_title_and_scans_full_page(sleeps):
    factory = SessionFactory(make_response(JOBKOREA_DETAIL))
    adapter = _adapter(JobKoreaAdapter, factory, sleeps)

    detail = adapter.fetch_detail("46001234")

    assert detail.url == "https://www.jobkorea.co.kr/Recruit/GI_Read/46001234"
    assert detail.title == "리브릿지 채용공고"
    assert detail.salary_range == {"min": 30_000_000, "max": 40_000_000, "currency": "KRW"}
    assert detail.expires_at == datetime(2025, 2, 28)
    assert detail.benefits == ["재택근무"]
    assert detail.is_disability_friendly is True


def test_jobkorea_normalize_has_no_employment_type():
    adapter = JobKoreaAdapter(StaticKeywordProvider())
    raw = RawJob(
        source="jobkorea",
        external_id="1",
        url="https://www.jobkorea.co.kr/Recruit/GI_Read/1",
        data={"title": "회계 담당", "employment_type": "정규직"},
    )
    assert adapter.normalize(raw).employment_type is None


@pytest.mark.parametrize(
    "adapter_cls, value, expected",
    [
        (SaraminAdapter, "/zf_user/jobs/relay/view?rec_idx=4901", "4901"),
        (SaraminAdapter, "/zf_user/jobs/relay/view", ""),
        (JobKoreaAdapter, "/Recruit/GI_Read/46001234?Oem_Code=C1", "46001234"),
        (JobKoreaAdapter, "/Recruit/Read?Gicode=46009999", "46009999"),
        (JobKoreaAdapter, "/Recruit/Read", ""),
        (Work24Adapter, "fnJobDetail('K151')", ""),
        (Work24Adapter, "fnJobDetail( '2024110700' )", "2024110700"),
        (WorkTogetherAdapter, "/empDetailAuthView.do?searchEpSeq=778899&x=1", "778899"),
        (WorkTogetherAdapter, "javascript:void(0)", ""),
    ],
)
def test_extract_job_id(adapter_cls, value, expected):
    assert adapter_cls.extract_job_id(value) == expected


def test_http_error_becomes_fetch_failure_and_session_is_closed(sleeps):
    factory = SessionFactory(make_response("oops", status=503))
    adapter = _adapter(SaraminAdapter, factory, sleeps)

    with pytest.raises(FetchFailure) as exc_info:
        adapter.fetch_listings()

    assert exc_info.value.retryable is True
    assert exc_info.value.source == "saramin"
    assert factory.sessions[0].closed
    assert adapter._open_sessions == set()
    assert sleeps.calls == []


def test_timeout_becomes_fetch_failure(sleeps):
    factory = SessionFactory(requests.Timeout("read timed out"))
    adapter = _adapter(WorkTogetherAdapter, factory, sleeps)

    with pytest.raises(FetchFailure, match="read timed out"):
        adapter.fetch_listings()
    assert factory.sessions[0].closed


def test_missing_container_becomes_fetch_failure(sleeps):
    factory = SessionFactory(make_response("<html><body><p>점검 중</p></body></html>"))
    adapter = _adapter(Work24Adapter, factory, sleeps)

    with pytest.raises(FetchFailure, match="not found"):
        adapter.fetch_listings()


def test_session_headers_use_crawler_user_agent(sleeps):
    factory = SessionFactory(make_response(SARAMIN_LISTING))
    adapter = _adapter(SaraminAdapter, factory, sleeps)
    adapter.fetch_listings()
    assert factory.sessions[0].headers["User-Agent"].startswith("ReBridge-Crawler/")


def test_cleanup_is_idempotent():
    adapter = SaraminAdapter(StaticKeywordProvider())
    factory = SessionFactory()
    adapter._open_sessions.add(factory())

    adapter.cleanup()
    adapter.cleanup()

    assert adapter._open_sessions == set()
    assert factory.sessions[0].closed


def test_registry():
    adapters = build_adapters(StaticKeywordProvider())
    assert set(adapters) == {"workTogether", "saramin", "work24", "jobkorea"}
    assert get_adapter_class("work24") is Work24Adapter
    with pytest.raises(ConfigurationError):
        get_adapter_class("indeed")
