"""
사이트 공통 텍스트 파싱 유틸.

- 급여 문자열 -> {"min", "max", "currency"} (원 단위, 연봉 기준)
- 마감일 문자열 -> datetime
- 외부 ID 추출 (매칭 실패 시 빈 문자열)

어댑터별 셀렉터는 각 어댑터에 두고, 여기에는 사이트와 무관한 규칙만 둔다.
"""
from __future__ import annotations

import re
from datetime import datetime

from dateutil.relativedelta import relativedelta

from . import settings as crawl_settings

CURRENCY = "KRW"

UNIT_MULTIPLIERS = {
    "억": 100_000_000,
    "만": 10_000,
    "천": 1_000,
    "원": 1,
}

ONGOING_MARKERS = ("상시", "채용시", "수시")

# 금액 한 덩어리: "1억", "1억5000만원", "3000만원", "500천원", "10000원"
_AMOUNT = r"\d+(?:\.\d+)?억원?(?:\d+(?:\.\d+)?(?:만원|만|천원|원))?|\d+(?:\.\d+)?(?:만원|천원|원)"
_AMOUNT_RE = re.compile(_AMOUNT)
# 앞쪽은 단위 생략 가능 ("3000~4000만원")
_RANGE_RE = re.compile(rf"({_AMOUNT}|\d+(?:\.\d+)?)~({_AMOUNT})")
_AMOUNT_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(억|만|천|원)")
# 월급 표기는 금액 바로 앞의 "월"/"월급"만 인정한다 ("월~금", "4월 입사"는 제외)
_MONTHLY_RE = re.compile(r"월(?:급여?)?:?\d")
_FULL_DATE_RE = re.compile(r"(\d{4})[-.](\d{1,2})[-.](\d{1,2})")
_SHORT_DATE_RE = re.compile(r"(\d{1,2})/(\d{1,2})")


def normalize_whitespace(text: str | None) -> str:
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def _to_won(token: str, default_unit: str | None = None) -> int:
    parts = _AMOUNT_PART_RE.findall(token)
    if not parts:
        # 단위 없는 숫자는 짝이 되는 쪽 단위를 따른다
        return int(round(float(token) * UNIT_MULTIPLIERS.get(default_unit or "원", 1)))
    return int(round(sum(float(num) * UNIT_MULTIPLIERS[unit] for num, unit in parts)))


def parse_korean_currency(text: str | None) -> int | None:
    """'2,400만원' -> 24000000, '1억5000만원' -> 150000000. 단위 붙은 금액이 없으면 None."""
    if not text:
        return None
    m = _AMOUNT_RE.search(re.sub(r"[\s,]", "", text))
    if not m:
        return None
    return _to_won(m.group(0))


def _yearly_multiplier(cleaned: str) -> int:
    if "연봉" in cleaned:
        return 1
    if "시급" in cleaned:
        return (
            crawl_settings.HOURS_PER_DAY
            * crawl_settings.WORK_DAYS_PER_MONTH
            * crawl_settings.MONTHS_PER_YEAR
        )
    if _MONTHLY_RE.search(cleaned):
        return crawl_settings.MONTHS_PER_YEAR
    return 1


def parse_salary_range(text: str | None) -> dict | None:
    """
    급여 문자열을 연봉 기준 금액 범위로 변환한다.

    - "3000만원~4000만원" -> min/max
    - "연봉 1억5000만원"   -> min (억/만 합산)
    - "월 250만원"         -> min (x12)
    - "시급 10000원"       -> min (x8시간 x20일 x12개월)
    - "회사내규에 따름"    -> None (0이 아니라 None)
    - "경력 3년 이상"      -> None (단위 없는 숫자는 급여로 보지 않는다)
    """
    if not text:
        return None

    cleaned = re.sub(r"[\s,]", "", text)
    multiplier = _yearly_multiplier(cleaned)

    m = _RANGE_RE.search(cleaned)
    if m:
        low, high = m.groups()
        high_unit = _AMOUNT_PART_RE.findall(high)[-1][1]
        return {
            "min": _to_won(low, high_unit) * multiplier,
            "max": _to_won(high) * multiplier,
            "currency": CURRENCY,
        }

    amount = parse_korean_currency(cleaned)
    if amount is None:
        return None
    return {"min": amount * multiplier, "currency": CURRENCY}


def parse_deadline(text: str | None, now: datetime | None = None) -> datetime | None:
    """
    마감일 문자열 -> datetime.

    - 2024.12.31 / 2024-12-31
    - 12/31(월) : 올해 날짜로 본다
    - 상시/채용시/수시 : 지금부터 6개월 뒤 (None 이면 만료로 오해받는다)
    """
    if not text:
        return None

    cleaned = normalize_whitespace(text)
    now = now or datetime.now()

    m = _FULL_DATE_RE.search(cleaned)
    if m:
        try:
            return datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None

    m = _SHORT_DATE_RE.search(cleaned)
    if m:
        try:
            return datetime(now.year, int(m.group(1)), int(m.group(2)))
        except ValueError:
            return None

    if any(marker in cleaned for marker in ONGOING_MARKERS):
        return now + relativedelta(months=crawl_settings.ONGOING_EXPIRY_MONTHS)

    return None


def extract_first(patterns, text: str | None) -> str:
    """패턴 목록 중 처음 매칭된 그룹(1)을 반환. 없으면 빈 문자열."""
    if not text:
        return ""
    for pattern in patterns:
        m = re.search(pattern, text)
        if m:
            return m.group(1)
    return ""


def split_items(text: str | None) -> list[str]:
    """복리후생 같은 나열형 텍스트를 , 、 · 기준으로 자른다."""
    if not text:
        return []
    return [part.strip() for part in re.split(r"[,、·]", text) if part.strip()]


def dedupe(items) -> list[str]:
    seen = set()
    result = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return result
