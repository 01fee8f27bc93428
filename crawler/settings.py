# 크롤러 공통 상수 (사이트 부하를 고려해서 보수적으로 잡는다)

USER_AGENT = "ReBridge-Crawler/1.0 (+https://rebridge.kr/about)"

DEFAULT_REQUEST_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
}

# 요청 후 대기 시간 (초)
REQUEST_DELAY = {
    "workTogether": 3,
    "work24": 5,
    "saramin": 2,
    "jobkorea": 4,
}
DEFAULT_REQUEST_DELAY = 2

# (connect, read) 타임아웃 (초). 넘기면 FetchFailure
NAVIGATION_TIMEOUT = (10, 30)

# 상시채용 공고의 만료일은 지금부터 N개월 뒤로 잡는다
ONGOING_EXPIRY_MONTHS = 6

# 시급 -> 연봉 환산 (8시간 * 20일 * 12개월)
HOURS_PER_DAY = 8
WORK_DAYS_PER_MONTH = 20
MONTHS_PER_YEAR = 12
