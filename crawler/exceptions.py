class CrawlerError(Exception):
    """크롤러 공통 예외. retryable 로 재시도 여부를 표시한다."""

    retryable = False

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class ConfigurationError(CrawlerError):
    """알 수 없는 source, 어댑터 미등록 등. 재시도하지 않는다."""

    retryable = False


class FetchFailure(CrawlerError):
    """네트워크/타임아웃/셀렉터 누락 등 목록·상세 페이지 수집 실패."""

    retryable = True

    def __init__(self, message: str, *, source: str | None = None, url: str | None = None) -> None:
        super().__init__(message, source=source)
        self.url = url


class MalformedItem(CrawlerError):
    """정규화 결과에 필수 필드(source, external_id, title)가 비어 있음."""

    retryable = False
