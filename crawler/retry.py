from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

from .exceptions import FetchFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    max_retries: 첫 시도 이후 추가 시도 횟수 (총 시도 = max_retries + 1)
    backoff: 재시도 전 대기(초) 스케줄. 스케줄이 바닥나면 ceiling 사용
    """

    max_retries: int = 3
    backoff: tuple[float, ...] = (1.0, 2.0, 4.0)
    ceiling: float = 5.0

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, attempt: int) -> float:
        """attempt 번째(0부터) 실패 후 대기 시간."""
        if 0 <= attempt < len(self.backoff):
            return self.backoff[attempt]
        return self.ceiling


def with_retry(
    policy: RetryPolicy,
    operation: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...] = (FetchFailure,),
    sleep: Callable[[float], None] = time.sleep,
    label: str = "operation",
) -> T:
    """operation 을 최대 policy.max_attempts 번 호출. 전부 실패하면 마지막 예외를 그대로 올린다."""
    for attempt in range(policy.max_attempts):
        try:
            return operation()
        except retry_on as e:
            if attempt >= policy.max_retries:
                logger.warning(
                    "%s: giving up after %s attempts (%s)",
                    label, policy.max_attempts, e,
                )
                raise
            delay = policy.delay_for(attempt)
            logger.info(
                "%s: attempt %s/%s failed (%s), retrying in %ss",
                label, attempt + 1, policy.max_attempts, e, delay,
            )
            sleep(delay)
    raise RuntimeError("unreachable")  # pragma: no cover
