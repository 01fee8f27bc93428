"""
검색/분류 키워드.

키워드 목록은 관리자가 런타임에 바꿀 수 있으므로 어댑터는 매 크롤마다
KeywordProvider.current() 를 다시 읽는다 (어댑터 수명 동안 캐시하지 않음).
"""
from __future__ import annotations

from typing import Iterable, Protocol

DEFAULT_KEYWORDS = ["장애인"]

# "장애인채용", "장애인 우대" 같은 흔한 변형
KEYWORD_SUFFIXES = ("채용", "우대", "전형")


class KeywordProvider(Protocol):
    def current(self) -> list[str]:
        ...


class StaticKeywordProvider:
    """고정 키워드. 테스트나 DB 없이 어댑터를 돌릴 때 쓴다."""

    def __init__(self, keywords: Iterable[str] | None = None):
        self.keywords = clean_keywords(keywords or DEFAULT_KEYWORDS)

    def current(self) -> list[str]:
        return list(self.keywords)


def clean_keywords(keywords: Iterable[str]) -> list[str]:
    """공백 제거 + 빈 값/중복 제거 (순서 유지)."""
    result: list[str] = []
    for kw in keywords:
        kw = (kw or "").strip()
        if kw and kw not in result:
            result.append(kw)
    return result


def expand_keywords(keywords: Iterable[str]) -> list[str]:
    expanded = []
    for kw in keywords:
        expanded.append(kw)
        for suffix in KEYWORD_SUFFIXES:
            expanded.append(f"{kw}{suffix}")
            expanded.append(f"{kw} {suffix}")
    return expanded


def contains_keyword(text: str | None, keywords: Iterable[str], expand: bool = False) -> bool:
    """대소문자 무시 부분 문자열 매칭."""
    if not text:
        return False
    candidates = expand_keywords(keywords) if expand else list(keywords)
    lowered = text.lower()
    return any(kw.lower() in lowered for kw in candidates if kw)


def build_search_query(keywords: Iterable[str]) -> str:
    return " OR ".join(clean_keywords(keywords))


def primary_keyword(keywords: Iterable[str]) -> str:
    cleaned = clean_keywords(keywords)
    return cleaned[0] if cleaned else DEFAULT_KEYWORDS[0]
