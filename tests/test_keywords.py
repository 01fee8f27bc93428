from crawler.keywords import (
    StaticKeywordProvider,
    build_search_query,
    clean_keywords,
    contains_keyword,
    expand_keywords,
    primary_keyword,
)


def test_static_provider_defaults_and_copies():
    provider = StaticKeywordProvider()
    keywords = provider.current()
    assert keywords == ["장애인"]

    keywords.append("변경")
    assert provider.current() == ["장애인"]


def test_clean_keywords_strips_and_dedupes():
    assert clean_keywords([" 장애인 ", "", "장애인", "보훈"]) == ["장애인", "보훈"]


def test_contains_keyword_is_case_insensitive_substring():
    assert contains_keyword("[장애인채용] 사무직", ["장애인"])
    assert contains_keyword("Disability Friendly Office", ["disability"])
    assert not contains_keyword("웹 개발자", ["장애인"])
    assert not contains_keyword(None, ["장애인"])


def test_expand_keywords_adds_suffix_variants():
    expanded = expand_keywords(["장애"])
    assert "장애채용" in expanded
    assert "장애 우대" in expanded
    assert contains_keyword("장애 우대 포지션", ["장애"], expand=True)


def test_search_query_helpers():
    assert build_search_query(["장애인", "보훈"]) == "장애인 OR 보훈"
    assert primary_keyword(["", "보훈"]) == "보훈"
    assert primary_keyword([]) == "장애인"
