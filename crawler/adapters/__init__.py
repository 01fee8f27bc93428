from ..exceptions import ConfigurationError
from .base import BaseCrawlerAdapter
from .jobkorea import JobKoreaAdapter
from .saramin import SaraminAdapter
from .work24 import Work24Adapter
from .work_together import WorkTogetherAdapter

# source 식별자 -> 어댑터 클래스
ADAPTER_CLASSES = {
    cls.source: cls
    for cls in (WorkTogetherAdapter, SaraminAdapter, Work24Adapter, JobKoreaAdapter)
}

SOURCES = tuple(ADAPTER_CLASSES)


def get_adapter_class(source: str):
    try:
        return ADAPTER_CLASSES[source]
    except KeyError:
        raise ConfigurationError(f"No adapter found for source: {source}", source=source) from None


def build_adapters(keyword_provider, sources=None, **kwargs) -> dict:
    """시작 시점에 source -> 어댑터 인스턴스 맵을 만든다."""
    return {
        source: get_adapter_class(source)(keyword_provider, **kwargs)
        for source in (sources or SOURCES)
    }


__all__ = [
    "ADAPTER_CLASSES",
    "SOURCES",
    "BaseCrawlerAdapter",
    "JobKoreaAdapter",
    "SaraminAdapter",
    "Work24Adapter",
    "WorkTogetherAdapter",
    "build_adapters",
    "get_adapter_class",
]
