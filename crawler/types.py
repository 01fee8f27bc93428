from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class RawJob:
    """목록 페이지 한 줄. 정규화 직후 버려지고 raw_data 로만 남는다."""

    source: str
    external_id: str
    url: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NormalizedJob:
    source: str
    external_id: str
    title: str
    company: str | None = None
    location: dict[str, str] | None = None
    salary_range: dict[str, Any] | None = None
    employment_type: str | None = None
    description: str | None = None
    is_disability_friendly: bool = False
    crawled_at: datetime | None = None
    expires_at: datetime | None = None
    external_url: str = ""
    raw_data: dict[str, Any] | None = None

    @property
    def missing_fields(self) -> list[str]:
        return [name for name in ("source", "external_id", "title") if not getattr(self, name)]

    def model_fields(self) -> dict[str, Any]:
        """Job 모델에 그대로 넣을 수 있는 변경 가능 필드들."""
        return {
            "title": self.title[:255],
            "company": (self.company or None) and self.company[:255],
            "location": self.location,
            "salary_range": self.salary_range,
            "employment_type": (self.employment_type or None) and self.employment_type[:100],
            "description": self.description,
            "is_disability_friendly": self.is_disability_friendly,
            "crawled_at": self.crawled_at,
            "expires_at": self.expires_at,
            "external_url": self.external_url[:2083],
            "raw_data": self.raw_data,
        }


@dataclass
class JobDetail:
    source: str
    external_id: str
    url: str
    title: str
    company: str | None = None
    location: dict[str, str] | None = None
    salary_range: dict[str, Any] | None = None
    employment_type: str | None = None
    description: str | None = None
    is_disability_friendly: bool = False
    crawled_at: datetime | None = None
    expires_at: datetime | None = None
    requirements: list[str] = field(default_factory=list)
    benefits: list[str] = field(default_factory=list)
    contact_info: dict[str, str] = field(default_factory=dict)

    @property
    def application_deadline(self) -> datetime | None:
        return self.expires_at
