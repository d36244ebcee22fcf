"""Result records produced by a crawl."""
import json
from dataclasses import asdict, dataclass, field


@dataclass
class EmployeeRecord:
    profile_link: str | None = None
    display_name: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PageBatch:
    """Employees scraped from one search results page (1-based ``page``)."""
    page: int
    employees: list[EmployeeRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


# One batch per results page, ascending page order.
CrawlResult = list[PageBatch]


def crawl_result_to_json(result: CrawlResult, indent: int | None = 2) -> str:
    return json.dumps([batch.to_dict() for batch in result], ensure_ascii=False, indent=indent)
