"""engine — session check, navigation and the paginated employee crawl."""
from .errors import ScraperSignal, ScraperError  # noqa: F401
from .auth import check_logged_in  # noqa: F401
from .navigation import goto  # noqa: F401
from .crawler import crawl_employees, normalize_company_url, parse_employee_count  # noqa: F401
