"""Structured JSONL event logging for crawl runs."""
import json
import logging
import os
import re
import time

log = logging.getLogger(__name__)


def _safe_name(company: str) -> str:
    name = re.sub(r"^https?://", "", company).strip("/")
    return re.sub(r"[^A-Za-z0-9._-]+", "_", name) or "company"


class CrawlEventLogger:
    """Writes one JSON line per event to a per-company JSONL file.

    All logging is best-effort: methods never raise exceptions.
    Supports context-manager protocol for automatic close.
    """

    def __init__(self, run_id: str, company: str, log_dir: str = "data/logs/crawl_events"):
        self._run_id = run_id
        self._company = company
        self._f = None
        self.path = ""
        try:
            os.makedirs(log_dir, exist_ok=True)
            self.path = os.path.join(log_dir, f"{_safe_name(company)}_{run_id}.jsonl")
            self._f = open(self.path, "a", encoding="utf-8")
        except Exception as e:
            log.warning(f"CrawlEventLogger: failed to open log file: {e}")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["run_id"] = self._run_id
            event["company"] = self._company
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning(f"CrawlEventLogger: write failed: {e}")

    def log_run_start(self, company_url: str, config: dict):
        self._write({
            "event": "run_start",
            "company_url": company_url,
            "config": config,
        })

    def log_page_result(self, page_num: int, url: str, employees: int, duration: float):
        self._write({
            "event": "page_result",
            "page_num": page_num,
            "url": url,
            "employees": employees,
            "duration": duration,
        })

    def log_run_end(self, pages: int, employees: int, duration: float,
                    status: str = "ok", error: str = ""):
        """Log the outcome of a run.

        ``status`` is ``ok`` or ``error``; ``error`` holds the exception text.
        """
        self._write({
            "event": "run_end",
            "pages": pages,
            "employees": employees,
            "duration": duration,
            "status": status,
            "error": error,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
