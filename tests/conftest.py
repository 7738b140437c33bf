import threading

import pytest

from dentalscan.config import ScanConfig
from dentalscan.fetcher import FetchError, Page


class FakeFetcher:
    """In-memory fetcher: url -> Page, or url -> exception to raise."""

    def __init__(self, pages: dict | None = None) -> None:
        self.pages = dict(pages or {})
        self.calls: list[str] = []
        self.closed = False
        self._lock = threading.Lock()

    def fetch(self, url: str) -> Page:
        with self._lock:
            self.calls.append(url)
        outcome = self.pages.get(url)
        if outcome is None:
            raise FetchError(f"HTTP 404 for {url}", url=url)
        if isinstance(outcome, BaseException):
            raise outcome
        if callable(outcome):
            return outcome(url)
        return outcome

    def fetch_text(self, url: str) -> str:
        outcome = self.pages.get(url)
        if isinstance(outcome, str):
            return outcome
        raise FetchError(f"HTTP 404 for {url}", url=url)

    def close(self) -> None:
        self.closed = True


def page(url: str, text: str = "", links=(), title: str = "") -> Page:
    return Page(url=url, title=title, text=text, links=list(links))


def timeout_error(url: str) -> FetchError:
    return FetchError(f"timed out (ReadTimeout): {url}", is_timeout=True, url=url)


@pytest.fixture
def config() -> ScanConfig:
    return ScanConfig(delay_s=0, progress_interval_s=0)
