"""Page fetching over httpx: redirects, bounded retries on 429/5xx, typed failures."""

import time
from dataclasses import dataclass, field
from typing import Callable

import httpx

from dentalscan.config import DEFAULT_USER_AGENT
from dentalscan.extractors import extract_text, find_page_links, page_title, parse_html

DEFAULT_TIMEOUT = 10.0
MAX_RETRIES = 2  # extra attempts for 429/502/503/504; timeouts are never retried here
RETRY_BACKOFF = 2.0
BASE_WAIT_5XX = 1.0
MAX_RETRY_WAIT = 10.0  # keep one page from stalling its worker

RETRYABLE_STATUS = (429, 502, 503, 504)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml", "text/plain")

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
}


class FetchError(Exception):
    """A page could not be fetched. is_timeout marks transient timeouts."""

    def __init__(self, message: str, *, is_timeout: bool = False, url: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.is_timeout = is_timeout
        self.url = url


@dataclass
class Page:
    """A fetched page: final URL after redirects, title, visible text, and (url, anchor) links."""
    url: str
    title: str = ""
    text: str = ""
    links: list[tuple[str, str]] = field(default_factory=list)


def _parse_retry_after(value: str | None) -> float | None:
    """Parse Retry-After header; return seconds to wait, or None."""
    if not value or not value.strip():
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        from email.utils import parsedate_to_datetime
        dt = parsedate_to_datetime(value)
        diff = dt.timestamp() - time.time()
        return max(1.0, diff) if diff > 0 else None
    except (TypeError, ValueError):
        return None


def _wait_for_retry(code: int, attempt: int, retry_after_header: str | None) -> float:
    """Seconds to wait before the next attempt, capped at MAX_RETRY_WAIT."""
    from_header = _parse_retry_after(retry_after_header)
    if from_header is not None:
        return min(from_header, MAX_RETRY_WAIT)
    return min(BASE_WAIT_5XX * (RETRY_BACKOFF ** attempt), MAX_RETRY_WAIT)


def _is_html(content_type: str) -> bool:
    # Servers that send no Content-Type are given the benefit of the doubt
    return not content_type or any(t in content_type for t in HTML_CONTENT_TYPES)


class Fetcher:
    """HTTP page fetcher with connection pooling. One instance per worker thread."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        headers: dict[str, str] | None = None,
        max_retries: int = MAX_RETRIES,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._timeout = timeout
        self._headers = {**DEFAULT_HEADERS, "User-Agent": user_agent, **(headers or {})}
        self._max_retries = max(0, max_retries)
        self._transport = transport
        self._sleep = sleep
        self._client: httpx.Client | None = None

    @property
    def user_agent(self) -> str:
        return self._headers["User-Agent"]

    def spawn(self) -> "Fetcher":
        """Return a new Fetcher with the same config (for use in another thread)."""
        return Fetcher(
            timeout=self._timeout,
            headers=self._headers,
            max_retries=self._max_retries,
            transport=self._transport,
            sleep=self._sleep,
        )

    def _get_client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                follow_redirects=True,
                timeout=self._timeout,
                headers=self._headers,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        if self._client and not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _get(self, url: str) -> httpx.Response:
        """GET with retries on 429/5xx. Raises FetchError for every failure."""
        client = self._get_client()
        for attempt in range(self._max_retries + 1):
            try:
                resp = client.get(url)
            except httpx.TimeoutException as e:
                raise FetchError(f"timed out ({type(e).__name__}): {url}", is_timeout=True, url=url) from e
            except httpx.RequestError as e:
                raise FetchError(f"{type(e).__name__}: {e}", url=url) from e
            if resp.status_code in RETRYABLE_STATUS and attempt < self._max_retries:
                self._sleep(_wait_for_retry(resp.status_code, attempt, resp.headers.get("retry-after")))
                continue
            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise FetchError(f"HTTP {resp.status_code} for {url}", url=url) from e
            return resp
        raise FetchError(f"retries exhausted for {url}", url=url)

    def fetch(self, url: str) -> Page:
        """Fetch and parse one HTML page."""
        resp = self._get(url)
        content_type = (resp.headers.get("content-type") or "").lower()
        if not _is_html(content_type):
            raise FetchError(f"unsupported content type {content_type!r}: {url}", url=url)
        final_url = str(resp.url)
        soup = parse_html(resp.content, resp.charset_encoding)
        return Page(
            url=final_url,
            title=page_title(soup),
            text=extract_text(soup),
            links=find_page_links(soup, final_url),
        )

    def fetch_text(self, url: str) -> str:
        """Fetch a plain-text resource such as robots.txt."""
        return self._get(url).text
