"""Per-target site crawl: bounded same-host traversal, timeout escalation, scoring."""

import sys
import threading
import time
from typing import Callable
from urllib.parse import urlparse, urlunparse

from dentalscan.config import ScanConfig
from dentalscan.fetcher import FetchError, Page
from dentalscan.links import prioritize_links, site_host
from dentalscan.models import ConfidenceBand, CrawlState, FrontierEntry, Result, Target
from dentalscan.robots import RobotsPolicy
from dentalscan.scoring import DEEP_PROFILE, SINGLE_PAGE_PROFILE, page_evidence, score_site

NO_WEBSITE_REASON = "no website"


class CrawlError(Exception):
    """Ends one target's crawl; never escapes crawl_target."""


class SeedUnreachable(CrawlError):
    pass


class TimeoutEscalation(CrawlError):
    pass


class CrawlCancelled(CrawlError):
    pass


def normalize_seed_url(raw: str) -> str | None:
    """Seed URL with a scheme (https assumed) and no fragment, or None if unusable."""
    s = (raw or "").strip()
    if not s:
        return None
    if "://" not in s:
        s = "https://" + s.lstrip("/")
    try:
        u = urlparse(s)
    except ValueError:
        return None
    if u.scheme not in ("http", "https") or not u.hostname:
        return None
    return urlunparse((u.scheme, u.netloc, u.path or "/", u.params, u.query, ""))


class SiteCrawler:
    """
    Crawls one target's site and scores it.

    The seed page must load; any failure there ends the crawl. Later page
    failures are skipped, except timeouts, which are counted across the whole
    target: reaching max_timeout_retries means the site itself is unreachable.
    """

    def __init__(
        self,
        target: Target,
        fetcher,
        config: ScanConfig,
        *,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.target = target
        self.config = config
        self.state = CrawlState()
        self._fetcher = fetcher
        self._cancel = cancel_event
        self._sleep = sleep
        self._host: str | None = None
        self._robots = RobotsPolicy(fetcher, config.user_agent) if config.respect_robots else None
        self._profile = SINGLE_PAGE_PROFILE if config.quick else DEEP_PROFILE

    def run(self) -> Result:
        """Crawl and score. Never raises: failures become ERROR or TIMEOUT results."""
        target = self.target
        if not target.has_website:
            return Result.for_target(target, band=ConfidenceBand.NONE, reason=NO_WEBSITE_REASON)
        try:
            seed = normalize_seed_url(target.website)
            if seed is None:
                raise SeedUnreachable(f"invalid website URL: {target.website!r}")
            self._crawl(seed)
        except CrawlCancelled:
            return Result.timeout(target, pages_examined=self.state.page_count)
        except CrawlError as e:
            return Result.error(target, str(e), pages_examined=self.state.page_count)
        except Exception as e:
            return Result.error(target, f"{type(e).__name__}: {e}", pages_examined=self.state.page_count)

        state = self.state
        c = score_site(state.aggregated_text, state.evidence, state.page_count, self._profile)
        return Result.for_target(
            target,
            has_equipment=c.has_equipment,
            band=c.band,
            score=c.score,
            evidence=c.evidence,
            reason=c.reason,
            pages_examined=state.page_count,
        )

    def _crawl(self, seed: str) -> None:
        state = self.state
        budget = self.config.page_budget
        state.enqueue(FrontierEntry(seed, 0))
        while state.page_count < budget:
            self._check_cancelled()
            entry = state.next_entry()
            if entry is None:
                break
            if self._robots is not None and not self._robots.can_fetch(entry.url):
                if state.page_count == 0:
                    raise SeedUnreachable(f"robots.txt disallows {entry.url}")
                self._debug(f"skip (robots): {entry.url}")
                state.visited.add(entry.url)
                continue
            if state.page_count > 0:
                self._pause()
            state.visited.add(entry.url)
            state.page_count += 1
            try:
                page = self._fetcher.fetch(entry.url)
            except FetchError as e:
                self._on_fetch_error(entry, e)
                continue
            self._accumulate(entry, page)

    def _accumulate(self, entry: FrontierEntry, page: Page) -> None:
        state = self.state
        if self._host is None:
            # Redirects on the seed (http -> https, bare -> www) define the crawl host
            self._host = site_host(page.url) or site_host(entry.url)
        elif site_host(page.url) != self._host:
            self._debug(f"skip (redirected off site): {entry.url} -> {page.url}")
            return
        elif page.url != entry.url and page.url in state.visited:
            self._debug(f"skip (redirect to a page already seen): {entry.url} -> {page.url}")
            return
        state.visited.add(page.url)
        state.append_text(page.text)
        line = page_evidence(page.title, page.text)
        if line:
            state.evidence.append(line)
        for nxt in prioritize_links(
            page.links,
            self._host,
            entry.depth,
            page_budget=self.config.page_budget,
            max_depth=self.config.max_depth,
            skip=state.visited | state.queued,
        ):
            state.enqueue(nxt)

    def _on_fetch_error(self, entry: FrontierEntry, error: FetchError) -> None:
        state = self.state
        self._debug(f"page error [{entry.url}]: {error.message}")
        if error.is_timeout:
            state.timeout_count += 1
            if state.timeout_count >= self.config.max_timeout_retries:
                raise TimeoutEscalation(
                    f"{state.timeout_count} timeouts, giving up on site: {error.message}"
                ) from error
        if state.page_count == 1:
            raise SeedUnreachable(f"seed page unreachable: {error.message}") from error

    def _pause(self) -> None:
        delay = self.config.delay_s
        if self._cancel is not None:
            if self._cancel.wait(delay):
                raise CrawlCancelled()
        elif delay > 0:
            self._sleep(delay)

    def _check_cancelled(self) -> None:
        if self._cancel is not None and self._cancel.is_set():
            raise CrawlCancelled()

    def _debug(self, msg: str) -> None:
        if self.config.debug:
            print(f"   [debug] {self.target.name}: {msg}", file=sys.stderr)


def crawl_target(
    target: Target,
    fetcher,
    config: ScanConfig,
    *,
    cancel_event: threading.Event | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Result:
    """Crawl one target and return exactly one Result."""
    return SiteCrawler(target, fetcher, config, cancel_event=cancel_event, sleep=sleep).run()
