"""Link prioritization: keep same-host HTML pages, rank by equipment-page keywords."""

from typing import Container, Iterable
from urllib.parse import urlparse

from dentalscan.keywords import EXCLUDE_PAGE_KEYWORDS, NON_HTML_EXTENSIONS, PRIORITY_PAGE_KEYWORDS
from dentalscan.models import FrontierEntry, LinkCandidate

URL_KEYWORD_WEIGHT = 10
TEXT_KEYWORD_WEIGHT = 15
BASE_PRIORITY = 1


def site_host(url: str) -> str:
    """Lowercased host without port or credentials; empty if unparsable."""
    try:
        return urlparse(url).hostname or ""
    except ValueError:
        return ""


def points_to_asset(url: str, anchor_text: str) -> bool:
    """True if the anchor text or the URL path ends in a non-HTML extension."""
    text = anchor_text.strip().lower()
    if text.endswith(NON_HTML_EXTENSIONS):
        return True
    return urlparse(url).path.lower().endswith(NON_HTML_EXTENSIONS)


def is_excluded(url: str, anchor_text: str) -> bool:
    url_lower = url.lower()
    text_lower = anchor_text.lower()
    return any(kw in url_lower or kw in text_lower for kw in EXCLUDE_PAGE_KEYWORDS)


def link_priority(url: str, anchor_text: str) -> int:
    """
    Priority of one link; 0 means excluded.
    +10 per priority keyword in the URL, +15 per keyword in the anchor text.
    Links with no keyword still get 1 so they are crawled last.
    """
    if is_excluded(url, anchor_text):
        return 0
    url_lower = url.lower()
    text_lower = anchor_text.lower()
    priority = 0
    for kw in PRIORITY_PAGE_KEYWORDS:
        if kw in url_lower:
            priority += URL_KEYWORD_WEIGHT
        if kw in text_lower:
            priority += TEXT_KEYWORD_WEIGHT
    return priority or BASE_PRIORITY


def rank_links(
    links: Iterable[tuple[str, str]],
    host: str,
    skip: Container[str] = frozenset(),
) -> list[LinkCandidate]:
    """
    Filter links to crawlable same-host pages and sort by priority, highest first.
    Equal priorities keep discovery order.
    """
    candidates: list[LinkCandidate] = []
    for seq, (url, anchor_text) in enumerate(links):
        if not url or url in skip:
            continue
        if site_host(url) != host:
            continue
        if points_to_asset(url, anchor_text):
            continue
        priority = link_priority(url, anchor_text)
        if priority <= 0:
            continue
        candidates.append(LinkCandidate(url=url, anchor_text=anchor_text, priority=priority, seq=seq))
    candidates.sort(key=lambda c: (-c.priority, c.seq))
    return candidates


def prioritize_links(
    links: Iterable[tuple[str, str]],
    host: str,
    current_depth: int,
    *,
    page_budget: int,
    max_depth: int,
    skip: Container[str] = frozenset(),
) -> list[FrontierEntry]:
    """
    Frontier entries for one expansion step: at most page_budget - 1 links
    (the seed holds one slot), one hop deeper, none beyond max_depth.
    """
    next_depth = current_depth + 1
    if next_depth > max_depth:
        return []
    limit = max(page_budget - 1, 0)
    ranked = rank_links(links, host, skip)[:limit]
    return [FrontierEntry(url=c.url, depth=next_depth) for c in ranked]
