"""Extract visible text, title, and anchors from a parsed HTML page."""

from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

# Tags whose content never reaches the reader
NOISE_TAGS = "script, style, noscript, template, iframe"

TITLE_MAX_CHARS = 20


def parse_html(markup: bytes | str, encoding: str | None = None) -> BeautifulSoup:
    """Parse with lxml. For bytes, encoding is a hint; bs4 falls back to meta charset sniffing."""
    if isinstance(markup, bytes):
        return BeautifulSoup(markup, "lxml", from_encoding=encoding)
    return BeautifulSoup(markup, "lxml")


def extract_text(soup: BeautifulSoup) -> str:
    """Whole-document visible text, whitespace collapsed. Navigation and footers are kept."""
    soup_copy = BeautifulSoup(str(soup), "lxml")
    for tag in soup_copy.select(NOISE_TAGS):
        tag.decompose()
    text = soup_copy.get_text(separator=" ", strip=True)
    return _normalize_text(text)


def page_title(soup: BeautifulSoup, max_chars: int = TITLE_MAX_CHARS) -> str:
    """Title for evidence lines; long titles are cut with an ellipsis."""
    title = soup.title.get_text(strip=True) if soup.title else ""
    if len(title) > max_chars:
        return title[:max_chars] + "..."
    return title


def _normalize_text(s: str) -> str:
    return " ".join(s.split())


def normalize_link(base_url: str, href: str) -> str | None:
    """Absolute http(s) URL without fragment, or None for mailto:, tel:, javascript:, anchors."""
    if not href or not isinstance(href, str):
        return None
    href = href.strip()
    if not href or href.startswith(("#", "mailto:", "tel:", "javascript:", "data:")):
        return None
    absolute, _ = urldefrag(urljoin(base_url, href))
    if urlparse(absolute).scheme not in ("http", "https"):
        return None
    return absolute


def find_page_links(soup: BeautifulSoup, base_url: str) -> list[tuple[str, str]]:
    """(absolute_url, anchor_text) for every a[href] in document order, first occurrence only."""
    seen: set[str] = set()
    links: list[tuple[str, str]] = []
    for a in soup.select("a[href]"):
        url = normalize_link(base_url, a.get("href", ""))
        if url is None or url in seen:
            continue
        seen.add(url)
        links.append((url, _normalize_text(a.get_text(" ", strip=True))))
    return links
