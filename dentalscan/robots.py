"""robots.txt checks for one crawl. Off unless the scan asks for it."""

from urllib.parse import urlparse
from urllib.robotparser import RobotFileParser

from dentalscan.fetcher import FetchError


class RobotsPolicy:
    """Lazily loads robots.txt per host through the crawl's own fetcher.

    RobotFileParser.read() has no timeout, so the file is fetched with the
    fetcher and fed to parse(). An unreachable robots.txt allows everything.
    """

    def __init__(self, fetcher, user_agent: str) -> None:
        self._fetcher = fetcher
        self._user_agent = user_agent
        # RobotFileParser on success, None when the fetch failed
        self._parsers: dict[tuple[str, str], RobotFileParser | None] = {}

    def _get_parser(self, url: str) -> RobotFileParser | None:
        parsed = urlparse(url)
        key = (parsed.scheme or "https", parsed.netloc or "")
        if key not in self._parsers:
            robots_url = f"{key[0]}://{key[1]}/robots.txt"
            try:
                body = self._fetcher.fetch_text(robots_url)
            except FetchError:
                self._parsers[key] = None
            else:
                rp = RobotFileParser()
                rp.set_url(robots_url)
                rp.parse(body.splitlines())
                self._parsers[key] = rp
        return self._parsers[key]

    def can_fetch(self, url: str) -> bool:
        parser = self._get_parser(url)
        if parser is None:
            return True
        return parser.can_fetch(self._user_agent, url)
