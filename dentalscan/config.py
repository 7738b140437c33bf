"""Scan configuration: defaults, DENTALSCAN_* environment overrides, and speed presets."""

import os
from dataclasses import dataclass, replace

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)

MODES = ("deep", "quick")

# Speed presets: (workers, delay between pages in seconds)
SPEED_PRESETS = {
    "conservative": {"workers": 4, "delay_s": 0.5},
    "balanced": {"workers": 10, "delay_s": 0.2},
    "aggressive": {"workers": 16, "delay_s": 0.1},
}
SPEED_CHOICES = tuple(SPEED_PRESETS)

ENV_PREFIX = "DENTALSCAN_"


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class ScanConfig:
    """Budgets and politeness knobs for one scan run."""
    max_pages: int = 25
    max_depth: int = 5
    delay_s: float = 0.2
    timeout_s: float = 10.0
    max_timeout_retries: int = 3
    workers: int = 10
    deadline_s: float = 20 * 60
    grace_s: float = 30.0
    progress_interval_s: float = 5 * 60
    user_agent: str = DEFAULT_USER_AGENT
    respect_robots: bool = False
    mode: str = "deep"
    debug: bool = False

    def __post_init__(self) -> None:
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.max_timeout_retries < 1:
            raise ValueError("max_timeout_retries must be at least 1")
        if self.delay_s < 0 or self.timeout_s <= 0 or self.deadline_s <= 0:
            raise ValueError("delay_s must be >= 0; timeout_s and deadline_s must be > 0")
        if self.mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}")

    @property
    def quick(self) -> bool:
        return self.mode == "quick"

    @property
    def page_budget(self) -> int:
        """Quick mode only ever looks at the seed page."""
        return 1 if self.quick else self.max_pages

    @classmethod
    def from_env(cls) -> "ScanConfig":
        d = cls()
        return cls(
            max_pages=_env_int("MAX_PAGES", d.max_pages),
            max_depth=_env_int("MAX_DEPTH", d.max_depth),
            delay_s=_env_float("DELAY_S", d.delay_s),
            timeout_s=_env_float("TIMEOUT_S", d.timeout_s),
            max_timeout_retries=_env_int("MAX_TIMEOUT_RETRIES", d.max_timeout_retries),
            workers=_env_int("WORKERS", d.workers),
            deadline_s=_env_float("DEADLINE_S", d.deadline_s),
            grace_s=_env_float("GRACE_S", d.grace_s),
            progress_interval_s=_env_float("PROGRESS_INTERVAL_S", d.progress_interval_s),
            user_agent=os.environ.get(ENV_PREFIX + "USER_AGENT") or d.user_agent,
            respect_robots=_env_bool("RESPECT_ROBOTS", d.respect_robots),
            debug=_env_bool("DEBUG", d.debug),
        )

    def with_preset(self, name: str) -> "ScanConfig":
        if name not in SPEED_PRESETS:
            raise ValueError(f"unknown speed preset: {name}")
        return replace(self, **SPEED_PRESETS[name])

    def with_overrides(self, **overrides) -> "ScanConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
