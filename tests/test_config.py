import pytest

from dentalscan.config import ScanConfig


def test_defaults():
    c = ScanConfig()
    assert (c.max_pages, c.max_depth, c.delay_s, c.max_timeout_retries, c.workers) == (25, 5, 0.2, 3, 10)
    assert c.deadline_s == 1200
    assert c.page_budget == 25


def test_quick_mode_budget():
    assert ScanConfig(mode="quick").page_budget == 1


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("DENTALSCAN_WORKERS", "4")
    monkeypatch.setenv("DENTALSCAN_DELAY_S", "0.5")
    monkeypatch.setenv("DENTALSCAN_RESPECT_ROBOTS", "yes")
    monkeypatch.setenv("DENTALSCAN_MAX_PAGES", "not a number")
    c = ScanConfig.from_env()
    assert c.workers == 4
    assert c.delay_s == 0.5
    assert c.respect_robots is True
    assert c.max_pages == 25


def test_presets_and_overrides():
    c = ScanConfig().with_preset("conservative").with_overrides(workers=6, delay_s=None)
    assert c.workers == 6
    assert c.delay_s == 0.5


@pytest.mark.parametrize(
    "kw",
    [{"max_pages": 0}, {"workers": 0}, {"max_depth": -1}, {"mode": "turbo"}, {"timeout_s": 0}],
)
def test_invalid_values_rejected(kw):
    with pytest.raises(ValueError):
        ScanConfig(**kw)


def test_unknown_preset():
    with pytest.raises(ValueError):
        ScanConfig().with_preset("ludicrous")
