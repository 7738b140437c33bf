"""Keyword scoring of aggregated site text into a confidence band."""

from dataclasses import dataclass
from typing import Iterable, Sequence

from dentalscan.keywords import DIGITAL_KEYWORDS, SCANNER_KEYWORDS, SINGLE_PAGE_DIGITAL_KEYWORDS
from dentalscan.models import ConfidenceBand


@dataclass(frozen=True)
class ScoringProfile:
    """Weights and band thresholds. Thresholds are lower bounds: score >= high -> HIGH."""
    name: str
    primary_weight: int
    secondary_weight: int
    page_bonus: int
    low: int
    medium: int
    high: int
    secondary_keywords: tuple[str, ...] = DIGITAL_KEYWORDS


# Whole-site crawl: more text seen, so a higher bar
DEEP_PROFILE = ScoringProfile("deep", primary_weight=12, secondary_weight=4, page_bonus=3, low=20, medium=35, high=50)
# Seed page only
SINGLE_PAGE_PROFILE = ScoringProfile(
    "quick",
    primary_weight=15,
    secondary_weight=5,
    page_bonus=0,
    low=15,
    medium=25,
    high=40,
    secondary_keywords=SINGLE_PAGE_DIGITAL_KEYWORDS,
)

PROFILES = {p.name: p for p in (DEEP_PROFILE, SINGLE_PAGE_PROFILE)}


@dataclass(frozen=True)
class Classification:
    has_equipment: bool
    band: ConfidenceBand
    score: int
    evidence: str
    reason: str


def find_matching_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    """Keywords contained in text (case-insensitive), each once, in keyword order."""
    haystack = text.lower()
    found: list[str] = []
    for kw in keywords:
        if kw not in found and kw.lower() in haystack:
            found.append(kw)
    return found


def band_for_score(score: int, profile: ScoringProfile = DEEP_PROFILE) -> ConfidenceBand:
    if score >= profile.high:
        return ConfidenceBand.HIGH
    if score >= profile.medium:
        return ConfidenceBand.MEDIUM
    if score >= profile.low:
        return ConfidenceBand.LOW
    return ConfidenceBand.NONE


def page_evidence(title: str, page_text: str) -> str | None:
    """Evidence line for one page, or None when it names no scanner keyword."""
    found = find_matching_keywords(page_text, SCANNER_KEYWORDS)
    if not found:
        return None
    return f"page[{title}]: {', '.join(found)}"


def score_site(
    aggregated_text: str,
    evidence: Sequence[str],
    page_count: int,
    profile: ScoringProfile = DEEP_PROFILE,
) -> Classification:
    """
    Pure scoring function.

    score = primary_weight * distinct scanner keywords
          + secondary_weight * distinct digital keywords
          + page_bonus * evidence pages (only when more than one page contributed)

    Keywords are counted once across the whole text, however many pages repeat them.
    """
    scanner = find_matching_keywords(aggregated_text, SCANNER_KEYWORDS)
    digital = find_matching_keywords(aggregated_text, profile.secondary_keywords)

    score = len(scanner) * profile.primary_weight + len(digital) * profile.secondary_weight
    if profile.page_bonus and len(evidence) > 1:
        score += len(evidence) * profile.page_bonus

    parts: list[str] = []
    if scanner:
        parts.append(f"3D scanner: {', '.join(scanner)}")
    if digital:
        parts.append(f"digital: {', '.join(digital)}")
    parts.append(f"pages examined: {page_count}")
    summary = " | ".join(parts)

    band = band_for_score(score, profile)
    if scanner or digital:
        reason = summary
    else:
        reason = f"no 3D scanner keywords ({page_count} pages examined)"
    return Classification(
        has_equipment=band is not ConfidenceBand.NONE,
        band=band,
        score=score,
        evidence=summary,
        reason=reason,
    )
