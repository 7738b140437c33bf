import pytest

from dentalscan.models import ConfidenceBand
from dentalscan.scoring import (
    DEEP_PROFILE,
    SINGLE_PAGE_PROFILE,
    band_for_score,
    find_matching_keywords,
    page_evidence,
    score_site,
)
from dentalscan.keywords import SCANNER_KEYWORDS


def test_no_keywords_single_page_is_none():
    c = score_site("welcome to our friendly family practice", [], 1)
    assert c.score == 0
    assert c.band is ConfidenceBand.NONE
    assert c.has_equipment is False
    assert c.reason == "no 3D scanner keywords (1 pages examined)"


def test_two_primary_one_secondary_single_page_is_low():
    text = "we use itero and primescan with a cad/cam workflow"
    c = score_site(text, ["page[Home]: itero, primescan"], 1)
    assert c.score == 12 * 2 + 4 * 1
    assert c.band is ConfidenceBand.LOW
    assert c.has_equipment is True


def test_three_primary_across_two_evidence_pages_is_medium():
    text = "itero scanner page one primescan medit page two"
    evidence = ["page[One]: itero, primescan", "page[Two]: medit"]
    c = score_site(text, evidence, 4)
    assert c.score == 12 * 3 + 3 * 2
    assert c.band is ConfidenceBand.MEDIUM


def test_single_evidence_page_gets_no_page_bonus():
    c = score_site("itero", ["page[Home]: itero"], 3)
    assert c.score == 12


def test_repeated_keyword_across_pages_counts_once():
    text = "itero on the home page itero on equipment itero on about"
    evidence = ["page[Home]: itero", "page[Equipment]: itero", "page[About]: itero"]
    c = score_site(text, evidence, 3)
    bonus = len(evidence) * DEEP_PROFILE.page_bonus
    assert c.score - bonus == DEEP_PROFILE.primary_weight == 12
    assert c.score == score_site("itero", evidence, 3).score == 21
    assert c.evidence == "3D scanner: itero | pages examined: 3"


def test_scoring_is_idempotent():
    text = "trios cerec digital dentistry"
    evidence = ["page[A]: trios", "page[B]: cerec"]
    assert score_site(text, evidence, 5) == score_site(text, evidence, 5)


@pytest.mark.parametrize(
    "score,band",
    [
        (0, ConfidenceBand.NONE),
        (19, ConfidenceBand.NONE),
        (20, ConfidenceBand.LOW),
        (34, ConfidenceBand.LOW),
        (35, ConfidenceBand.MEDIUM),
        (49, ConfidenceBand.MEDIUM),
        (50, ConfidenceBand.HIGH),
    ],
)
def test_deep_band_thresholds(score, band):
    assert band_for_score(score, DEEP_PROFILE) is band


def test_single_page_profile_is_more_lenient():
    text = "itero primescan cad/cam"
    deep = score_site(text, [], 1, DEEP_PROFILE)
    quick = score_site(text, [], 1, SINGLE_PAGE_PROFILE)
    assert deep.score == 28 and deep.band is ConfidenceBand.LOW
    assert quick.score == 35 and quick.band is ConfidenceBand.MEDIUM


def test_single_page_profile_ignores_page_bonus():
    c = score_site("itero", ["page[A]: itero", "page[B]: itero"], 2, SINGLE_PAGE_PROFILE)
    assert c.score == 15
    assert c.band is ConfidenceBand.LOW


def test_evidence_lists_groups_and_page_count():
    c = score_site("itero and cad/cam", [], 7)
    assert c.evidence == "3D scanner: itero | digital: cad/cam | pages examined: 7"
    assert c.reason == c.evidence


def test_find_matching_keywords_is_case_insensitive_and_ordered():
    found = find_matching_keywords("TRIOS by 3Shape, also iTero", SCANNER_KEYWORDS)
    assert found == ["itero", "trios", "3shape"]


def test_find_matching_keywords_korean():
    assert find_matching_keywords("최신 구강스캐너 도입", SCANNER_KEYWORDS) == ["구강스캐너"]


def test_page_evidence():
    assert page_evidence("Equipment", "we have itero") == "page[Equipment]: itero"
    assert page_evidence("Home", "nothing here") is None


def test_single_page_profile_counts_same_day_wording():
    text = "원데이 임플란트 당일 진료 itero"
    quick = score_site(text, [], 1, SINGLE_PAGE_PROFILE)
    deep = score_site(text, [], 1, DEEP_PROFILE)
    assert quick.score == 15 + 2 * 5
    assert quick.band is ConfidenceBand.MEDIUM
    assert "digital: 원데이, 당일" in quick.evidence
    assert deep.score == 12
    assert "digital" not in deep.evidence
