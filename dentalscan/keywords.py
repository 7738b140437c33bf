"""Keyword sets for equipment detection and link prioritization (Korean and English)."""

# Direct indicators of an intraoral / 3D scanner: generic terms, brands, scanning technology
SCANNER_KEYWORDS = (
    "3d스캐너", "3d 스캐너", "3d scanning", "3d스캐닝", "3d 스캐닝",
    "쓰리디스캐너", "쓰리디 스캐너", "삼차원 스캐너",
    "구강스캐너", "intraoral scanner", "인트라오럴 스캐너",
    "광학스캐너", "optical scanner", "디지털인상", "digital impression",
    # brands and models
    "itero", "trios", "cerec", "carestream", "cs3600", "cs3700",
    "medit", "i500", "i700", "primescan", "sirona",
    "planmeca", "emerald", "3shape", "shining3d", "aoralscan",
    "dentapix", "launca", "virtuo vivo",
    # scanning technology
    "confocal", "컨포컬", "structured light", "구조광",
    "triangulation", "삼각측량", "stereo camera", "스테레오카메라",
    # dental-specific wording
    "dental scanner", "덴탈 스캐너", "치과용 스캐너", "치과 3d스캐너",
    "구강내 스캐너", "인상채득", "impression", "석고모형", "plaster model",
)

# General "modern digital clinic" wording; weaker evidence
DIGITAL_KEYWORDS = (
    "디지털치과", "디지털 치과", "digital dentistry",
    "스마트치과", "첨단장비", "최신장비", "하이테크",
    "디지털임플란트", "무인상", "인상없이", "편안한치료",
    "정밀진단", "cad/cam", "캐드캠", "cadcam", "워크플로우",
)

# Single-page scoring also counts same-day treatment wording
SINGLE_PAGE_DIGITAL_KEYWORDS = (
    "디지털치과", "디지털 치과", "digital dentistry",
    "스마트치과", "첨단장비", "최신장비", "하이테크",
    "디지털임플란트", "원데이", "당일", "즉시", "빠른진료",
    "무인상", "인상없이", "편안한치료", "정밀진단",
    "cad/cam", "캐드캠", "cadcam", "워크플로우",
)

# Pages likely to describe equipment; boost their links
PRIORITY_PAGE_KEYWORDS = (
    "장비", "equipment", "시설", "facility", "진료", "treatment",
    "소개", "about", "clinic", "technology", "tech", "digital",
    "임플란트", "implant", "진단", "diagnosis", "첨단", "advanced",
)

# Pages never worth crawling; a match vetoes the link
EXCLUDE_PAGE_KEYWORDS = (
    "contact", "연락처", "오시는길", "location", "map", "sitemap",
    "privacy", "개인정보", "terms", "약관", "login", "admin",
    "board", "게시판", "notice", "공지", "news", "뉴스",
)

NON_HTML_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg",
    ".pdf", ".doc", ".docx", ".hwp", ".zip",
)
