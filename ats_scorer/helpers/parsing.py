import re
from datetime import datetime, timezone
from pathlib import PurePath
from typing import Dict, List, Optional, Tuple

from ats_scorer.helpers import vocabulary as vocab
from ats_scorer.utils.utils import contains_term

YEAR_RANGE_RE = re.compile(
    r"\b((?:19|20)\d{2})\s*(?:-|–|—|to)\s*((?:19|20)\d{2}|present|current|now|today)\b",
    re.IGNORECASE,
)
STATED_YEARS_RE = re.compile(
    r"(\d+(?:\.\d+)?)\+?\s*(?:years?|yrs?)\s+(?:of\s+)?(?:\w+\s+)?experience",
    re.IGNORECASE,
)
LIST_SPLIT_RE = re.compile(r"\s*(?:[,;|•·]|\s/\s)\s*")
MAX_SKILL_ITEM_LENGTH = 40
MAX_PLAUSIBLE_YEARS = 50


def dedupe(items: List[str]) -> List[str]:
    """Case-insensitive de-duplication keeping the first spelling"""
    seen, out = set(), []
    for item in items:
        key = item.strip().lower()
        if key and key not in seen:
            seen.add(key)
            out.append(item.strip())
    return out


def match_header(line: str, table: Dict[str, List[str]]) -> Tuple[Optional[str], str]:
    """Return (section, trailing content) when ``line`` is a header such as "Skills:" or "SKILLS"."""
    label = line.strip().rstrip(":").strip().lower()
    for section, labels in table.items():
        if label in labels:
            return section, ""
    if ":" in line:
        head, rest = line.split(":", 1)
        head = head.strip().lower()
        if len(head.split()) <= 4:
            for section, labels in table.items():
                if head in labels:
                    return section, rest.strip()
    return None, ""


def split_list(line: str) -> List[str]:
    return [p for p in LIST_SPLIT_RE.split(line) if p and len(p) <= MAX_SKILL_ITEM_LENGTH]


def dictionary_skills(text: str) -> List[str]:
    """Canonical skill terms mentioned anywhere in ``text`` (directly or through a synonym)"""
    found = []
    for term in vocab.SKILL_TERMS:
        if any(contains_term(text, spelling) for spelling in vocab.synonyms_for(term)):
            found.append(term)
    return found


def file_type_of(file_name: str) -> str:
    suffix = PurePath(file_name or "").suffix.lstrip(".").lower()
    return suffix or "txt"


def extract_experience_years(text: str) -> Optional[int]:
    """Minimum years a requirement asks for ("4+ years of experience", "at least 3 years")"""
    for pattern in vocab.YEARS_REQUIRED_PATTERNS:
        match = pattern.search(text or "")
        if match:
            years = int(match.group(1))
            if 0 < years <= MAX_PLAUSIBLE_YEARS:
                return years
    return None


def date_ranges(entries: List[str], current_year: Optional[int] = None) -> List[Tuple[int, int]]:
    current_year = current_year or datetime.now(timezone.utc).year
    spans = []
    for entry in entries:
        for start, end in YEAR_RANGE_RE.findall(entry or ""):
            start_year = int(start)
            end_year = int(end) if end.isdigit() else current_year
            if start_year <= end_year <= current_year + 1:
                spans.append((start_year, end_year))
    return spans


def merged_span_years(spans: List[Tuple[int, int]]) -> int:
    """Total years covered by the union of (start, end) ranges; overlaps count once"""
    total = 0
    cur_start = cur_end = None
    for start, end in sorted(spans):
        if cur_end is None or start > cur_end:
            if cur_end is not None:
                total += cur_end - cur_start
            cur_start, cur_end = start, end
        else:
            cur_end = max(cur_end, end)
    if cur_end is not None:
        total += cur_end - cur_start
    return total


def stated_years(text: str) -> float:
    """Largest "N years of experience" figure stated in ``text``"""
    best = 0.0
    for match in STATED_YEARS_RE.finditer(text or ""):
        value = float(match.group(1))
        if value <= MAX_PLAUSIBLE_YEARS:
            best = max(best, value)
    return best


def infer_candidate_years(experience: List[str], text: str, current_year: Optional[int] = None) -> float:
    """Longest plausible reading: merged date ranges of the experience entries or any stated figure"""
    from_ranges = merged_span_years(date_ranges(experience, current_year))
    return float(max(from_ranges, stated_years(text)))
