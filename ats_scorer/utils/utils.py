import json
import math
import re
from functools import lru_cache
from typing import List, Optional

from nltk.stem import PorterStemmer

from ats_scorer.helpers.vocabulary import FILLER_WORDS

_stemmer = PorterStemmer()

TOKEN_RE = re.compile(r"[a-z0-9][a-z0-9+#./-]*[a-z0-9+#]|[a-z0-9]", re.IGNORECASE)
BULLET_RE = re.compile(r"^\s*(?:[-*•●▪–>]+|\d+[.)])\s*")


def safe_json(s: str, fallback):
    """Parse the first JSON object embedded in a model response, or return the fallback."""
    if not s or not isinstance(s, str):
        return fallback
    cleaned = re.sub(r"```(?:json)?", "", s).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start < 0 or end <= start:
        return fallback
    try:
        return json.loads(cleaned[start:end + 1])
    except (ValueError, TypeError):
        return fallback


def clean_text(x: str) -> str:
    return re.sub(r"\s+", " ", x or "").strip()


def split_lines(text: str) -> List[str]:
    """Non-empty lines with bullet markers removed"""
    lines = []
    for raw in (text or "").splitlines():
        line = BULLET_RE.sub("", raw).strip()
        if line:
            lines.append(line)
    return lines


def word_count(text: str) -> int:
    return len((text or "").split())


@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern:
    # Terms like "c++", ".net" or "ci/cd" end or start with non-word chars, so \b is not usable
    return re.compile(r"(?<![\w+#])" + re.escape(term) + r"(?![\w+#])", re.IGNORECASE)


def find_term(text: str, term: str) -> Optional[str]:
    """Return the literal occurrence of ``term`` in ``text`` (original casing), if any"""
    term = (term or "").strip()
    if not term or not text:
        return None
    match = _term_pattern(term.lower()).search(text)
    return match.group(0) if match else None


def contains_term(text: str, term: str) -> bool:
    return find_term(text, term) is not None


def tokenize(text: str) -> List[str]:
    return [t.lower() for t in TOKEN_RE.findall(text or "")]


@lru_cache(maxsize=16384)
def stem(token: str) -> str:
    return _stemmer.stem(token.lower())


def content_stems(text: str) -> List[str]:
    """Lowercased, filler-free, Porter-stemmed tokens in order of appearance (deduplicated)"""
    seen = []
    for token in tokenize(text):
        if token in FILLER_WORDS or len(token) < 2 or token.isdigit():
            continue
        stemmed = stem(token)
        if stemmed not in seen:
            seen.append(stemmed)
    return seen


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_score(value: float) -> int:
    """Round to the nearest integer and clamp into [0, 100]"""
    return max(0, min(100, round_half_up(value)))
