"""
app/search/intent.py

Turns a raw search string into a structured QueryIntent.

Pipeline:

    raw query
      └─ BypassRule          → literal intent (short token / protected phrase)
      └─ IntentRule × 5      → year → genre → country → director → actor
           └─ stopword filter → processed text

Each rule runs at most once per extraction and the first of its patterns
that matches wins. The pattern tables and canonical spellings below are
a tuning surface: they catch common phrasings, not every possible one.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.core.constants import SUPPORTED_SEARCH_FIELDS
from app.core.logger import clip, get_logger

logger = get_logger(__name__)

# Letters of the Latin + Vietnamese alphabet, plus whitespace.
_WORDS = r"[a-zA-ZÀ-ỹ\s]+"

_FIELD_PREFIX_RE = re.compile(
    r"^(?P<field>" + "|".join(SUPPORTED_SEARCH_FIELDS) + r"):(?P<text>.*)$",
    re.IGNORECASE | re.DOTALL,
)


# ── Intent model ───────────────────────────────────────────────────────────────

class IntentType(str, Enum):
    GENERAL = "general"
    YEAR = "year_search"
    GENRE = "genre_search"
    COUNTRY = "country_search"
    DIRECTOR = "director_search"
    ACTOR = "actor_search"
    COMPLEX = "complex_search"


@dataclass
class QueryIntent:
    """Structured reading of one search string; built per request, then discarded."""

    original: str
    processed: str
    intent: IntentType = IntentType.GENERAL
    year: Optional[int] = None
    genre: Optional[str] = None
    country: Optional[str] = None
    director: Optional[str] = None
    actor: Optional[str] = None

    @classmethod
    def literal(cls, text: str) -> "QueryIntent":
        """An intent that carries ``text`` through untouched."""
        return cls(original=text, processed=text)

    def has_extractions(self) -> bool:
        return any(
            v is not None
            for v in (self.year, self.genre, self.country, self.director, self.actor)
        )


@dataclass(frozen=True)
class RuleMatch:
    """Outcome of a successful rule: the text left over and the value it captured."""

    remaining: str
    value: Any


# ── Rules ──────────────────────────────────────────────────────────────────────

class IntentRule(ABC):
    """
    One family of natural-language patterns.

    Subclasses declare ``family`` (the intent it signals), ``attribute``
    (the QueryIntent field it fills) and ``patterns``; each pattern must
    expose the captured value as the named group ``value``.
    """

    family: IntentType
    attribute: str
    patterns: Sequence[str] = ()

    def __init__(self) -> None:
        self._compiled: List[re.Pattern] = [
            re.compile(p, re.IGNORECASE) for p in self.patterns
        ]

    def try_extract(self, text: str) -> Optional[RuleMatch]:
        """
        Return the first pattern match in ``text``, or None.

        The matched span is removed from the returned ``remaining`` text.
        """
        for pattern in self._compiled:
            match = pattern.search(text)
            if not match:
                continue
            raw_value = (match.group("value") or "").strip()
            if not raw_value:
                continue
            remaining = f"{text[:match.start()]} {text[match.end():]}".strip()
            return RuleMatch(remaining=remaining, value=self.normalise(raw_value))
        return None

    @abstractmethod
    def normalise(self, value: str) -> Any:
        """Convert the captured text into the value stored on the intent."""


class YearRule(IntentRule):
    family = IntentType.YEAR
    attribute = "year"
    patterns = (
        r"\b(?:phim |movie |film )(?:năm|year|in|của năm|from|from year|xuất bản năm"
        r"|sản xuất năm|ra mắt năm|công chiếu năm)\s?(?P<value>\d{4})\b",
        r"\bnăm (?P<value>\d{4})\b",
    )

    def normalise(self, value: str) -> int:
        return int(value)


class _LookupRule(IntentRule):
    """Rule whose captured value is mapped through a canonical-name table."""

    canonical: Dict[str, str] = {}

    def normalise(self, value: str) -> str:
        return self.canonical.get(value.lower(), value)


GENRE_CANONICAL: Dict[str, str] = {
    "hành động": "Hành Động", "hanh dong": "Hành Động", "action": "Hành Động",
    "chiến đấu": "Hành Động",
    "tình cảm": "Tình Cảm", "tinh cam": "Tình Cảm", "tình yêu": "Tình Cảm",
    "romance": "Tình Cảm", "romantic": "Tình Cảm", "lãng mạn": "Tình Cảm",
    "lang man": "Tình Cảm",
    "hài": "Hài Hước", "hai": "Hài Hước", "hài hước": "Hài Hước",
    "hai huoc": "Hài Hước", "comedy": "Hài Hước", "vui nhộn": "Hài Hước",
    "hài kịch": "Hài Hước",
    "cổ trang": "Cổ Trang", "co trang": "Cổ Trang", "historical": "Cổ Trang",
    "tâm lý": "Tâm Lý", "tam ly": "Tâm Lý", "psychological": "Tâm Lý",
    "drama": "Tâm Lý", "kịch tính": "Tâm Lý",
    "hình sự": "Hình Sự", "hinh su": "Hình Sự", "crime": "Hình Sự",
    "tội phạm": "Hình Sự", "toi pham": "Hình Sự",
    "chiến tranh": "Chiến Tranh", "chien tranh": "Chiến Tranh", "war": "Chiến Tranh",
    "thể thao": "Thể Thao", "the thao": "Thể Thao", "sport": "Thể Thao",
    "võ thuật": "Võ Thuật", "vo thuat": "Võ Thuật", "martial arts": "Võ Thuật",
    "kung fu": "Võ Thuật",
    "viễn tưởng": "Viễn Tưởng", "vien tuong": "Viễn Tưởng", "sci-fi": "Viễn Tưởng",
    "science fiction": "Viễn Tưởng", "khoa học viễn tưởng": "Viễn Tưởng",
    "phiêu lưu": "Phiêu Lưu", "phieu luu": "Phiêu Lưu", "adventure": "Phiêu Lưu",
    "mạo hiểm": "Phiêu Lưu",
    "khoa học": "Khoa Học", "khoa hoc": "Khoa Học", "science": "Khoa Học",
    "kinh dị": "Kinh Dị", "kinh di": "Kinh Dị", "horror": "Kinh Dị",
    "ma quái": "Kinh Dị", "ma quai": "Kinh Dị", "thriller": "Kinh Dị",
    "rùng rợn": "Kinh Dị", "rung ron": "Kinh Dị",
    "âm nhạc": "Âm Nhạc", "am nhac": "Âm Nhạc", "music": "Âm Nhạc", "nhạc": "Âm Nhạc",
    "thần thoại": "Thần Thoại", "than thoai": "Thần Thoại", "mythology": "Thần Thoại",
    "hoạt hình": "Hoạt Hình", "hoat hinh": "Hoạt Hình", "animation": "Hoạt Hình",
    "cartoon": "Hoạt Hình", "anime": "Hoạt Hình",
}

COUNTRY_CANONICAL: Dict[str, str] = {
    "mỹ": "Âu Mỹ", "my": "Âu Mỹ", "america": "Âu Mỹ", "american": "Âu Mỹ",
    "us": "Âu Mỹ", "usa": "Âu Mỹ", "anh": "Âu Mỹ", "úc": "Âu Mỹ",
    "pháp": "Âu Mỹ", "phap": "Âu Mỹ",
    "trung": "Trung Quốc", "trung quốc": "Trung Quốc", "trung quoc": "Trung Quốc",
    "china": "Trung Quốc", "chinese": "Trung Quốc",
    "hàn": "Hàn Quốc", "han": "Hàn Quốc", "hàn quốc": "Hàn Quốc",
    "han quoc": "Hàn Quốc", "korea": "Hàn Quốc", "korean": "Hàn Quốc",
    "nhật": "Nhật Bản", "nhat": "Nhật Bản", "nhật bản": "Nhật Bản",
    "nhat ban": "Nhật Bản", "japan": "Nhật Bản", "japanese": "Nhật Bản",
    "việt": "Việt Nam", "viet": "Việt Nam", "việt nam": "Việt Nam",
    "viet nam": "Việt Nam", "vietnam": "Việt Nam", "vietnamese": "Việt Nam",
    "thái": "Thái Lan", "thai": "Thái Lan", "thái lan": "Thái Lan",
    "thai lan": "Thái Lan", "thailand": "Thái Lan",
    "đài": "Đài Loan", "đài loan": "Đài Loan", "dai loan": "Đài Loan",
    "taiwan": "Đài Loan", "taiwanese": "Đài Loan",
    "hồng kông": "Hồng Kông", "hong kong": "Hồng Kông", "hongkong": "Hồng Kông",
    "ấn độ": "Ấn Độ", "an do": "Ấn Độ", "india": "Ấn Độ", "indian": "Ấn Độ",
}


class GenreRule(_LookupRule):
    family = IntentType.GENRE
    attribute = "genre"
    canonical = GENRE_CANONICAL
    patterns = (
        r"\b(?:phim |movie |film )(?:thể loại phim|thể loại|genre|loại phim|kiểu phim"
        r"|phim loại|loại|kiểu|dạng|chủ đề)\s+(?P<value>" + _WORDS + r")\b",
        r"\b(?:phim|movie|film) (?P<value>" + _WORDS + r") (?:thể loại|genre|loại|kiểu|dạng|chủ đề)\b",
    )


class CountryRule(_LookupRule):
    family = IntentType.COUNTRY
    attribute = "country"
    canonical = COUNTRY_CANONICAL
    patterns = (
        r"\b(?:phim |movie |film )(?:quốc gia|country|nước|đất nước|của|xuất xứ"
        r"|nguồn gốc|sản xuất tại)\s+(?P<value>" + _WORDS + r")\b",
        r"\b(?:phim|movie|film) (?P<value>" + _WORDS + r") (?:quốc gia|country|nước|đất nước)\b",
    )


class DirectorRule(IntentRule):
    family = IntentType.DIRECTOR
    attribute = "director"
    patterns = (
        r"\b(?:phim |movie |film )(?:của đạo diễn|do đạo diễn|đạo diễn|director)"
        r"\s+(?P<value>" + _WORDS + r")\b",
        r"\b(?:đạo diễn|director|directed by) (?P<value>" + _WORDS + r")\b",
    )

    def normalise(self, value: str) -> str:
        return value


class ActorRule(IntentRule):
    family = IntentType.ACTOR
    attribute = "actor"
    patterns = (
        r"\b(?:phim |movie |film )(?:có diễn viên|với diễn viên|do diễn viên|diễn viên"
        r"|actor|starring|với sự tham gia của|diễn xuất bởi)\s+(?P<value>" + _WORDS + r")\b",
        r"\bdo (?P<value>" + _WORDS + r") (?:đóng|thủ vai|diễn xuất|thể hiện)\b",
    )

    def normalise(self, value: str) -> str:
        return value


DEFAULT_RULES: Tuple[type, ...] = (YearRule, GenreRule, CountryRule, DirectorRule, ActorRule)


# ── Bypass ─────────────────────────────────────────────────────────────────────

#: Literal title words that look like pattern triggers ("nguồn gốc" = "origin").
PROTECTED_PHRASES: Tuple[str, ...] = (
    "nguồn gốc",
    "nguồn",
    "gốc",
    "nguồn gốc tội lỗi",
    "nguồn gốc đại chiến",
    "nguyên tác",
    "tác giả",
    "gốc gác",
    "bối cảnh",
    "cội nguồn",
    "xuất xứ",
)


class BypassRule:
    """
    Decides whether a query is taken literally, skipping every IntentRule.

    Short single tokens are title fragments; protected phrases are title
    words that the country / director patterns would otherwise consume.
    """

    def __init__(
        self,
        max_literal_length: int = 15,
        protected_phrases: Sequence[str] = PROTECTED_PHRASES,
    ) -> None:
        self._max_literal_length = max_literal_length
        self._protected = tuple(p.lower() for p in protected_phrases)

    def applies(self, text: str) -> bool:
        if len(text) < self._max_literal_length and not any(c.isspace() for c in text):
            return True
        lowered = text.lower()
        return any(phrase in lowered for phrase in self._protected)


# ── Stopwords ──────────────────────────────────────────────────────────────────

STOPWORDS: Tuple[str, ...] = (
    "phim", "movie", "xem", "watch", "tìm", "search", "find", "film", "về",
    "về phim", "hay", "mới", "hot", "bộ", "lẻ", "full", "hd", "vietsub",
    "thuyết minh", "lồng tiếng",
)

_SINGLE_STOPWORDS = frozenset(w for w in STOPWORDS if " " not in w)
_PHRASE_STOPWORDS_RE = re.compile(
    r"(?<!\w)(?:" + "|".join(re.escape(w) for w in STOPWORDS if " " in w) + r")(?!\w)",
    re.IGNORECASE,
)


def strip_stopwords(text: str) -> str:
    """Drop filler words ("phim", "xem", "vietsub"…) and collapse whitespace."""
    text = _PHRASE_STOPWORDS_RE.sub(" ", text)
    return " ".join(w for w in text.split() if w.lower() not in _SINGLE_STOPWORDS)


def _significant_words(text: str, limit: int = 2) -> str:
    words = [w for w in text.split() if w.lower() not in _SINGLE_STOPWORDS]
    return " ".join(words[:limit])


# ── Extractor ──────────────────────────────────────────────────────────────────

class IntentExtractor:
    """
    Runs the bypass check, then every IntentRule in priority order.

    Rules and bypass are injectable so tests can exercise one rule at a time.
    """

    def __init__(
        self,
        rules: Sequence[IntentRule] | None = None,
        bypass: BypassRule | None = None,
    ) -> None:
        self._rules: List[IntentRule] = (
            list(rules) if rules is not None else [rule() for rule in DEFAULT_RULES]
        )
        self._bypass = bypass or BypassRule()

    def extract(self, raw: str) -> QueryIntent:
        """
        Build a QueryIntent from free text.

        Args:
            raw : The user's query, already stripped of any ``field:`` prefix.

        Returns:
            QueryIntent. ``intent`` is the family of the first rule that
            matched, ``complex_search`` when more than one did, ``general``
            when none did.
        """
        original = (raw or "").strip()
        if not original or self._bypass.applies(original):
            return QueryIntent.literal(original)

        result = QueryIntent(original=original, processed=original)
        working = original

        for rule in self._rules:
            match = rule.try_extract(working)
            if match is None:
                continue
            working = match.remaining
            setattr(result, rule.attribute, match.value)
            result.intent = (
                rule.family if result.intent is IntentType.GENERAL else IntentType.COMPLEX
            )

        result.processed = strip_stopwords(working)
        if not result.processed and result.has_extractions():
            result.processed = _significant_words(original)

        if result.intent is not IntentType.GENERAL:
            logger.debug(
                "Intent '%s' from '%s' — processed='%s'",
                result.intent.value,
                clip(original),
                result.processed,
            )
        return result


def split_field_prefix(raw: str | None) -> Tuple[Optional[str], str]:
    """
    Split a ``field:value`` query into its field and text.

    The prefix is matched case-insensitively against the supported field
    list and only counts when some text follows it; otherwise the whole
    query is returned as free text.

    Returns:
        ``(field, text)`` where ``field`` is lower-case or None.
    """
    text = (raw or "").strip()
    match = _FIELD_PREFIX_RE.match(text)
    if match:
        value = match.group("text").strip()
        if value:
            return match.group("field").lower(), value
    return None, text


# Shared default instance; stateless, safe across requests.
intent_extractor = IntentExtractor()
