"""Entity extraction for shelfwise intent detection.

This module pulls typed book fields (title, author, price, quantity, location,
condition) out of free-form text, scores how complete an extraction is, and
strips search verbs from queries.

All patterns are compiled once at import time and are either anchored or
bounded, so arbitrarily long messages are scanned in roughly linear time.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from .taxonomy import SearchType

logger = logging.getLogger(__name__)


class BookCondition(str, Enum):
    """Physical condition of a copy."""

    NEW = "New"
    USED = "Used"
    DAMAGED = "Damaged"


class Language(str, Enum):
    """Script classification of a message."""

    ENGLISH = "english"
    KANNADA = "kannada"
    MIXED = "mixed"


# Condition synonyms. Iteration order is the tie-break: first synonym found wins.
CONDITION_KEYWORDS: dict[str, BookCondition] = {
    "new": BookCondition.NEW,
    "brand new": BookCondition.NEW,
    "mint": BookCondition.NEW,
    "used": BookCondition.USED,
    "second hand": BookCondition.USED,
    "secondhand": BookCondition.USED,
    "pre-owned": BookCondition.USED,
    "damaged": BookCondition.DAMAGED,
    "worn": BookCondition.DAMAGED,
    "torn": BookCondition.DAMAGED,
    "broken": BookCondition.DAMAGED,
}

VALID_CONDITIONS: tuple[str, ...] = tuple(condition.value for condition in BookCondition)

STOP_WORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "from", "up", "about", "into", "through", "during", "before",
        "after", "above", "below", "between", "among", "is", "are", "was", "were",
        "be", "been", "being", "have", "has", "had", "do", "does", "did", "will",
        "would", "could", "should", "may", "might", "must", "can", "this", "that",
        "these", "those",
    }
)

# Weights for the completeness score of an extraction
CONFIDENCE_WEIGHTS: dict[str, float] = {
    "title": 0.40,
    "author": 0.40,
    "price": 0.10,
    "quantity": 0.05,
    "location": 0.03,
    "condition": 0.02,
}

_AMOUNT = r"(\d{1,9}(?:\.\d{1,2})?)"

PRICE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"₹\s*" + _AMOUNT),
    re.compile(r"\brs\.?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\brupees?\s*" + _AMOUNT, re.IGNORECASE),
    re.compile(_AMOUNT + r"\s*rupees?\b", re.IGNORECASE),
    re.compile(r"\bprice\s*(?::\s*)?(?:₹\s*)?" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\bcost\s*(?::\s*)?(?:₹\s*)?" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\$\s*" + _AMOUNT),
]

QUANTITY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bqty\s*(?::\s*)?(\d{1,9})\b", re.IGNORECASE),
    re.compile(r"\bquantity\s*(?::\s*)?(\d{1,9})\b", re.IGNORECASE),
    re.compile(r"\bcount\s*(?::\s*)?(\d{1,9})\b", re.IGNORECASE),
    re.compile(r"\b(\d{1,9})\s*(?:copies|books?|pieces?)\b", re.IGNORECASE),
    re.compile(r"\bx\s*(\d{1,9})\b", re.IGNORECASE),
]

_LOCATION_TOKEN = r"([A-Za-z0-9][A-Za-z0-9\-]*)"

LOCATION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\blocation\s*(?::\s*)?" + _LOCATION_TOKEN, re.IGNORECASE),
    re.compile(r"\bshelf\s*(?::\s*)?" + _LOCATION_TOKEN, re.IGNORECASE),
    re.compile(r"\bsection\s*(?::\s*)?" + _LOCATION_TOKEN, re.IGNORECASE),
    re.compile(r"\bat\s+" + _LOCATION_TOKEN, re.IGNORECASE),
    re.compile(r"\bin\s+" + _LOCATION_TOKEN, re.IGNORECASE),
]

TITLE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\btitle\s*:\s*(?P<value>[^\n]+)", re.IGNORECASE),
    re.compile(r"\bbook\b\s*(?::\s*)?(?P<value>[^\n]+)", re.IGNORECASE),
    re.compile(r"[\"“](?P<value>[^\"”\n]+)[\"”]\s+by\b", re.IGNORECASE),
    re.compile(r"(?:^|\s)'(?P<value>[^'\n]+)'\s+by\b", re.IGNORECASE),
]

AUTHOR_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"\bauthor\s*(?::|\bis\b)\s*(?P<value>[^\n]+)", re.IGNORECASE),
    re.compile(r"\bwritten\s+by\s+(?P<value>[^\n]+)", re.IGNORECASE),
    re.compile(r"\bby\s+(?P<value>[^\n]+)", re.IGNORECASE),
]

# Separates "<title> by <author>". Whitespace runs are only entered at their
# first character.
BY_SEPARATOR = re.compile(r"(?<!\s)\s+(?:written\s+)?by(?:\s+|$)", re.IGNORECASE)

# Start of a trailing field clause ("price 299", "qty 5", "location A-1", ...).
# Each alternative begins at a word or symbol, never inside a whitespace run;
# separators left before the clause are trimmed by cut_field_tail.
FIELD_TAIL = re.compile(
    r"(?:"
    r"\b(?:price|cost|qty|quantity|count)\b\s*(?::\s*)?(?:(?:₹|\$|rs\.?)\s*)?\d"
    r"|₹\s*\d|\$\s*\d|\brs\.?\s*\d|\brupees?\s*\d"
    r"|\b(?:location|shelf|section)\b(?:\s*:\s*\S|\s+[A-Za-z]{0,3}-?\d)"
    r"|\b(?:author|condition)\s*:"
    r"|\bx\s*\d+\b|\b\d+\s*(?:copies|pieces)\b"
    r")",
    re.IGNORECASE,
)

_ENTRY_PREFIX = re.compile(
    r"^(?:add\s+(?:a\s+|new\s+)?book|book|title)\s*:?\s*", re.IGNORECASE
)
_AUTHOR_PREFIX = re.compile(r"^author\b\s*(?::|\bis\b)?\s*", re.IGNORECASE)
_SURROUNDING_QUOTES = "\"'“”‘’`"
_WHITESPACE = re.compile(r"\s+")
_WORDS = re.compile(r"[^\W\d_]+(?:['’-][^\W\d_]+)*")

KANNADA_PATTERN = re.compile(r"[\u0C80-\u0CFF]")
LATIN_PATTERN = re.compile(r"[A-Za-z]")

# --- Search query stripping -------------------------------------------------

SEARCH_VERBS: tuple[str, ...] = ("find", "search", "show", "list", "get", "display")

_LEADING_SEARCH_VERB = re.compile(
    r"^(?:(?:please|can\s+you|could\s+you)\s+)?"
    r"(?:find|search|show|list|get|display|look\s+up)\b[\s:]*",
    re.IGNORECASE,
)

_QUERY_CONNECTORS: tuple[str, ...] = (r"me", r"for", r"all", r"any")

_QUERY_QUALIFIERS: dict[SearchType, tuple[str, ...]] = {
    SearchType.BY_AUTHOR: (
        r"(?:books?\s+)?(?:written\s+)?by(?:\s+(?:the\s+)?author)?",
        r"(?:books?\s+)?(?:from|of)(?:\s+(?:the\s+)?author)?",
        r"authors?",
    ),
    SearchType.BY_TITLE: (
        r"(?:books?\s+)?(?:(?:by|with)\s+)?(?:the\s+)?titled?",
        r"(?:books?\s+)?(?:called|named)",
        r"titles?",
    ),
    SearchType.BY_LOCATION: (
        r"(?:books?\s+)?(?:(?:in|at|on|from)\s+)?(?:the\s+)?(?:location|shelf|section)",
        r"(?:books?\s+)?(?:in|at|on|from)",
    ),
    SearchType.BY_CONDITION: (
        r"(?:books?\s+)?(?:(?:with|in|by)\s+)?condition",
        r"(?:books?\s+)?(?:with|in)",
    ),
}


def _compile_prefixes(prefixes: tuple[str, ...]) -> list[re.Pattern[str]]:
    return [re.compile(rf"^(?:{p})\b[\s:]*", re.IGNORECASE) for p in prefixes]


_CONNECTOR_PATTERNS = _compile_prefixes(_QUERY_CONNECTORS)
_QUALIFIER_PATTERNS: dict[SearchType, list[re.Pattern[str]]] = {
    search_type: _compile_prefixes(prefixes)
    for search_type, prefixes in _QUERY_QUALIFIERS.items()
}


def strip_search_terms(text: str, search_type: SearchType = SearchType.GENERAL) -> str:
    """Remove a leading search verb, connectors and type qualifiers.

    Shared by the entity extractor and the command detector so that both
    produce the same query for the same words.

    Args:
        text: Message or fragment that may start with a search verb
        search_type: Search scope whose qualifier phrases should be removed

    Returns:
        Residual query text with original casing (may be empty)
    """
    query = _LEADING_SEARCH_VERB.sub("", text.strip(), count=1)
    prefixes = _CONNECTOR_PATTERNS + _QUALIFIER_PATTERNS.get(search_type, [])

    changed = True
    while changed and query:
        changed = False
        for pattern in prefixes:
            stripped = pattern.sub("", query, count=1)
            if stripped != query:
                query = stripped
                changed = True
                break

    return query.strip().rstrip("?!.").strip()


# --- Helpers -----------------------------------------------------------------


def _strip_quotes(value: str) -> str:
    return value.strip().strip(_SURROUNDING_QUOTES).strip()


def _strip_trailing_punct(value: str) -> str:
    """Drop trailing separators, keeping abbreviation dots like "Co." or "Jr."."""
    value = value.rstrip(" ,;:!?")
    if value.endswith("."):
        last_word = value.rsplit(None, 1)[-1]
        if len(last_word) > 4:
            value = value[:-1]
    return value.strip()


def cut_field_tail(value: str) -> str:
    """Cut a trailing "price ... qty ... location ..." clause off a value."""
    tail = FIELD_TAIL.search(value)
    if tail:
        value = value[: tail.start()].rstrip(" \t\n,;")
    return value


def _is_stop_word(value: str) -> bool:
    """Check if a value consists only of stop words."""
    words = _WORDS.findall(value.lower())
    return bool(words) and all(word in STOP_WORDS for word in words)


def clean_value(value: str) -> str:
    """Collapse whitespace and strip surrounding quotes and trailing separators."""
    value = _WHITESPACE.sub(" ", value)
    return _strip_trailing_punct(_strip_quotes(value))


# --- Extracted info ------------------------------------------------------------


@dataclass(frozen=True)
class ExtractedBookInfo:
    """Book fields extracted from a message.

    Attributes:
        title: Book title
        author: Author name
        price: Price, positive when present
        quantity: Number of copies, positive when present
        location: Shelf / section label
        condition: New, Used or Damaged
        confidence: Completeness score 0.0-1.0 (see calculate_confidence)
        language: Script classification of the source message
    """

    title: str | None = None
    author: str | None = None
    price: float | None = None
    quantity: int | None = None
    location: str | None = None
    condition: str | None = None
    confidence: float = 0.0
    language: Language = Language.ENGLISH

    def is_valid(self) -> bool:
        """Check if both title and author are present."""
        return bool(self.title and self.title.strip()) and bool(
            self.author and self.author.strip()
        )

    def calculate_confidence(self) -> float:
        """Score how complete this extraction is.

        Each populated field adds its weight from CONFIDENCE_WEIGHTS; the
        total is capped at 1.0. Populating more fields never lowers the score.
        """
        score = 0.0
        if self.title and self.title.strip():
            score += CONFIDENCE_WEIGHTS["title"]
        if self.author and self.author.strip():
            score += CONFIDENCE_WEIGHTS["author"]
        if self.price is not None and self.price > 0:
            score += CONFIDENCE_WEIGHTS["price"]
        if self.quantity is not None and self.quantity > 0:
            score += CONFIDENCE_WEIGHTS["quantity"]
        if self.location and self.location.strip():
            score += CONFIDENCE_WEIGHTS["location"]
        if self.condition and str(self.condition).strip():
            score += CONFIDENCE_WEIGHTS["condition"]
        return min(round(score, 4), 1.0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        data: dict[str, Any] = {}
        for key, value in self.__dict__.items():
            if value is None:
                continue
            data[key] = value.value if isinstance(value, Enum) else value
        return data


class EntityExtractor:
    """Extract book fields from natural language text.

    Every method is pure: a missing field yields ``None``, never an exception.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        """Initialize the extractor.

        Args:
            logger: Logger for diagnostics (defaults to this module's logger)
        """
        self._logger = logger or logging.getLogger(__name__)

    # --- Numeric fields ---

    def extract_price(self, text: str) -> float | None:
        """Extract a positive price.

        Currency patterns are tried in order (₹, Rs, rupees, price, cost, $);
        the first positive amount wins.
        """
        for pattern in PRICE_PATTERNS:
            match = pattern.search(text)
            if match:
                price = float(match.group(1))
                if price > 0:
                    self._logger.debug(f"Extracted price: {price}")
                    return price
        return None

    def extract_quantity(self, text: str) -> int | None:
        """Extract a positive copy count."""
        for pattern in QUANTITY_PATTERNS:
            match = pattern.search(text)
            if match:
                quantity = int(match.group(1))
                if quantity > 0:
                    self._logger.debug(f"Extracted quantity: {quantity}")
                    return quantity
        return None

    # --- Text fields ---

    def extract_location(self, text: str) -> str | None:
        """Extract a shelf / section label."""
        for pattern in LOCATION_PATTERNS:
            match = pattern.search(text)
            if match:
                location = match.group(1).strip("-")
                if location and location.lower() not in STOP_WORDS:
                    self._logger.debug(f"Extracted location: {location}")
                    return location
        return None

    def extract_condition(self, text: str) -> BookCondition | None:
        """Extract a condition from synonym keywords."""
        text_lower = text.lower()
        for keyword, condition in CONDITION_KEYWORDS.items():
            if keyword in text_lower:
                self._logger.debug(f"Extracted condition: {condition.value}")
                return condition
        return None

    def extract_title(self, text: str) -> str | None:
        """Extract a book title.

        Labeled forms ("title:", "book:", a quoted string before "by") are
        tried first, then the part before the word "by".
        """
        for pattern in TITLE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            value = BY_SEPARATOR.split(" " + match.group("value"), maxsplit=1)[0]
            title = clean_value(cut_field_tail(value))
            if title and not _is_stop_word(title):
                self._logger.debug(f"Extracted title: {title}")
                return title

        parts = BY_SEPARATOR.split(text.strip(), maxsplit=1)
        if len(parts) == 2:
            title = clean_value(_ENTRY_PREFIX.sub("", _strip_quotes(parts[0]), count=1))
            if title and not _is_stop_word(title):
                self._logger.debug(f"Extracted title from 'by' split: {title}")
                return title

        return None

    def extract_author(self, text: str) -> str | None:
        """Extract an author name.

        Tries "author:", "written by" and "by", cutting off any trailing
        price / quantity / location clause.
        """
        for pattern in AUTHOR_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            value = _AUTHOR_PREFIX.sub("", _strip_quotes(match.group("value")), count=1)
            author = clean_value(cut_field_tail(value))
            if author and not _is_stop_word(author):
                self._logger.debug(f"Extracted author: {author}")
                return author
        return None

    # --- Aggregate ---

    def detect_language(self, text: str) -> Language:
        """Classify text by script: Kannada, Latin, or both."""
        has_kannada = KANNADA_PATTERN.search(text) is not None
        has_english = LATIN_PATTERN.search(text) is not None

        if has_kannada and has_english:
            return Language.MIXED
        if has_kannada:
            return Language.KANNADA
        return Language.ENGLISH

    def extract_book_info(self, message: str) -> ExtractedBookInfo:
        """Extract every book field from a message.

        Args:
            message: Free-form user text

        Returns:
            ExtractedBookInfo with confidence and language filled in. Never
            raises; on an internal error an empty result is returned.
        """
        self._logger.debug(f"Extracting book info from: {message[:200]!r}")

        try:
            text = message.strip()
            info = ExtractedBookInfo(
                title=self.extract_title(text),
                author=self.extract_author(text),
                price=self.extract_price(text),
                quantity=self.extract_quantity(text),
                location=self.extract_location(text),
                condition=self.extract_condition(text),
                language=self.detect_language(text),
            )
            result = replace(info, confidence=info.calculate_confidence())
            self._logger.debug(f"Extracted info: {result.to_dict()}")
            return result
        except Exception:
            self._logger.exception("Error extracting book info")
            return ExtractedBookInfo()

    def extract_search_query(self, message: str, search_type: SearchType) -> str:
        """Reduce a search message to its query text.

        Args:
            message: Search request ("Find books by James Clear")
            search_type: Scope whose qualifier phrases should be stripped

        Returns:
            The residual query, or the trimmed message if nothing remains
        """
        query = strip_search_terms(message, search_type)
        return query if query else message.strip()

    def validate_book_info(self, info: ExtractedBookInfo) -> list[str]:
        """Check extracted info against field rules.

        Returns:
            One message per violated rule (empty when valid)
        """
        errors: list[str] = []

        if not info.title or not info.title.strip():
            errors.append("Book title is required")

        if not info.author or not info.author.strip():
            errors.append("Book author is required")

        if info.price is not None and info.price <= 0:
            errors.append("Price must be greater than 0")

        if info.quantity is not None and info.quantity <= 0:
            errors.append("Quantity must be greater than 0")

        if info.condition is not None and info.condition not in VALID_CONDITIONS:
            errors.append("Condition must be New, Used, or Damaged")

        return errors


# Module-level instance for convenience
_extractor = EntityExtractor()


def extract_book_info(message: str) -> ExtractedBookInfo:
    """Extract book info using the default extractor."""
    return _extractor.extract_book_info(message)


def extract_search_query(message: str, search_type: SearchType = SearchType.GENERAL) -> str:
    """Extract a search query using the default extractor."""
    return _extractor.extract_search_query(message, search_type)


def validate_book_info(info: ExtractedBookInfo) -> list[str]:
    """Validate extracted info using the default extractor."""
    return _extractor.validate_book_info(info)
