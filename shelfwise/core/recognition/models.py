"""Data models for parsed book-recognition responses.

``ParsedBook`` is one candidate record read out of a model response;
``ParseResult`` is the outcome of parsing a whole response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ParsingMethod(str, Enum):
    """Response layout a record was read from, strictest first."""

    STANDARD = "standard"  # ##**## fenced "I. 1. 2. 3. 4." blocks
    ALTERNATIVE_1 = "alternative_1"  # Bare "1. 2. 3. 4." lines
    ALTERNATIVE_2 = "alternative_2"  # "Title:" / "Author:" labels
    ALTERNATIVE_3 = "alternative_3"  # "Book: X by Y (Kannada: A by B)"
    FALLBACK = "fallback"  # Prose and "X by Y" lists


class ConfidenceLevel:
    """Confidence thresholds for recognized books.

    - HIGH (>=0.9): Standard layout with every field
    - MEDIUM (>=0.7): Structured layout, English fields only
    - LOW (>=0.5): Worth showing, needs a human check
    """

    HIGH = 0.9
    MEDIUM = 0.7
    LOW = 0.5

    @classmethod
    def label(cls, confidence: float) -> str:
        """Get the storage label for a confidence score."""
        if confidence >= cls.HIGH:
            return "HIGH"
        if confidence >= cls.MEDIUM:
            return "MEDIUM"
        return "LOW"


# Subtracted from a record's score according to how loose its layout was
METHOD_PENALTIES: dict[ParsingMethod, float] = {
    ParsingMethod.STANDARD: 0.0,
    ParsingMethod.ALTERNATIVE_1: 0.05,
    ParsingMethod.ALTERNATIVE_2: 0.05,
    ParsingMethod.ALTERNATIVE_3: 0.10,
    ParsingMethod.FALLBACK: 0.25,
}

# Record flags raised for fields below the minimum length
TITLE_TOO_SHORT = "title_too_short"
AUTHOR_TOO_SHORT = "author_too_short"


@dataclass(frozen=True)
class ParsedBook:
    """One book read from a recognition response.

    Attributes:
        english_title: Title in Latin script
        english_author: Author in Latin script
        regional_title: Title in Kannada script, if given
        regional_author: Author in Kannada script, if given
        confidence: Score in [0, 1], filled in by the parser
        parsing_method: Layout the record was read from
        source_text: Response fragment the record came from
        flags: Problems found while scoring (e.g. ``title_too_short``)
    """

    english_title: str
    english_author: str
    regional_title: str | None = None
    regional_author: str | None = None
    confidence: float = 0.0
    parsing_method: ParsingMethod = ParsingMethod.STANDARD
    source_text: str = ""
    flags: tuple[str, ...] = ()

    def is_plausible(self) -> bool:
        """Check that both English fields have some text."""
        return bool(self.english_title.strip()) and bool(self.english_author.strip())

    def is_valid(self) -> bool:
        """Check the record is complete enough to store."""
        return self.is_plausible() and not self.flags

    def short_field_flags(self, min_field_length: int = 3) -> tuple[str, ...]:
        """List flags for English fields shorter than ``min_field_length``."""
        flags: list[str] = []
        if len(self.english_title.strip()) < min_field_length:
            flags.append(TITLE_TOO_SHORT)
        if len(self.english_author.strip()) < min_field_length:
            flags.append(AUTHOR_TOO_SHORT)
        return tuple(flags)

    def calculate_confidence(self, min_field_length: int = 3) -> float:
        """Score how complete and well-formatted the record is.

        Title and author are worth 0.4 each and the regional fields 0.1 each.
        Each English field shorter than ``min_field_length`` costs 0.2, and
        looser layouts cost their ``METHOD_PENALTIES`` entry.

        Returns:
            Score clamped to [0, 1]
        """
        score = 0.0
        if self.english_title.strip():
            score += 0.4
        if self.english_author.strip():
            score += 0.4
        if self.regional_title and self.regional_title.strip():
            score += 0.1
        if self.regional_author and self.regional_author.strip():
            score += 0.1

        score -= 0.2 * len(self.short_field_flags(min_field_length))
        score -= METHOD_PENALTIES[self.parsing_method]

        return round(max(0.0, min(1.0, score)), 4)

    @property
    def confidence_level(self) -> str:
        return ConfidenceLevel.label(self.confidence)

    def to_record(self) -> dict[str, Any]:
        """Convert to the field layout the inventory store expects."""
        return {
            "title_english": self.english_title.strip(),
            "author_english": self.english_author.strip(),
            "title_kannada": self.regional_title.strip() if self.regional_title else None,
            "author_kannada": self.regional_author.strip() if self.regional_author else None,
            "extraction_confidence": self.confidence_level,
            "source_type": "AI",
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "english_title": self.english_title,
            "english_author": self.english_author,
            "regional_title": self.regional_title,
            "regional_author": self.regional_author,
            "confidence": self.confidence,
            "parsing_method": self.parsing_method.value,
            "flags": list(self.flags),
        }


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one recognition response.

    Attributes:
        success: True when at least one record is valid
        books: Every plausible record, flagged ones included
        confidence: Mean record confidence (0.0 when there are no records)
        error_message: Why parsing failed, None on success
        raw_response: The text that was parsed
    """

    success: bool
    books: tuple[ParsedBook, ...] = field(default_factory=tuple)
    confidence: float = 0.0
    error_message: str | None = None
    raw_response: str = ""

    @classmethod
    def failure(cls, error_message: str, raw_response: str = "") -> ParseResult:
        """Create a failed result with no records."""
        return cls(success=False, error_message=error_message, raw_response=raw_response)

    @property
    def valid_books(self) -> list[ParsedBook]:
        return [book for book in self.books if book.is_valid()]

    def summary(self) -> str:
        """Get a one-line description of the result."""
        valid_count = len(self.valid_books)
        total_count = len(self.books)

        if not self.books and self.error_message:
            return f"Parsing failed: {self.error_message}"
        if valid_count == 0:
            return "No valid books found in response"
        if valid_count == total_count:
            return f"Successfully parsed {valid_count} book(s)"
        return f"Parsed {valid_count} valid book(s) out of {total_count} total"

    def to_records(self) -> list[dict[str, Any]]:
        """Convert valid books to storage records."""
        return [book.to_record() for book in self.valid_books]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "success": self.success,
            "confidence": self.confidence,
            "error_message": self.error_message,
            "summary": self.summary(),
            "books": [book.to_dict() for book in self.books],
        }
