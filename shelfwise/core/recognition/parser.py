"""Structured response parsing for book recognition.

The vision model is asked (see ``prompts.CATALOGING_PROMPT``) to answer in a
fenced, numbered layout, but real responses drift. The parser tries an ordered
list of layout strategies, strictest first, and keeps the records from the
first strategy that finds at least one title/author pair:

1. Standard - ``##**##`` fenced "I. 1. 2. 3. 4." blocks
2. Alternative 1 - the same numbered lines without fences
3. Alternative 2 - "Title:" / "Author:" labels
4. Alternative 3 - "Book: X by Y (Kannada: A by B)" lines
5. Fallback - quoted titles and "X by Y" lists in prose

``parse_response`` never raises; failures come back as a ``ParseResult`` with
``success=False`` and a readable ``error_message``.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Sequence

from .models import ConfidenceLevel, ParsedBook, ParseResult
from .prompts import DEFAULT_DELIMITER
from .strategies import DEFAULT_STRATEGIES, Strategy

if TYPE_CHECKING:
    from ...config import AppConfig

logger = logging.getLogger(__name__)

# Shortest English title or author accepted without a flag
MIN_FIELD_LENGTH = 3


class BookResponseParser:
    """Parse model responses into book records.

    Attributes:
        min_field_length: Shorter English titles/authors are flagged
        delimiter: Fence line used by the standard layout
        strategies: Layout strategies in the order they are tried
    """

    def __init__(
        self,
        min_field_length: int = MIN_FIELD_LENGTH,
        delimiter: str = DEFAULT_DELIMITER,
        strategies: Sequence[Strategy] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.min_field_length = min_field_length
        self.delimiter = delimiter
        self.strategies: tuple[Strategy, ...] = tuple(strategies or DEFAULT_STRATEGIES)
        self._logger = logger or logging.getLogger(__name__)

    def parse_response(self, raw_text: str) -> ParseResult:
        """Parse a model response.

        Args:
            raw_text: Raw response text

        Returns:
            ParseResult with every plausible record (flagged ones included)
            and the mean confidence. Never raises.
        """
        try:
            self._logger.debug(f"Parsing AI response: {raw_text[:200]!r}")

            if not raw_text or not raw_text.strip():
                return ParseResult.failure("Empty AI response", raw_text)

            books = self._run_strategies(raw_text)
            if not books:
                self._logger.info("No book layout matched the response")
                return ParseResult.failure("No book information found in response", raw_text)

            scored = tuple(self._score(book) for book in books)
            confidence = round(sum(book.confidence for book in scored) / len(scored), 4)
            success = any(book.is_valid() for book in scored)

            result = ParseResult(
                success=success,
                books=scored,
                confidence=confidence,
                error_message=None if success else "No valid books found in response",
                raw_response=raw_text,
            )
            self._logger.debug(f"Parsing result: {result.summary()}")
            return result

        except Exception as e:
            self._logger.exception("Error parsing AI response")
            return ParseResult.failure(f"Parsing error: {e}", raw_text)

    def _run_strategies(self, text: str) -> list[ParsedBook]:
        """Return the plausible records of the first strategy that finds any."""
        for strategy in self.strategies:
            books = [book for book in strategy(text, self.delimiter) if book.is_plausible()]
            if books:
                name = getattr(strategy, "__name__", repr(strategy))
                self._logger.debug(f"{name} found {len(books)} book(s)")
                return books
        return []

    def _score(self, book: ParsedBook) -> ParsedBook:
        return replace(
            book,
            flags=book.short_field_flags(self.min_field_length),
            confidence=book.calculate_confidence(self.min_field_length),
        )

    def validate_result(self, result: ParseResult) -> list[str]:
        """List problems worth showing before records are stored.

        Args:
            result: Result returned by ``parse_response``

        Returns:
            Human-readable issues, empty when every record looks good
        """
        issues: list[str] = []

        if not result.books:
            issues.append(f"Parsing failed: {result.error_message or 'Unknown error'}")
            return issues

        if not result.valid_books:
            issues.append("No valid books found in response")

        for index, book in enumerate(result.books, start=1):
            if book.confidence < ConfidenceLevel.LOW:
                issues.append(f"Book {index}: Low confidence ({int(book.confidence * 100)}%)")
            if len(book.english_title.strip()) < self.min_field_length:
                issues.append(f"Book {index}: Title too short")
            if len(book.english_author.strip()) < self.min_field_length:
                issues.append(f"Book {index}: Author name too short")

        return issues


def create_parser(config: AppConfig | None = None) -> BookResponseParser:
    """Factory function to create a BookResponseParser.

    Args:
        config: Application config supplying parser settings (defaults apply
            when omitted)

    Returns:
        Configured BookResponseParser instance
    """
    if config is None:
        return BookResponseParser()
    return BookResponseParser(
        min_field_length=config.parser.min_field_length,
        delimiter=config.parser.delimiter,
    )


# Module-level instance for convenience
_parser = BookResponseParser()


def parse_response(raw_text: str) -> ParseResult:
    """Parse a model response using the default parser."""
    return _parser.parse_response(raw_text)
