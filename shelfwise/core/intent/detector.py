"""Command detection for shelfwise inventory chat.

This module turns a raw chat message (plus an "image attached" flag) into one
``Intent`` variant. Classification is a strict priority chain:

1. Keyword gate - messages with no inventory vocabulary are plain chat
2. Image cataloging
3. Manual book entry ("add book: X by Y price ...")
4. Inventory search
5. Update
6. Delete
7. Analytics
8. Help
9. Export
10. Batch operations
11. Inventory-flavored but unmatched -> help

Detection never raises: any internal failure is logged and the message is
treated as regular chat.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .entities import (
    BY_SEPARATOR,
    FIELD_TAIL,
    EntityExtractor,
    clean_value,
    cut_field_tail,
    strip_search_terms,
)
from .patterns import (
    ANALYTICS_PATTERN,
    ANALYTICS_TYPE_KEYWORDS,
    AUTHOR_LABEL,
    BATCH_PATTERN,
    BATCH_TARGET,
    BATCH_TYPE_KEYWORDS,
    CATALOGING_PATTERN,
    DELETE_PATTERNS,
    EXPORT_PATTERN,
    EXPORT_TYPE_KEYWORDS,
    HELP_PATTERN,
    INVENTORY_KEYWORDS,
    INVENTORY_PHRASE_PATTERN,
    MANUAL_ENTRY_PREFIXES,
    MUTATION_VERB,
    SEARCH_PATTERNS,
    SEARCH_SCAN_PATTERN,
    SEARCH_TYPE_KEYWORDS,
    UPDATE_PATTERNS,
    UPDATE_TYPE_KEYWORDS,
    WORD_PATTERN,
    first_match,
)
from .taxonomy import (
    AnalyticsType,
    BatchOperation,
    BatchType,
    BookCataloging,
    DeleteBook,
    ExportType,
    Intent,
    InventoryAnalytics,
    InventoryExport,
    InventoryHelp,
    InventorySearch,
    ManualBookEntry,
    RegularChat,
    SearchType,
    UpdateBook,
    UpdateType,
)

if TYPE_CHECKING:
    from ...config import AppConfig

logger = logging.getLogger(__name__)

# Security: Maximum input length to bound regex work on pasted text
MAX_INPUT_LENGTH = 10_000


class CommandDetector:
    """Classify chat messages into inventory intents.

    The detector holds no per-message state and may be shared between
    threads.

    Attributes:
        extractor: Entity extractor used for price/quantity/location fields
        max_input_length: Characters of a message considered for matching
    """

    def __init__(
        self,
        extractor: EntityExtractor | None = None,
        max_input_length: int = MAX_INPUT_LENGTH,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the command detector.

        Args:
            extractor: Entity extractor (defaults to a fresh one sharing the logger)
            max_input_length: Longer messages are truncated for matching only
            logger: Logger for diagnostics (defaults to this module's logger)
        """
        self._logger = logger or logging.getLogger(__name__)
        self.extractor = extractor or EntityExtractor(logger=self._logger)
        self.max_input_length = max_input_length

    def detect_intent(self, message: str, has_image: bool = False) -> Intent:
        """Classify a chat message.

        Args:
            message: Raw user message, carried verbatim on the returned intent
            has_image: Whether the user attached an image

        Returns:
            Exactly one intent variant. Never raises.
        """
        try:
            return self._detect(message, has_image)
        except Exception:
            self._logger.exception("Error detecting intent, treating as chat")
            return RegularChat(message)

    def _detect(self, message: str, has_image: bool) -> Intent:
        text = message.strip()

        # Security: truncate excessively long input
        if len(text) > self.max_input_length:
            self._logger.warning(
                f"Input truncated from {len(text)} to {self.max_input_length} chars"
            )
            text = text[: self.max_input_length]

        # Stage 1: keyword gate
        has_keywords = self._has_inventory_keywords(text)
        if not has_image and not has_keywords:
            return RegularChat(message)

        # Stage 2: cataloging from an image
        if has_image and CATALOGING_PATTERN.search(text):
            self._logger.debug("Detected book cataloging request")
            return BookCataloging(message, has_image=True)

        for stage in (
            self._detect_manual_entry,
            self._detect_search,
            self._detect_update,
            self._detect_delete,
        ):
            intent = stage(message, text)
            if intent is not None:
                self._logger.debug(f"Detected {intent.kind.value}")
                return intent

        if ANALYTICS_PATTERN.search(text):
            analytics_type = first_match(ANALYTICS_TYPE_KEYWORDS, text, AnalyticsType.GENERAL)
            return InventoryAnalytics(message, analytics_type=analytics_type)

        if HELP_PATTERN.search(text):
            return InventoryHelp(message)

        if EXPORT_PATTERN.search(text):
            export_type = first_match(EXPORT_TYPE_KEYWORDS, text, ExportType.FULL)
            return InventoryExport(message, export_type=export_type)

        if BATCH_PATTERN.search(text):
            operation_type = first_match(BATCH_TYPE_KEYWORDS, text, BatchType.ADD_MULTIPLE)
            return BatchOperation(message, operation_type=operation_type)

        if has_keywords:
            self._logger.debug("Inventory vocabulary without a command, offering help")
            return InventoryHelp(message)

        return RegularChat(message)

    def _has_inventory_keywords(self, text: str) -> bool:
        """Check for inventory vocabulary in a single pass over the words."""
        lowered = text.lower()
        if any(word in INVENTORY_KEYWORDS for word in WORD_PATTERN.findall(lowered)):
            return True
        return INVENTORY_PHRASE_PATTERN.search(lowered) is not None

    # =========================================================================
    # Stage 3: manual entry
    # =========================================================================

    def _detect_manual_entry(self, message: str, text: str) -> ManualBookEntry | None:
        body = None
        for prefix in MANUAL_ENTRY_PREFIXES:
            match = prefix.match(text)
            if match:
                body = text[match.end():]
                break
        if not body:
            return None

        parts = AUTHOR_LABEL.split(body, maxsplit=1)
        if len(parts) != 2:
            parts = BY_SEPARATOR.split(body, maxsplit=1)
        if len(parts) != 2:
            return None

        title = clean_value(cut_field_tail(parts[0]))
        rest = parts[1]
        tail = FIELD_TAIL.search(rest)
        if tail:
            author_text, fields_text = rest[: tail.start()], rest[tail.start():]
        else:
            author_text, fields_text = rest, ""
        author = clean_value(author_text)

        if not title or not author:
            return None

        return ManualBookEntry(
            message,
            title=title,
            author=author,
            price=self.extractor.extract_price(fields_text),
            quantity=self.extractor.extract_quantity(fields_text),
            location=self.extractor.extract_location(fields_text),
        )

    # =========================================================================
    # Stage 4: search
    # =========================================================================

    def _detect_search(self, message: str, text: str) -> InventorySearch | None:
        # Analytics and help requests often say "show" or "list"
        if ANALYTICS_PATTERN.search(text) or HELP_PATTERN.search(text):
            return None

        search_type = first_match(SEARCH_TYPE_KEYWORDS, text, SearchType.GENERAL)

        for pattern in SEARCH_PATTERNS:
            match = pattern.match(text)
            if match:
                query = strip_search_terms(match.group("query"), search_type)
                return InventorySearch(
                    message,
                    query=query or match.group("query").strip(),
                    search_type=search_type,
                )

        if MUTATION_VERB.match(text):
            return None

        verb = SEARCH_SCAN_PATTERN.search(text)
        if verb:
            query = strip_search_terms(text[verb.start():], search_type)
            return InventorySearch(message, query=query or text, search_type=search_type)

        return None

    # =========================================================================
    # Stage 5: update
    # =========================================================================

    def _detect_update(self, message: str, text: str) -> UpdateBook | None:
        update_type = first_match(UPDATE_TYPE_KEYWORDS, text, UpdateType.GENERAL)

        for pattern in UPDATE_PATTERNS:
            match = pattern.match(text)
            if not match:
                continue
            target = clean_value(match.group("target"))
            value = clean_value(match.group("value"))
            if not target or not value or BATCH_TARGET.match(target):
                return None
            return UpdateBook(
                message,
                update_type=update_type,
                book_identifier=target,
                new_value=value,
            )

        return None

    # =========================================================================
    # Stage 6: delete
    # =========================================================================

    def _detect_delete(self, message: str, text: str) -> DeleteBook | None:
        for pattern in DELETE_PATTERNS:
            match = pattern.match(text)
            if not match:
                continue
            target = clean_value(match.group("target"))
            if not target or BATCH_TARGET.match(target):
                return None
            return DeleteBook(message, book_identifier=target)

        return None


def create_detector(config: AppConfig | None = None) -> CommandDetector:
    """Factory function to create a CommandDetector.

    Args:
        config: Application config supplying detector settings (defaults apply
            when omitted)

    Returns:
        Configured CommandDetector instance
    """
    if config is None:
        return CommandDetector()
    return CommandDetector(max_input_length=config.detector.max_input_length)


# Module-level instance for convenience
_detector = CommandDetector()


def detect_intent(message: str, has_image: bool = False) -> Intent:
    """Detect the intent of a message using the default detector."""
    return _detector.detect_intent(message, has_image)
