"""Intent detection for shelfwise inventory chat.

This module classifies chat messages into inventory intents and extracts
book fields from free-form text.

Detection is a deterministic priority chain over regex tables:
1. Keyword gate - ordinary conversation exits immediately
2. Command patterns - cataloging, manual entry, search, update, delete
3. Keyword families - analytics, help, export, batch

Example usage:
    ```python
    from shelfwise.core.intent import CommandDetector, UpdateBook, UpdateType

    detector = CommandDetector()

    intent = detector.detect_intent("Update price of Atomic Habits to 350")
    assert isinstance(intent, UpdateBook)
    assert intent.update_type == UpdateType.PRICE
    assert intent.book_identifier == "Atomic Habits"
    ```
"""

from .detector import (
    CommandDetector,
    create_detector,
    detect_intent,
)
from .entities import (
    BookCondition,
    EntityExtractor,
    ExtractedBookInfo,
    Language,
    extract_book_info,
    extract_search_query,
    strip_search_terms,
    validate_book_info,
)
from .taxonomy import (
    INVENTORY_COMMAND_TYPES,
    AnalyticsType,
    BatchOperation,
    BatchType,
    BookCataloging,
    DeleteBook,
    ExportType,
    Intent,
    IntentKind,
    InventoryAnalytics,
    InventoryExport,
    InventoryHelp,
    InventorySearch,
    ManualBookEntry,
    RegularChat,
    SearchType,
    UpdateBook,
    UpdateType,
    describe,
    intent_to_dict,
    is_inventory_command,
    original_message,
    requires_image,
)

__all__ = [
    # Detection
    "CommandDetector",
    "create_detector",
    "detect_intent",
    # Taxonomy
    "Intent",
    "IntentKind",
    "RegularChat",
    "BookCataloging",
    "ManualBookEntry",
    "InventorySearch",
    "UpdateBook",
    "DeleteBook",
    "InventoryAnalytics",
    "InventoryHelp",
    "InventoryExport",
    "BatchOperation",
    "SearchType",
    "UpdateType",
    "AnalyticsType",
    "ExportType",
    "BatchType",
    "INVENTORY_COMMAND_TYPES",
    "describe",
    "intent_to_dict",
    "is_inventory_command",
    "original_message",
    "requires_image",
    # Entity extraction
    "EntityExtractor",
    "ExtractedBookInfo",
    "BookCondition",
    "Language",
    "extract_book_info",
    "extract_search_query",
    "strip_search_terms",
    "validate_book_info",
]
