"""Intent taxonomy for shelfwise inventory chat.

This module defines the closed set of intents a chat message can resolve to,
their sub-type enums, and read-only helpers over the ``Intent`` union.

Every variant is an independent frozen dataclass carrying the user's message
verbatim; ``Intent`` is the union of all of them. Code that consumes an intent
should ``match`` on the variant classes.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Union


class IntentKind(str, Enum):
    """Discriminator tag for the intent union."""

    REGULAR_CHAT = "regular_chat"
    BOOK_CATALOGING = "book_cataloging"
    MANUAL_BOOK_ENTRY = "manual_book_entry"
    INVENTORY_SEARCH = "inventory_search"
    UPDATE_BOOK = "update_book"
    DELETE_BOOK = "delete_book"
    INVENTORY_ANALYTICS = "inventory_analytics"
    INVENTORY_HELP = "inventory_help"
    INVENTORY_EXPORT = "inventory_export"
    BATCH_OPERATION = "batch_operation"


class SearchType(str, Enum):
    """How an inventory search should be scoped."""

    GENERAL = "GENERAL"  # Title and author
    BY_TITLE = "BY_TITLE"
    BY_AUTHOR = "BY_AUTHOR"
    BY_LOCATION = "BY_LOCATION"  # Shelf / section
    BY_CONDITION = "BY_CONDITION"  # New, Used, Damaged
    RECENT = "RECENT"  # Recently added
    LOW_STOCK = "LOW_STOCK"


class UpdateType(str, Enum):
    """Which field of an existing book an update targets."""

    GENERAL = "GENERAL"
    PRICE = "PRICE"
    QUANTITY = "QUANTITY"
    LOCATION = "LOCATION"
    CONDITION = "CONDITION"


class AnalyticsType(str, Enum):
    """Kind of aggregate statistic requested."""

    GENERAL = "GENERAL"
    COUNT = "COUNT"
    VALUE = "VALUE"
    BY_CONDITION = "BY_CONDITION"
    BY_LOCATION = "BY_LOCATION"
    LOW_STOCK = "LOW_STOCK"
    RECENT_ACTIVITY = "RECENT_ACTIVITY"


class ExportType(str, Enum):
    """Scope of an export/backup request."""

    FULL = "FULL"
    BY_CONDITION = "BY_CONDITION"
    BY_LOCATION = "BY_LOCATION"
    RECENT = "RECENT"


class BatchType(str, Enum):
    """Multi-record operation kinds."""

    ADD_MULTIPLE = "ADD_MULTIPLE"
    UPDATE_MULTIPLE = "UPDATE_MULTIPLE"
    DELETE_MULTIPLE = "DELETE_MULTIPLE"
    MOVE_MULTIPLE = "MOVE_MULTIPLE"


@dataclass(frozen=True)
class RegularChat:
    """Ordinary conversation, not an inventory command."""

    message: str

    kind: ClassVar[IntentKind] = IntentKind.REGULAR_CHAT


@dataclass(frozen=True)
class BookCataloging:
    """Recognize books from an attached image."""

    message: str
    has_image: bool = True

    kind: ClassVar[IntentKind] = IntentKind.BOOK_CATALOGING


@dataclass(frozen=True)
class ManualBookEntry:
    """Add a single book described in text.

    Attributes:
        message: Original user message
        title: Extracted book title
        author: Extracted author name
        price: Extracted price (positive) if present
        quantity: Extracted copy count (positive) if present
        location: Extracted shelf/section if present
    """

    message: str
    title: str | None = None
    author: str | None = None
    price: float | None = None
    quantity: int | None = None
    location: str | None = None

    kind: ClassVar[IntentKind] = IntentKind.MANUAL_BOOK_ENTRY


@dataclass(frozen=True)
class InventorySearch:
    """Find books already in the inventory."""

    message: str
    query: str
    search_type: SearchType = SearchType.GENERAL

    kind: ClassVar[IntentKind] = IntentKind.INVENTORY_SEARCH


@dataclass(frozen=True)
class UpdateBook:
    """Change one field of an existing book.

    Attributes:
        message: Original user message
        update_type: Field being changed
        book_identifier: Title (or other handle) naming the book
        new_value: Raw replacement value as typed by the user
    """

    message: str
    update_type: UpdateType = UpdateType.GENERAL
    book_identifier: str | None = None
    new_value: str | None = None

    kind: ClassVar[IntentKind] = IntentKind.UPDATE_BOOK


@dataclass(frozen=True)
class DeleteBook:
    """Remove a book from the inventory."""

    message: str
    book_identifier: str | None = None

    kind: ClassVar[IntentKind] = IntentKind.DELETE_BOOK


@dataclass(frozen=True)
class InventoryAnalytics:
    """Aggregate statistics request."""

    message: str
    analytics_type: AnalyticsType = AnalyticsType.GENERAL

    kind: ClassVar[IntentKind] = IntentKind.INVENTORY_ANALYTICS


@dataclass(frozen=True)
class InventoryHelp:
    """User asked how to use the inventory commands."""

    message: str

    kind: ClassVar[IntentKind] = IntentKind.INVENTORY_HELP


@dataclass(frozen=True)
class InventoryExport:
    """Backup or export request."""

    message: str
    export_type: ExportType = ExportType.FULL

    kind: ClassVar[IntentKind] = IntentKind.INVENTORY_EXPORT


@dataclass(frozen=True)
class BatchOperation:
    """Operation over many books at once."""

    message: str
    operation_type: BatchType = BatchType.ADD_MULTIPLE

    kind: ClassVar[IntentKind] = IntentKind.BATCH_OPERATION


Intent = Union[
    RegularChat,
    BookCataloging,
    ManualBookEntry,
    InventorySearch,
    UpdateBook,
    DeleteBook,
    InventoryAnalytics,
    InventoryHelp,
    InventoryExport,
    BatchOperation,
]

INTENT_CLASSES: tuple[type, ...] = (
    RegularChat,
    BookCataloging,
    ManualBookEntry,
    InventorySearch,
    UpdateBook,
    DeleteBook,
    InventoryAnalytics,
    InventoryHelp,
    InventoryExport,
    BatchOperation,
)

# Command families, in the order help text lists them
INVENTORY_COMMAND_TYPES: list[str] = [
    "Book Cataloging (from image)",
    "Manual Book Entry",
    "Inventory Search",
    "Update Book Information",
    "Delete Book",
    "Inventory Analytics",
    "Batch Operations",
    "Export/Import",
    "Help Commands",
]


def original_message(intent: Intent) -> str:
    """Return the user's message exactly as it was received."""
    return intent.message


def requires_image(intent: Intent) -> bool:
    """Check if the intent needs the attached image to be processed."""
    match intent:
        case BookCataloging(has_image=has_image):
            return has_image
        case _:
            return False


def is_inventory_command(intent: Intent) -> bool:
    """Check if the intent is anything other than ordinary chat."""
    return not isinstance(intent, RegularChat)


def describe(intent: Intent) -> str:
    """Get a human-readable description of the intent.

    Args:
        intent: Any intent variant

    Returns:
        Short description suitable for status lines

    Raises:
        TypeError: If given an object outside the intent union
    """
    match intent:
        case RegularChat():
            return "General conversation"
        case BookCataloging():
            return "Add books from image"
        case ManualBookEntry():
            return "Add book manually"
        case InventorySearch(search_type=search_type):
            return f"Search inventory: {search_type.value.lower()}"
        case UpdateBook(update_type=update_type):
            return f"Update book: {update_type.value.lower()}"
        case DeleteBook():
            return "Delete book"
        case InventoryAnalytics(analytics_type=analytics_type):
            return f"Show analytics: {analytics_type.value.lower()}"
        case InventoryHelp():
            return "Show inventory help"
        case InventoryExport(export_type=export_type):
            return f"Export inventory: {export_type.value.lower()}"
        case BatchOperation(operation_type=operation_type):
            return f"Batch operation: {operation_type.value.lower()}"
        case _:
            raise TypeError(f"Not an intent: {intent!r}")


def intent_to_dict(intent: Intent) -> dict[str, Any]:
    """Convert an intent to a plain dictionary.

    Enum members are replaced by their values so the result is JSON-safe.
    """
    data: dict[str, Any] = {"kind": intent.kind.value}
    for f in fields(intent):
        value = getattr(intent, f.name)
        data[f.name] = value.value if isinstance(value, Enum) else value
    return data
