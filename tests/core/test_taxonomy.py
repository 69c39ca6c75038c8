"""Tests for the shelfwise intent taxonomy.

Tests cover:
- Variant construction and immutability
- Helper functions (describe, requires_image, is_inventory_command)
- Dictionary conversion
"""

from __future__ import annotations

import dataclasses

import pytest

from shelfwise.core.intent import (
    INVENTORY_COMMAND_TYPES,
    AnalyticsType,
    BatchOperation,
    BatchType,
    BookCataloging,
    DeleteBook,
    ExportType,
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
from shelfwise.core.intent.taxonomy import INTENT_CLASSES

# ============================================================================
# Variant Tests
# ============================================================================


class TestIntentVariants:
    """Tests for intent dataclasses."""

    def test_every_variant_has_distinct_kind(self) -> None:
        """Each variant carries its own discriminator."""
        kinds = {cls.kind for cls in INTENT_CLASSES}
        assert kinds == set(IntentKind)

    def test_defaults(self) -> None:
        """Sub-types default to their general member."""
        assert InventorySearch("find x", query="x").search_type == SearchType.GENERAL
        assert UpdateBook("update x").update_type == UpdateType.GENERAL
        assert InventoryAnalytics("stats").analytics_type == AnalyticsType.GENERAL
        assert InventoryExport("export").export_type == ExportType.FULL
        assert BatchOperation("bulk").operation_type == BatchType.ADD_MULTIPLE
        assert BookCataloging("scan").has_image is True

    def test_variants_are_frozen(self) -> None:
        """Intents cannot be mutated after detection."""
        intent = DeleteBook("delete Sapiens", book_identifier="Sapiens")
        with pytest.raises(dataclasses.FrozenInstanceError):
            intent.book_identifier = "Other"  # type: ignore[misc]

    def test_equality_by_value(self) -> None:
        """Identical fields compare equal."""
        assert RegularChat("hi") == RegularChat("hi")
        assert RegularChat("hi") != InventoryHelp("hi")

    def test_command_type_listing(self) -> None:
        """Help text lists every command family."""
        assert len(INVENTORY_COMMAND_TYPES) == 9
        assert "Manual Book Entry" in INVENTORY_COMMAND_TYPES


# ============================================================================
# Helper Tests
# ============================================================================


class TestIntentHelpers:
    """Tests for taxonomy helper functions."""

    def test_original_message_verbatim(self) -> None:
        """original_message returns the message untouched."""
        intent = InventoryHelp("  help me  ")
        assert original_message(intent) == "  help me  "

    def test_requires_image_only_for_cataloging(self) -> None:
        """Only cataloging with an image needs the image."""
        assert requires_image(BookCataloging("scan these")) is True
        assert requires_image(BookCataloging("scan these", has_image=False)) is False
        assert requires_image(ManualBookEntry("add book: x by y")) is False
        assert requires_image(RegularChat("hello")) is False

    def test_is_inventory_command(self) -> None:
        """Everything except regular chat is an inventory command."""
        assert is_inventory_command(RegularChat("hello")) is False
        assert is_inventory_command(InventoryHelp("help")) is True
        assert is_inventory_command(DeleteBook("delete x")) is True

    @pytest.mark.parametrize(
        ("intent", "expected"),
        [
            (RegularChat("hi"), "General conversation"),
            (BookCataloging("scan"), "Add books from image"),
            (ManualBookEntry("add"), "Add book manually"),
            (
                InventorySearch("find", query="x", search_type=SearchType.BY_AUTHOR),
                "Search inventory: by_author",
            ),
            (UpdateBook("update", update_type=UpdateType.PRICE), "Update book: price"),
            (DeleteBook("delete"), "Delete book"),
            (
                InventoryAnalytics("count", analytics_type=AnalyticsType.COUNT),
                "Show analytics: count",
            ),
            (InventoryHelp("help"), "Show inventory help"),
            (InventoryExport("export"), "Export inventory: full"),
            (
                BatchOperation("bulk", operation_type=BatchType.MOVE_MULTIPLE),
                "Batch operation: move_multiple",
            ),
        ],
    )
    def test_describe(self, intent, expected: str) -> None:
        """describe covers every variant."""
        assert describe(intent) == expected

    def test_describe_rejects_non_intent(self) -> None:
        """describe raises for objects outside the union."""
        with pytest.raises(TypeError):
            describe("not an intent")  # type: ignore[arg-type]


class TestIntentToDict:
    """Tests for intent_to_dict."""

    def test_includes_kind_and_fields(self) -> None:
        """Dictionary has the kind tag and every field."""
        intent = UpdateBook(
            "Update price of Sapiens to 499",
            update_type=UpdateType.PRICE,
            book_identifier="Sapiens",
            new_value="499",
        )
        assert intent_to_dict(intent) == {
            "kind": "update_book",
            "message": "Update price of Sapiens to 499",
            "update_type": "PRICE",
            "book_identifier": "Sapiens",
            "new_value": "499",
        }

    def test_keeps_none_fields(self) -> None:
        """Absent optional fields are present as None."""
        data = intent_to_dict(ManualBookEntry("add book", title="Sapiens"))
        assert data["author"] is None
        assert data["price"] is None
