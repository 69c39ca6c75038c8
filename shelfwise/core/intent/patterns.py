"""Keyword and regex tables for shelfwise command detection.

The detector walks these tables in a fixed priority order. Keyword tables are
ordered lists of ``(subtype, pattern)`` pairs; the first pattern that matches
decides the subtype, so more specific entries come first.

Command patterns are anchored at the start of the message (after an optional
courtesy prefix such as "please"), which keeps matching linear on long input.
"""

from __future__ import annotations

import re
from typing import TypeVar

from .taxonomy import AnalyticsType, BatchType, ExportType, SearchType, UpdateType

_FLAGS = re.IGNORECASE | re.DOTALL

E = TypeVar("E")

# Optional courtesy prefix accepted before any command verb
_POLITE = r"^\s*(?:(?:please|kindly|can\s+you|could\s+you|would\s+you)\s+)*"

# =============================================================================
# Stage 1: keyword gate
# =============================================================================

# Single words that mark a message as inventory-related. Matched against whole
# words, so "booking" or "listen" do not pass the gate.
INVENTORY_KEYWORDS: frozenset[str] = frozenset(
    {
        # Book operations
        "catalog", "catalogue", "scan", "add", "book", "books", "inventory",
        "title", "author", "price", "qty", "quantity", "stock", "shelf", "copies",
        # Search operations
        "find", "search", "show", "list", "get", "display", "look",
        # Update operations
        "update", "set", "change", "modify", "move", "edit", "relocate", "shift",
        # Delete operations
        "remove", "delete", "clear", "drop", "discard",
        # Analytics
        "count", "total", "stats", "statistics", "report", "summary",
        # Help
        "help", "commands", "instructions",
        # Export / import
        "export", "backup", "save", "download", "import", "restore",
    }
)

# Multi-word phrases that also pass the gate
INVENTORY_PHRASES: tuple[str, ...] = ("how many", "what can", "how to", "low stock")

INVENTORY_PHRASE_PATTERN = re.compile(
    r"\b(?:" + "|".join(p.replace(" ", r"\s+") for p in INVENTORY_PHRASES) + r")\b",
    re.IGNORECASE,
)

WORD_PATTERN = re.compile(r"[a-z]+")

# Leading verbs owned by the update and delete stages
MUTATION_VERB = re.compile(
    _POLITE + r"(?:update|set|change|modify|edit|move|relocate|shift"
    r"|remove|delete|clear|drop|discard)\b",
    re.IGNORECASE,
)

# =============================================================================
# Stage 2: cataloging from an image
# =============================================================================

CATALOGING_PATTERN = re.compile(
    r"\b(?:catalog(?:ue)?|scan|add|books?|inventory|recogni[sz]e)\b", re.IGNORECASE
)

# =============================================================================
# Stage 3: manual entry
# =============================================================================

# "add book: X by Y ...", "book: X by Y", "title: X author: Y"
MANUAL_ENTRY_PREFIXES: list[re.Pattern[str]] = [
    re.compile(_POLITE + r"add\s+(?:a\s+|new\s+|the\s+)?book\b\s*:?\s*", _FLAGS),
    re.compile(_POLITE + r"book\s*:\s*", _FLAGS),
    re.compile(_POLITE + r"title\s*:\s*", _FLAGS),
]

# Labeled author inside a manual entry body ("... author: Y")
AUTHOR_LABEL = re.compile(r"\bauthor\s*:\s*", re.IGNORECASE)

# =============================================================================
# Stage 4: search
# =============================================================================

SEARCH_PATTERNS: list[re.Pattern[str]] = [
    re.compile(_POLITE + r"find\s+(?P<query>.+)$", _FLAGS),
    re.compile(_POLITE + r"search\s+(?:for\s+)?(?P<query>.+)$", _FLAGS),
    re.compile(_POLITE + r"show\s+(?:me\s+)?(?P<query>.+)$", _FLAGS),
    re.compile(_POLITE + r"list\s+(?P<query>.+)$", _FLAGS),
    re.compile(_POLITE + r"get\s+(?P<query>.+)$", _FLAGS),
    re.compile(_POLITE + r"display\s+(?P<query>.+)$", _FLAGS),
    re.compile(_POLITE + r"look\s+up\s+(?P<query>.+)$", _FLAGS),
]

# Verbs scanned anywhere in the message when no anchored pattern matched
SEARCH_SCAN_PATTERN = re.compile(r"\b(?:show|list|find|search)\b", re.IGNORECASE)

# Evaluated before the query patterns, first match wins
SEARCH_TYPE_KEYWORDS: list[tuple[SearchType, re.Pattern[str]]] = [
    (
        SearchType.BY_AUTHOR,
        re.compile(
            r"\bauthors?\b|\bwritten\s+by\b"
            r"|\bby\s+(?!(?:the\s+)?(?:title|location|shelf|section|condition)\b)\S",
            re.IGNORECASE,
        ),
    ),
    (SearchType.BY_TITLE, re.compile(r"\btitled?\b|\btitles\b|\bcalled\b", re.IGNORECASE)),
    (SearchType.BY_LOCATION, re.compile(r"\b(?:location|shelf|section)\b", re.IGNORECASE)),
    (
        SearchType.BY_CONDITION,
        re.compile(
            r"\b(?:condition|new|used|damaged|worn|torn|second[\s-]?hand|pre-owned)\b",
            re.IGNORECASE,
        ),
    ),
    (
        SearchType.RECENT,
        re.compile(r"\b(?:recent(?:ly)?|latest|newest|last\s+added)\b", re.IGNORECASE),
    ),
    (
        SearchType.LOW_STOCK,
        re.compile(r"\blow\s+stock\b|\brunning\s+out\b|\bout\s+of\s+stock\b", re.IGNORECASE),
    ),
]

# =============================================================================
# Stage 5: update
# =============================================================================

_UPDATE_VERB = r"(?:update|set|change|modify|edit)"
_FIELD = r"(?:price|cost|quantity|qty|stock|location|shelf|section|condition)"
_ASSIGN = r"(?<!\s)(?:\s+to\s+|\s*=\s*)"

UPDATE_PATTERNS: list[re.Pattern[str]] = [
    # "update price of X to 350"
    re.compile(
        _POLITE + _UPDATE_VERB + r"\s+(?:the\s+)?" + _FIELD
        + r"\s+(?:of|for)\s+(?P<target>\S.*?)" + _ASSIGN + r"(?P<value>.+)$",
        _FLAGS,
    ),
    # "set X price to 350", "change X's location to B-2"
    re.compile(
        _POLITE + _UPDATE_VERB + r"\s+(?P<target>\S.*?)(?:'s)?(?<!\s)\s+" + _FIELD
        + _ASSIGN + r"(?P<value>.+)$",
        _FLAGS,
    ),
    # "update X to Y", "set X = Y"
    re.compile(
        _POLITE + _UPDATE_VERB + r"\s+(?P<target>\S.*?)" + _ASSIGN + r"(?P<value>.+)$",
        _FLAGS,
    ),
    # "move X to Y"
    re.compile(
        _POLITE + r"(?:move|relocate|shift)\s+(?P<target>\S.*?)(?<!\s)\s+to\s+(?P<value>.+)$",
        _FLAGS,
    ),
]

UPDATE_TYPE_KEYWORDS: list[tuple[UpdateType, re.Pattern[str]]] = [
    (UpdateType.PRICE, re.compile(r"\b(?:price|cost)\b|₹|\$", re.IGNORECASE)),
    (UpdateType.QUANTITY, re.compile(r"\b(?:quantity|qty|stock|copies)\b", re.IGNORECASE)),
    (
        UpdateType.LOCATION,
        re.compile(r"\b(?:location|shelf|section|move|relocate|shift)\b", re.IGNORECASE),
    ),
    (UpdateType.CONDITION, re.compile(r"\bcondition\b", re.IGNORECASE)),
]

# =============================================================================
# Stage 6: delete
# =============================================================================

DELETE_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        _POLITE + r"(?:remove|delete|drop|discard)\s+(?:book\s*:?\s+)?(?P<target>.+)$",
        _FLAGS,
    ),
    re.compile(_POLITE + r"clear\s+(?:book\s*:?\s+)?(?P<target>.+)$", _FLAGS),
]

# Targets that name many books are left for batch detection
BATCH_TARGET = re.compile(r"^(?:all|every|multiple|many|bulk|batch)\b", re.IGNORECASE)

# =============================================================================
# Stage 7: analytics
# =============================================================================

ANALYTICS_PATTERN = re.compile(
    r"\b(?:count|total|stats|statistics|report|summary)\b|\bhow\s+many\b", re.IGNORECASE
)

ANALYTICS_TYPE_KEYWORDS: list[tuple[AnalyticsType, re.Pattern[str]]] = [
    (AnalyticsType.COUNT, re.compile(r"\bcount\b|\bhow\s+many\b", re.IGNORECASE)),
    (AnalyticsType.VALUE, re.compile(r"\b(?:value|worth)\b", re.IGNORECASE)),
    (AnalyticsType.BY_CONDITION, re.compile(r"\bcondition\b", re.IGNORECASE)),
    (AnalyticsType.BY_LOCATION, re.compile(r"\b(?:location|shelf|section)\b", re.IGNORECASE)),
    (AnalyticsType.LOW_STOCK, re.compile(r"\blow\s+stock\b", re.IGNORECASE)),
    (
        AnalyticsType.RECENT_ACTIVITY,
        re.compile(r"\b(?:recent(?:ly)?|activity|latest)\b", re.IGNORECASE),
    ),
]

# =============================================================================
# Stage 8: help
# =============================================================================

HELP_PATTERN = re.compile(
    r"\b(?:help|commands?|instructions?)\b|\bwhat\s+can\b|\bhow\s+to\b", re.IGNORECASE
)

# =============================================================================
# Stage 9: export
# =============================================================================

EXPORT_PATTERN = re.compile(
    r"\b(?:export|backup|back\s+up|save|download)\b", re.IGNORECASE
)

EXPORT_TYPE_KEYWORDS: list[tuple[ExportType, re.Pattern[str]]] = [
    (ExportType.BY_CONDITION, re.compile(r"\bcondition\b", re.IGNORECASE)),
    (ExportType.BY_LOCATION, re.compile(r"\b(?:location|shelf|section)\b", re.IGNORECASE)),
    (ExportType.RECENT, re.compile(r"\b(?:recent(?:ly)?|latest|new)\b", re.IGNORECASE)),
]

# =============================================================================
# Stage 10: batch
# =============================================================================

BATCH_PATTERN = re.compile(r"\b(?:all|multiple|batch|bulk)\b", re.IGNORECASE)

BATCH_TYPE_KEYWORDS: list[tuple[BatchType, re.Pattern[str]]] = [
    (BatchType.ADD_MULTIPLE, re.compile(r"\b(?:add|catalog(?:ue)?|import)\b", re.IGNORECASE)),
    (
        BatchType.UPDATE_MULTIPLE,
        re.compile(r"\b(?:update|change|set|modify|edit)\b", re.IGNORECASE),
    ),
    (
        BatchType.DELETE_MULTIPLE,
        re.compile(r"\b(?:delete|remove|clear|drop)\b", re.IGNORECASE),
    ),
    (BatchType.MOVE_MULTIPLE, re.compile(r"\b(?:move|relocate|shift)\b", re.IGNORECASE)),
]


def first_match(table: list[tuple[E, re.Pattern[str]]], text: str, default: E) -> E:
    """Return the subtype of the first table entry whose pattern matches.

    Args:
        table: Ordered ``(subtype, pattern)`` pairs
        text: Text to scan
        default: Value returned when nothing matches
    """
    for subtype, pattern in table:
        if pattern.search(text):
            return subtype
    return default
