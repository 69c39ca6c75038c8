"""Layout strategies for reading books out of recognition responses.

Each strategy is a plain function ``(text, delimiter) -> list[ParsedBook]``
that targets one response layout and returns an empty list when the layout is
absent. Strategies never raise on odd input and never score records; the
parser does that.

All patterns work line by line, so long responses are read in linear time.
"""

from __future__ import annotations

import re
from typing import Callable

from .models import ParsedBook, ParsingMethod

Strategy = Callable[[str, str], list[ParsedBook]]

# "I. 1. Title", "   2. Author", "- 3) ...", "II. 1. ..."
NUMBERED_LINE = re.compile(r"^\s*(?:[-*•]\s*)?(?:[IVX]+\.\s*)?([1-4])[.)](?:\s+|$)(.*)$")

# A field label repeated inside a numbered line ("1. Title: X")
INLINE_LABEL = re.compile(
    r"^(?:english\s+|kannada\s+|regional\s+)?(?:title|author)\s*:\s*", re.IGNORECASE
)

FIELD_LABEL = re.compile(
    r"\b(?:(?P<lang>english|kannada|regional|native)\s+)?(?P<field>title|author)\s*:",
    re.IGNORECASE,
)

# "Book: X by Y (Kannada: A by B)"
COMPACT_LINE = re.compile(r"^\s*(?:[-*•]\s*)?book\s*:(?P<body>.*)$", re.IGNORECASE)
REGIONAL_SUFFIX = re.compile(
    r"\(\s*(?:kannada|regional)\s*:(?P<regional>[^()]*)\)\s*$", re.IGNORECASE
)

# " by " between a title and an author, entered only at the start of a space run
BY_WORD = re.compile(r"(?<!\s)\s+by\s+", re.IGNORECASE)

_PROSE_AUTHOR = r"(?P<author>[A-Z][\w.'-]*(?:\s+[A-Z][\w.'-]*){0,4})"

QUOTED_BY = [
    re.compile(r"[\"“](?P<title>[^\"”\n]{1,200})[\"”](?:\s*,)?\s+by\s+" + _PROSE_AUTHOR),
    re.compile(
        r"(?:^|(?<=[\s(]))['‘](?P<title>[^'’\n]{1,200})['’](?:\s*,)?\s+by\s+" + _PROSE_AUTHOR
    ),
]

# "- X by Y", "2) X by Y"
LIST_LINE = re.compile(r"^\s*(?:[-*•]|\d{1,3}[.)])\s+(?P<body>.+)$")

_WHITESPACE = re.compile(r"\s+")
_PLACEHOLDER = re.compile(r"^(?:\[.*\]|\(.*\)|n/?a|none|unknown|not\s+visible|-+)$", re.IGNORECASE)
_WRAPPERS = "\"'“”‘’`*_"


def clean_field(value: str | None) -> str | None:
    """Normalize a field value read from a response.

    Collapses whitespace, strips quotes and markdown emphasis, and drops
    trailing separators. Placeholders such as ``[English Title]`` or ``N/A``
    count as absent.

    Returns:
        Cleaned text, or None when nothing meaningful is left
    """
    if value is None:
        return None
    value = _WHITESPACE.sub(" ", value).strip()
    value = value.strip(_WRAPPERS).strip().rstrip(" ,;:/|").strip().strip(_WRAPPERS).strip()
    if not value or _PLACEHOLDER.match(value):
        return None
    return value


def _make_book(
    title: str | None,
    author: str | None,
    regional_title: str | None,
    regional_author: str | None,
    method: ParsingMethod,
    source_text: str,
) -> ParsedBook | None:
    title = clean_field(title)
    author = clean_field(author)
    if not title or not author:
        return None
    return ParsedBook(
        english_title=title,
        english_author=author,
        regional_title=clean_field(regional_title),
        regional_author=clean_field(regional_author),
        parsing_method=method,
        source_text=source_text.strip(),
    )


def _split_by(text: str) -> tuple[str | None, str | None]:
    """Split "X by Y" at the first " by "."""
    parts = BY_WORD.split(text.strip(), maxsplit=1)
    if len(parts) != 2:
        return None, None
    return parts[0], parts[1]


def _numbered_records(text: str) -> list[dict[int, str]]:
    """Group numbered lines into records; a "1." line starts a new one."""
    records: list[dict[int, str]] = []
    current: dict[int, str] | None = None

    for line in text.splitlines():
        match = NUMBERED_LINE.match(line)
        if not match:
            continue
        number = int(match.group(1))
        value = INLINE_LABEL.sub("", match.group(2).strip(), count=1)
        if number == 1:
            current = {1: value}
            records.append(current)
        elif current is not None and number not in current:
            current[number] = value

    return records


def _books_from_numbered(text: str, method: ParsingMethod) -> list[ParsedBook]:
    books: list[ParsedBook] = []
    for record in _numbered_records(text):
        book = _make_book(
            record.get(1), record.get(2), record.get(3), record.get(4), method, text
        )
        if book is not None:
            books.append(book)
    return books


def parse_standard(text: str, delimiter: str) -> list[ParsedBook]:
    """Read ``delimiter``-fenced blocks of "I. 1. ... 4." numbered lines."""
    if not delimiter or delimiter not in text:
        return []

    books: list[ParsedBook] = []
    for block in text.split(delimiter):
        if block.strip():
            books.extend(_books_from_numbered(block, ParsingMethod.STANDARD))
    return books


def parse_numbered(text: str, delimiter: str) -> list[ParsedBook]:
    """Read bare numbered lines with no fence.

    Records whose title and author both read "X by Y" are a numbered list of
    books rather than one book's fields, and are left to ``parse_prose``.
    """
    return [
        book
        for book in _books_from_numbered(text, ParsingMethod.ALTERNATIVE_1)
        if not (" by " in book.english_title.lower() and " by " in book.english_author.lower())
    ]


def parse_labeled(text: str, delimiter: str) -> list[ParsedBook]:
    """Read "Title: / Author: / Kannada Title: / Kannada Author:" labels.

    Labels may sit on separate lines or share one line separated by commas.
    An English title label starts a new record.
    """
    labels = list(FIELD_LABEL.finditer(text))
    if not labels:
        return []

    records: list[dict[str, str]] = []
    current: dict[str, str] | None = None

    for index, label in enumerate(labels):
        end = labels[index + 1].start() if index + 1 < len(labels) else len(text)
        value = text[label.end():end].split("\n", 1)[0]

        regional = (label.group("lang") or "english").lower() != "english"
        key = ("regional_" if regional else "english_") + label.group("field").lower()

        if key == "english_title" or current is None:
            current = {}
            records.append(current)
        current.setdefault(key, value)

    books: list[ParsedBook] = []
    for record in records:
        book = _make_book(
            record.get("english_title"),
            record.get("english_author"),
            record.get("regional_title"),
            record.get("regional_author"),
            ParsingMethod.ALTERNATIVE_2,
            text,
        )
        if book is not None:
            books.append(book)
    return books


def parse_compact(text: str, delimiter: str) -> list[ParsedBook]:
    """Read one "Book: X by Y (Kannada: A by B)" entry per line."""
    books: list[ParsedBook] = []
    for line in text.splitlines():
        match = COMPACT_LINE.match(line)
        if not match:
            continue

        body = match.group("body")
        regional_title = regional_author = None
        suffix = REGIONAL_SUFFIX.search(body)
        if suffix:
            body = body[: suffix.start()]
            regional_title, regional_author = _split_by(suffix.group("regional"))

        title, author = _split_by(body)
        book = _make_book(
            title, author, regional_title, regional_author, ParsingMethod.ALTERNATIVE_3, line
        )
        if book is not None:
            books.append(book)
    return books


def parse_prose(text: str, delimiter: str) -> list[ParsedBook]:
    """Best-effort reading of free text.

    Picks up a quoted title followed by "by <Capitalized Name>" anywhere in
    the text, and bulleted or numbered "X by Y" list lines.
    """
    books: list[ParsedBook] = []
    seen: set[tuple[str, str]] = set()

    def add(title: str | None, author: str | None, source: str) -> None:
        book = _make_book(title, author, None, None, ParsingMethod.FALLBACK, source)
        if book is None:
            return
        key = (book.english_title.lower(), book.english_author.lower())
        if key not in seen:
            seen.add(key)
            books.append(book)

    for line in text.splitlines():
        matched = False
        for pattern in QUOTED_BY:
            for match in pattern.finditer(line):
                add(match.group("title"), match.group("author"), line)
                matched = True
        if not matched:
            match = LIST_LINE.match(line)
            if match:
                title, author = _split_by(match.group("body"))
                add(title, author, line)

    return books


DEFAULT_STRATEGIES: tuple[Strategy, ...] = (
    parse_standard,
    parse_numbered,
    parse_labeled,
    parse_compact,
    parse_prose,
)
