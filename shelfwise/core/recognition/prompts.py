"""Prompt text sent to the vision model when cataloging books from a photo.

The requested layout is exactly what ``parse_standard`` reads, so responses
that follow the instructions parse with the highest confidence.
"""

from __future__ import annotations

DEFAULT_DELIMITER = "##**##"

CATALOGING_PROMPT = """\
You are a careful librarian cataloging a bookstore's stock from a photo.

List every book whose title and author you can read clearly. Write each book \
in this exact layout, fenced by {delimiter} lines:

{delimiter}
I. 1. [English Title]
   2. [English Author]
   3. [Kannada Title if visible, otherwise leave blank]
   4. [Kannada Author if visible, otherwise leave blank]
{delimiter}

Rules:
- Skip any book whose title or author you cannot read
- Keep the numbering and the {delimiter} fences exactly as shown
- Write Kannada titles and names in Kannada script
- Leave lines 3 and 4 blank when no Kannada text is printed

Which books can you identify in this photo?"""


def build_cataloging_prompt(delimiter: str = DEFAULT_DELIMITER) -> str:
    """Render the cataloging prompt for a given block delimiter.

    Args:
        delimiter: Fence line the parser splits responses on

    Returns:
        Prompt text ready to send alongside the image
    """
    return CATALOGING_PROMPT.format(delimiter=delimiter)
