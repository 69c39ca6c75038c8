"""Book recognition response parsing for shelfwise.

This module reads book records out of vision-model responses to the
cataloging prompt. Layout strategies are tried strictest first; each record
is scored and short fields are flagged rather than dropped.

Example usage:
    ```python
    from shelfwise.core.recognition import BookResponseParser

    parser = BookResponseParser()
    result = parser.parse_response(response_text)
    if result.success:
        records = result.to_records()
    else:
        print(result.error_message)
    ```
"""

from .models import (
    METHOD_PENALTIES,
    ConfidenceLevel,
    ParsedBook,
    ParseResult,
    ParsingMethod,
)
from .parser import (
    BookResponseParser,
    create_parser,
    parse_response,
)
from .prompts import (
    CATALOGING_PROMPT,
    DEFAULT_DELIMITER,
    build_cataloging_prompt,
)
from .strategies import (
    DEFAULT_STRATEGIES,
    Strategy,
    clean_field,
    parse_compact,
    parse_labeled,
    parse_numbered,
    parse_prose,
    parse_standard,
)

__all__ = [
    # Parser
    "BookResponseParser",
    "create_parser",
    "parse_response",
    # Models
    "ParsedBook",
    "ParseResult",
    "ParsingMethod",
    "ConfidenceLevel",
    "METHOD_PENALTIES",
    # Strategies
    "Strategy",
    "DEFAULT_STRATEGIES",
    "clean_field",
    "parse_standard",
    "parse_numbered",
    "parse_labeled",
    "parse_compact",
    "parse_prose",
    # Prompts
    "CATALOGING_PROMPT",
    "DEFAULT_DELIMITER",
    "build_cataloging_prompt",
]
