"""shelfwise: intent detection and book recognition for bookstore inventory chat."""

__version__ = "0.1.0"
