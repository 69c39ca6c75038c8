"""Core components for shelfwise."""
