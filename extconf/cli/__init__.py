"""Command-line interface for extconf."""
