"""Command-line interface for collecting and querying weather history."""
