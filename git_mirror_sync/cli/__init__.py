"""Command-line interface for the git mirror sync tool."""
