"""CLI commands for the git mirror sync tool."""
