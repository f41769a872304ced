"""One-way git mirror synchronization."""

__version__ = "1.0.0"
