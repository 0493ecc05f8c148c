"""AI relay answering questions about a portfolio owner."""

__version__ = "0.1.0"
