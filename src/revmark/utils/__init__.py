"""Utility functions used across the project."""

from .normalize import collapse_whitespace, comparison_key, dense_ratio, split_words

__all__ = [
    "collapse_whitespace",
    "comparison_key",
    "dense_ratio",
    "split_words",
]
