"""Hifz tracker: memorization progress, peer revision sessions and lessons."""

__version__ = "0.1.0"
