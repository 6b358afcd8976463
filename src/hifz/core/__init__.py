"""Core domain logic.

Modules:
- models: entity dataclasses and fixed tags
- store: in-memory store with id sequences and cascade deletes
- stats: statistics computed over the store
- juz: Surah to Juz lookup table and completed-juz helpers
- seed: sample data for demos and the CLI
"""

__all__ = [
    "models",
    "store",
    "stats",
    "juz",
    "seed",
]
