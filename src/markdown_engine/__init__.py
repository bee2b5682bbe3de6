"""Incremental inline markdown styling engine."""

__all__ = [
    "adapters",
    "buffer",
    "codeblocks",
    "config",
    "engine",
    "patterns",
    "runtime",
    "styling",
]

__version__ = "0.1.0"
