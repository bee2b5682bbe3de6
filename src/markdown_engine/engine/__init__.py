"""Incremental controller and the deferred pass scheduler."""

from .controller import MarkdownStyler
from .scheduler import PassScheduler, PendingPass

__all__ = ["MarkdownStyler", "PassScheduler", "PendingPass"]
