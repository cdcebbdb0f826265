"""Contract vs. source chain header consistency."""

from .checker import ConsistencyChecker

__all__ = ["ConsistencyChecker"]
