"""trish - TRack ISsues Helpfully.

Tracks issues across many GitHub repositories and drives a small label-based
workflow (backlog, on-deck, in-progress, closed, plus a "blocked" flag):
- configuration loaded from `.env`
- structured logging
- concurrent, all-or-nothing aggregation of issues across repositories
- issue selectors (`42` or `org/repo/42`) and workflow transitions
"""

__version__ = "0.1.0"

from trish.tracking.config import TrishSettings

__all__ = ["__version__", "TrishSettings"]
