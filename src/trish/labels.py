"""Shared workflow label conventions.

These labels encode the per-issue workflow on the remote tracker. They are kept
as stable, human-readable names (not machine IDs) so that:
- issues can be filtered on the tracker's own web UI
- other tools (and humans) can apply them by hand
"""

from __future__ import annotations

LABEL_ON_DECK = "on-deck"
LABEL_IN_PROGRESS = "in-progress"
LABEL_BLOCKED = "blocked"
LABEL_BUG = "bug"
