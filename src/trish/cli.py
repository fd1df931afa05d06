"""Console entrypoint.

The CLI itself is implemented in `trish.tracking.main`.
"""

from __future__ import annotations

from trish.tracking.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
