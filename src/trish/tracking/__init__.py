"""Multi-repository issue tracking.

Provides:
- Settings loaded from .env
- Structured logging
- Concurrent aggregation of issues across repositories
- Issue filtering and selector resolution
- A label-based workflow driven through the tracker API
"""
