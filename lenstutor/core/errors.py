"""Error types shared by the optics core."""

from __future__ import annotations


class InvalidParameterError(ValueError):
    """Raised for a lens or canvas parameter that cannot produce meaningful geometry."""
