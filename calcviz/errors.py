"""Exception types raised by the chart pipeline."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a chart configuration value cannot be used.

    Covers degenerate or non-finite domains, invalid step counts, malformed
    color stops, unknown configuration keys and unknown toggles. Subclasses
    :class:`ValueError` so callers that validate generic input keep working.
    """


__all__ = ["ConfigurationError"]
