"""Ingestion layer.

This package turns raw platform output (registry dumps, attribute files)
into property events and value maps that the platform raw states consume.
"""

__all__: list[str] = []
