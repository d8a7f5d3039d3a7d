"""
resource_toolkit.core package

- exceptions: error taxonomy
- results:    batch step payloads and mismatch tokens
- memory:     operator resolution memory
- jobs:       TTL job store, batch cursor
- pipeline:   caller-side step loop

This __init__ intentionally exports NOTHING to avoid circular imports.
"""

__all__ = []
