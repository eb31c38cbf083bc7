"""
Ledgerman Services.

- allocation: pure FIFO allocation engine
- reconciliation: coordinator (read → allocate → atomic apply → notify)
"""

from ledgerman.services.allocation import allocate, group_by_code, validate_line_items

__all__ = [
    "allocate",
    "group_by_code",
    "validate_line_items",
]
