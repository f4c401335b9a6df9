"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

# Monthly rates are always divided by 30, whatever the calendar length.
DAYS_PER_MONTH_DIVISOR = Decimal(30)

DEFAULT_CGST_RATE = Decimal(9)
DEFAULT_SGST_RATE = Decimal(9)

SUPERVISOR_MARKER = "supervisor"
VALID_SESSION_COUNTS = frozenset({0, 1, 2})
