"""Edit session: working copy, live totals and save lifecycle"""

from sales_reconciliation.session.controller import (
    DECLARED_FIELDS,
    DERIVED_FIELDS,
    REAL_FIELDS,
    EditSession,
)
from sales_reconciliation.session.lifecycle import (
    ALLOWED_TRANSITIONS,
    can_transition,
    next_status,
)

__all__ = [
    "EditSession",
    "REAL_FIELDS",
    "DECLARED_FIELDS",
    "DERIVED_FIELDS",
    "ALLOWED_TRANSITIONS",
    "can_transition",
    "next_status",
]
