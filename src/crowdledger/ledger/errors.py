"""Caller-correctable ledger failures.

Every error raised by the ledger derives from LedgerError and means the
operation had no effect.
"""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base class for ledger failures."""


class NotFoundError(LedgerError):
    def __init__(self, project_id: Any):
        super().__init__(f"project {project_id!r} does not exist")
        self.project_id = project_id


class InvalidAmountError(LedgerError):
    def __init__(self, amount: Any):
        super().__init__(f"donation amount must be a positive integer, got {amount!r}")
        self.amount = amount


class InvalidInputError(LedgerError):
    def __init__(self, field: str, reason: str):
        super().__init__(f"invalid {field}: {reason}")
        self.field = field
        self.reason = reason
