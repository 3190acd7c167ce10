"""Ledger package.

Public API:
- Ledger: projects, cumulative per-donor donations, donor order, totals, parquet export.
- NotFoundError / InvalidAmountError / InvalidInputError: caller-correctable failures.
"""

from .errors import InvalidAmountError, InvalidInputError, LedgerError, NotFoundError
from .ledger import Ledger  # re-export
from .model import DonationRecord, DonorShare, LedgerSnapshot, Project, ProjectSummary

__all__ = [
    "DonationRecord",
    "DonorShare",
    "InvalidAmountError",
    "InvalidInputError",
    "Ledger",
    "LedgerError",
    "LedgerSnapshot",
    "NotFoundError",
    "Project",
    "ProjectSummary",
]
