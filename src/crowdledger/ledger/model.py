from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Project:
    id: int
    title: str
    description: str
    creator: str


@dataclass
class DonationRecord:
    project_id: int
    donor: str
    amount: int


@dataclass(frozen=True)
class ProjectSummary:
    id: int
    title: str
    description: str
    creator: str
    donor_count: int
    total_raised: int


@dataclass(frozen=True)
class DonorShare:
    position: int  # 1-based, first-donation order
    donor: str
    amount: int


@dataclass
class LedgerSnapshot:
    """Point-in-time copy of the whole ledger, safe to read without the lock."""

    projects: List[Project] = field(default_factory=list)
    donations: List[DonationRecord] = field(default_factory=list)
    totals: Dict[int, int] = field(default_factory=dict)

    def donors_of(self, project_id: int) -> Tuple[str, ...]:
        return tuple(d.donor for d in self.donations if d.project_id == project_id)
