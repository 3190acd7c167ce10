from __future__ import annotations

from typing import Callable, Dict, List, Optional, Tuple
import logging
import os
import threading
import time

import pandas as pd

from .errors import InvalidAmountError, InvalidInputError, NotFoundError
from .model import DonationRecord, DonorShare, LedgerSnapshot, Project, ProjectSummary
from ..events.schema import BaseEvent, DonationRecorded, ProjectCreated
from ..metrics.ledger import (
    get_donated_amount_total,
    get_projects_created_total,
    get_projects_gauge,
    record_donation_result,
)

logger = logging.getLogger("crowdledger.ledger")

Publisher = Callable[[BaseEvent], None]


def now_ms() -> int:
    return int(time.time() * 1000)


class Ledger:
    """Authoritative store of projects and donations.

    create_project and donate are the only mutators. Every operation runs
    under one lock so id assignment, record creation, donor-order append and
    total update are observed together or not at all. Events are numbered
    under the lock (so `sequence` follows commit order) and handed to the
    publisher after it is released; consumers reorder by `sequence`.
    """

    def __init__(self, strict_titles: bool = False, publisher: Optional[Publisher] = None):
        self.strict_titles = bool(strict_titles)
        self.publisher = publisher
        self._lock = threading.RLock()
        self._projects: List[Project] = []
        # project_id -> donor -> record; dicts keep first-insertion order
        self._donations: Dict[int, Dict[str, DonationRecord]] = {}
        self._totals: Dict[int, int] = {}
        # commit order shared by every event this ledger emits
        self._sequence = 0
        self._projects_created = get_projects_created_total()
        self._donated_amount = get_donated_amount_total()
        self._projects_gauge = get_projects_gauge()

    # ---- commands ----

    def create_project(self, title: str, description: str, creator: str) -> int:
        if self.strict_titles and not str(title or "").strip():
            raise InvalidInputError("title", "must not be empty")
        with self._lock:
            project_id = len(self._projects) + 1
            project = Project(id=project_id, title=title, description=description, creator=creator)
            self._projects.append(project)
            self._donations[project_id] = {}
            self._totals[project_id] = 0
            count = len(self._projects)
            seq = self._bump_sequence()
        self._projects_created.inc()
        self._projects_gauge.set(count)
        logger.info("project created id=%d creator=%s", project_id, creator)
        self._emit(
            ProjectCreated(
                ts=now_ms(),
                project_id=project_id,
                actor=creator,
                sequence=seq,
                title=title,
                description=description,
            )
        )
        return project_id

    def donate(self, project_id: int, donor: str, amount: int) -> None:
        # bool is an int subclass; True must not count as a donation of 1
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            record_donation_result("invalid_amount")
            raise InvalidAmountError(amount)
        with self._lock:
            records = self._records(project_id, result="not_found")
            record = records.get(donor)
            first = record is None
            if first:
                record = DonationRecord(project_id=project_id, donor=donor, amount=0)
                records[donor] = record
            record.amount += amount
            self._totals[project_id] += amount
            donor_amount = record.amount
            total = self._totals[project_id]
            seq = self._bump_sequence()
        record_donation_result("accepted")
        self._donated_amount.inc(amount)
        logger.info("donation recorded project=%d donor=%s amount=%d total=%d", project_id, donor, amount, total)
        self._emit(
            DonationRecorded(
                ts=now_ms(),
                project_id=project_id,
                actor=donor,
                sequence=seq,
                amount=amount,
                donor_amount=donor_amount,
                total_raised=total,
                first_donation=first,
            )
        )

    def next_sequence(self) -> int:
        """Reserve a sequence number for an event produced outside a command."""
        with self._lock:
            return self._bump_sequence()

    # ---- queries ----

    def get_project(self, project_id: int) -> Project:
        with self._lock:
            return self._project(project_id)

    def get_project_count(self) -> int:
        with self._lock:
            return len(self._projects)

    def get_donors(self, project_id: int) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._records(project_id))

    def get_donation_amount(self, project_id: int, donor: str) -> int:
        with self._lock:
            record = self._records(project_id).get(donor)
            return record.amount if record is not None else 0

    def get_total_raised(self, project_id: int) -> int:
        with self._lock:
            self._project(project_id)
            return self._totals[project_id]

    def list_projects(self) -> List[ProjectSummary]:
        """All projects in id order with their donor count and total raised."""
        with self._lock:
            return [
                ProjectSummary(
                    id=p.id,
                    title=p.title,
                    description=p.description,
                    creator=p.creator,
                    donor_count=len(self._donations[p.id]),
                    total_raised=self._totals[p.id],
                )
                for p in self._projects
            ]

    def donor_breakdown(self, project_id: int) -> List[DonorShare]:
        with self._lock:
            records = self._records(project_id)
            return [DonorShare(position=i, donor=r.donor, amount=r.amount) for i, r in enumerate(records.values(), start=1)]

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            donations = [
                DonationRecord(project_id=r.project_id, donor=r.donor, amount=r.amount)
                for p in self._projects
                for r in self._donations[p.id].values()
            ]
            return LedgerSnapshot(projects=list(self._projects), donations=donations, totals=dict(self._totals))

    def write_parquet(self, base_dir: str = "data") -> None:
        snap = self.snapshot()
        os.makedirs(base_dir, exist_ok=True)
        projects_df = pd.DataFrame(
            [{**p.__dict__, "total_raised": snap.totals[p.id]} for p in snap.projects],
            columns=["id", "title", "description", "creator", "total_raised"],
        )
        donations_df = pd.DataFrame([d.__dict__ for d in snap.donations], columns=["project_id", "donor", "amount"])
        projects_df.to_parquet(os.path.join(base_dir, "projects.parquet"))
        donations_df.to_parquet(os.path.join(base_dir, "donations.parquet"))
        logger.info("ledger exported to %s (%d projects, %d donations)", base_dir, len(projects_df), len(donations_df))

    # ---- internals (caller holds the lock) ----

    def _bump_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _project(self, project_id: int) -> Project:
        if isinstance(project_id, bool) or not isinstance(project_id, int) or not 1 <= project_id <= len(self._projects):
            raise NotFoundError(project_id)
        return self._projects[project_id - 1]

    def _records(self, project_id: int, result: Optional[str] = None) -> Dict[str, DonationRecord]:
        try:
            self._project(project_id)
        except NotFoundError:
            if result is not None:
                record_donation_result(result)
            raise
        return self._donations[project_id]

    def _emit(self, event: BaseEvent) -> None:
        if self.publisher is None:
            return
        try:
            self.publisher(event)
        except Exception:
            # The command already committed; a broken publisher must not undo that
            logger.exception("failed to publish %s for project %d", event.event_type, event.project_id)
