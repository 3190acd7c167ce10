"""Plain-text listings of ledger state: project cards and donor lists."""

from __future__ import annotations

from typing import List

from ..ledger import Ledger
from ..units import to_display


def project_lines(ledger: Ledger, decimals: int = 18, unit: str = "ETH") -> List[str]:
    """One line per project in id order: "<id>- <title>: <description> (<total> <unit>)"."""
    lines: List[str] = []
    for s in ledger.list_projects():
        lines.append(f"{s.id}- {s.title}: {s.description} ({to_display(s.total_raised, decimals)} {unit})")
    return lines


def donor_lines(ledger: Ledger, project_id: int, decimals: int = 18, unit: str = "ETH") -> List[str]:
    """One line per donor in first-donation order: "<n>- <donor> : <amount> <unit>"."""
    return [
        f"{d.position}- {d.donor} : {to_display(d.amount, decimals)} {unit}"
        for d in ledger.donor_breakdown(project_id)
    ]
