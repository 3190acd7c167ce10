from __future__ import annotations

from typing import Optional
import os
from prometheus_client import Counter, Gauge, REGISTRY

_projects_created: Optional[Counter] = None
_donations_total: Optional[Counter] = None
_donated_amount_total: Optional[Counter] = None
_projects_gauge: Optional[Gauge] = None


class _NoOp:
    def labels(self, *args, **kwargs):
        return self
    def inc(self, *args, **kwargs):
        return None
    def set(self, *args, **kwargs):
        return None


def _find_existing(name: str):
    # prometheus_client strips the _total suffix from counter names
    try:
        coll = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
        if coll is not None:
            return coll
        for coll in list(getattr(REGISTRY, "_collector_to_names", {}).keys()):  # type: ignore[attr-defined]
            if getattr(coll, "_name", None) in (name, name.removesuffix("_total")):
                return coll
    except Exception:
        pass
    return None


def _safe_counter(name: str, doc: str, labelnames=()):
    if os.getenv("DISABLE_PROMETHEUS", "0") == "1":
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        # Already registered (module reloaded or second getter)
        return _find_existing(name) or _NoOp()


def _safe_gauge(name: str, doc: str, labelnames=()):
    if os.getenv("DISABLE_PROMETHEUS", "0") == "1":
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        return _find_existing(name) or _NoOp()


def get_projects_created_total():
    global _projects_created
    if _projects_created is None:
        _projects_created = _safe_counter("ledger_projects_created_total", "Projects created")
    return _projects_created


def get_donations_total():
    global _donations_total
    if _donations_total is None:
        _donations_total = _safe_counter("ledger_donations_total", "Donation attempts by result", ["result"])
    return _donations_total


def get_donated_amount_total():
    """Accepted volume in smallest units.

    Prometheus samples are float64, so at wei scale this is approximate; the
    ledger itself is the exact source of totals.
    """
    global _donated_amount_total
    if _donated_amount_total is None:
        _donated_amount_total = _safe_counter(
            "ledger_donated_amount_total", "Accepted donation volume in smallest currency units (approximate, float64)"
        )
    return _donated_amount_total


def get_projects_gauge():
    global _projects_gauge
    if _projects_gauge is None:
        _projects_gauge = _safe_gauge("ledger_projects", "Projects currently tracked by the ledger")
    return _projects_gauge


def record_donation_result(result: str) -> None:
    """Count a donation attempt; result is accepted|not_found|invalid_amount."""
    try:
        get_donations_total().labels(result).inc()
    except Exception:
        pass
