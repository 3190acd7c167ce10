"""Prometheus metrics for the ledger and its event bus."""
