"""Crowdfunding ledger: projects, donors and cumulative donation amounts."""

__version__ = "0.1.0"
