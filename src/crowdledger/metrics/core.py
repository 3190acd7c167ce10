"""Prometheus exporter for crowdledger.

The ledger process exposes its counters on a separate port. A port that is
already taken only disables the exporter; the ledger keeps serving.
"""

import logging
from typing import Optional

from prometheus_client import start_http_server

log = logging.getLogger("crowdledger.metrics")


def start_server_safe(port: int, addr: str = "0.0.0.0") -> Optional[int]:
    """Start the exporter on addr:port; return the port, or None if binding failed."""
    try:
        start_http_server(port, addr=addr)
    except OSError as e:
        log.warning(f"metrics exporter disabled, cannot bind {addr}:{port}: {e}")
        return None
    log.info(f"metrics exporter listening on {addr}:{port}")
    return port
