"""
Main entrypoint for crowdledger.

What it does:
- Loads runtime settings from `config/config.yaml` (or `$CROWDLEDGER_CONFIG`)
  plus environment overrides.
- Starts the Prometheus metrics server.
- Serves the JSON HTTP adapter with uvicorn.

With `OFFLINE_DEMO=1` it instead replays a small donation scenario against an
in-memory ledger, logs the project and donor listings, optionally exports
parquet files to `$EXPORT_DIR`, and exits.

Where it is used:
- `python -m crowdledger.main` or the `crowdledger` console script.
"""
import logging
import os

import uvicorn

from crowdledger.api.app import build_ledger, create_app
from crowdledger.config.loader import Settings, load_settings
from crowdledger.metrics.core import start_server_safe
from crowdledger.reports.listing import donor_lines, project_lines


def run_demo(settings: Settings) -> None:
    ledger = build_ledger(settings)
    decimals, unit = settings.display.decimals, settings.display.unit
    well = ledger.create_project("Well", "Build a well", "0xcreator")
    school = ledger.create_project("School", "Roof repairs", "0xcreator")
    ledger.donate(well, "0xalice", 10**18)
    ledger.donate(well, "0xbob", 5 * 10**17)
    ledger.donate(well, "0xalice", 25 * 10**16)
    ledger.donate(school, "0xbob", 10**17)

    for line in project_lines(ledger, decimals, unit):
        logging.info(f"project: {line}")
    for line in donor_lines(ledger, well, decimals, unit):
        logging.info(f"donor: {line}")

    export_dir = os.getenv("EXPORT_DIR")
    if export_dir:
        ledger.write_parquet(export_dir)
    logging.info("offline demo complete")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = load_settings()
    logging.info(
        f"Display unit: {settings.display.unit} ({settings.display.decimals} decimals), "
        f"strict titles: {settings.ledger.strict_titles}, events: {settings.events.enabled}"
    )

    if os.getenv("OFFLINE_DEMO", "0") == "1":
        logging.info("OFFLINE_DEMO=1: replaying demo donations, no server")
        run_demo(settings)
        return

    if settings.server.prometheus_port:
        start_server_safe(settings.server.prometheus_port, settings.server.host)

    app = create_app(settings)
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)


if __name__ == "__main__":
    main()
