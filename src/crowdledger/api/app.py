"""
JSON HTTP adapter over the ledger.

Caller identity is taken from a request header (`X-Identity` by default),
standing in for the connected wallet address. Amounts cross the boundary as
smallest-unit integers; `display` fields are rendered with the configured
unit for convenience only.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictInt, model_validator

from ..config.loader import Settings, load_settings
from ..events.bus import EventBus
from ..events.schema import DonationRejected
from ..ledger import InvalidAmountError, InvalidInputError, Ledger, NotFoundError
from ..ledger.ledger import now_ms
from ..units import from_display, to_display

log = logging.getLogger("crowdledger.api")


class CreateProjectRequest(BaseModel):
    title: str
    description: str = ""


class DonationRequest(BaseModel):
    amount: Optional[StrictInt] = None
    # Human amount in the display unit, e.g. "0.5"; converted exactly
    display_amount: Optional[str] = None

    @model_validator(mode="after")
    def exactly_one(self):
        if (self.amount is None) == (self.display_amount is None):
            raise ValueError("provide exactly one of amount or display_amount")
        return self


def build_ledger(settings: Settings) -> Ledger:
    publisher = None
    if settings.events.enabled:
        publisher = EventBus(
            redis_url=settings.events.redis_url,
            stream=settings.events.stream,
            dlq=settings.events.dlq,
            redis_enabled=settings.events.redis,
        )
    return Ledger(strict_titles=settings.ledger.strict_titles, publisher=publisher)


def create_app(settings: Optional[Settings] = None, ledger: Optional[Ledger] = None) -> FastAPI:
    settings = settings or load_settings()
    ledger = ledger or build_ledger(settings)
    decimals = settings.display.decimals
    unit = settings.display.unit

    app = FastAPI(title="crowdledger")
    app.state.settings = settings
    app.state.ledger = ledger

    def _amount(value: int) -> Dict[str, Any]:
        return {"amount": value, "display": f"{to_display(value, decimals)} {unit}"}

    def _identity(request: Request) -> str:
        who = request.headers.get(settings.server.identity_header, "").strip()
        if not who:
            raise HTTPException(status_code=401, detail=f"missing {settings.server.identity_header} header")
        return who

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": "not_found", "detail": str(exc)})

    @app.exception_handler(InvalidAmountError)
    async def _invalid_amount(_request: Request, exc: InvalidAmountError):
        return JSONResponse(status_code=422, content={"error": "invalid_amount", "detail": str(exc)})

    @app.exception_handler(InvalidInputError)
    async def _invalid_input(_request: Request, exc: InvalidInputError):
        return JSONResponse(status_code=422, content={"error": "invalid_input", "detail": str(exc)})

    @app.get("/health")
    def health():
        return {"status": "ok", "projects": ledger.get_project_count()}

    @app.post("/projects", status_code=201)
    def create_project(body: CreateProjectRequest, request: Request):
        creator = _identity(request)
        project_id = ledger.create_project(body.title, body.description, creator)
        return {"id": project_id}

    @app.get("/projects/count")
    def project_count():
        return {"count": ledger.get_project_count()}

    @app.get("/projects")
    def list_projects():
        return [
            {
                "id": s.id,
                "title": s.title,
                "description": s.description,
                "creator": s.creator,
                "donor_count": s.donor_count,
                "total_raised": _amount(s.total_raised),
            }
            for s in ledger.list_projects()
        ]

    @app.get("/projects/{project_id}")
    def get_project(project_id: int):
        p = ledger.get_project(project_id)
        return {
            "id": p.id,
            "title": p.title,
            "description": p.description,
            "creator": p.creator,
            "total_raised": _amount(ledger.get_total_raised(project_id)),
        }

    @app.post("/projects/{project_id}/donations", status_code=201)
    def donate(project_id: int, body: DonationRequest, request: Request):
        donor = _identity(request)
        amount = body.amount
        try:
            if amount is None:
                try:
                    amount = from_display(body.display_amount, decimals)
                except ValueError as e:
                    raise InvalidAmountError(body.display_amount) from e
            ledger.donate(project_id, donor, amount)
        except (NotFoundError, InvalidAmountError) as e:
            reason = "not_found" if isinstance(e, NotFoundError) else "invalid_amount"
            log.warning("donation rejected project=%s donor=%s reason=%s", project_id, donor, reason)
            _report_rejection(project_id, donor, amount, reason)
            raise
        return {
            "project_id": project_id,
            "donor": donor,
            "donor_total": _amount(ledger.get_donation_amount(project_id, donor)),
        }

    @app.get("/projects/{project_id}/donors")
    def donors(project_id: int):
        return [
            {"position": d.position, "donor": d.donor, **_amount(d.amount)}
            for d in ledger.donor_breakdown(project_id)
        ]

    @app.get("/projects/{project_id}/donors/{donor}")
    def donation_amount(project_id: int, donor: str):
        return {"project_id": project_id, "donor": donor, **_amount(ledger.get_donation_amount(project_id, donor))}

    def _report_rejection(project_id: int, donor: str, amount: Any, reason: str) -> None:
        if ledger.publisher is None:
            return
        evt = DonationRejected(
            ts=now_ms(),
            project_id=project_id,
            actor=donor,
            sequence=ledger.next_sequence(),
            reason=reason,
            amount=amount if isinstance(amount, int) else None,
        )
        try:
            ledger.publisher(evt)
        except Exception:
            log.exception("failed to publish donation_rejected for project %d", project_id)

    return app
