import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from claimy.claimy_error import (
    ClaimyError,
    ConflictError,
    ExternalGatewayError,
    NotFoundError,
    ValidationError,
)
from claimy.offer import Offer
from claimy.records import ClaimRecord, OfferRecord, QueueEntryRecord, Record
from claimy.scheduler import Scheduler

_LOGGER = logging.getLogger(__name__)

_STATUS_CODES = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    ConflictError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ExternalGatewayError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


class HolderRequest(Record):
    holder_id: str
    holder_name: str = ""


class DurationRequest(HolderRequest):
    duration: Optional[str] = None
    """HH:MM. Defaults to 2:30 when omitted"""


class AcceptRequest(Record):
    holder_id: str
    resource_code: Optional[str] = None


class EnqueueResponse(Record):
    queue_entry: QueueEntryRecord
    position: int


class DequeueResponse(Record):
    queue_entry: Optional[QueueEntryRecord] = None
    withdrawn_offer: Optional[OfferRecord] = None


class QueueResponse(Record):
    resource_code: str
    resource_name: str
    tier: str
    claim: Optional[ClaimRecord] = None
    queue_entries: list[QueueEntryRecord]
    offer: Optional[OfferRecord] = None
    text: str


class StateResponse(BaseModel):
    text: str
    claims: list[ClaimRecord]


def add_exception_handlers(fastapi: FastAPI):
    """Map domain errors onto HTTP status codes"""

    @fastapi.exception_handler(ClaimyError)
    async def claimy_error_handler(request: Request, exc: ClaimyError):
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        for error_type, code in _STATUS_CODES.items():
            if isinstance(exc, error_type):
                status_code = code
                break
        _LOGGER.debug(f"{request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def add_endpoints(fastapi: FastAPI, scheduler: Scheduler):
    router = APIRouter(prefix="/respawns")
    add_respawn_endpoints(router, scheduler)
    fastapi.include_router(router)

    @fastapi.post("/offers/accept")
    async def accept_offer(request: AcceptRequest) -> ClaimRecord:
        claim = await scheduler.accept_offer(request.holder_id, request.resource_code)
        return ClaimRecord.from_claim(claim, None)

    @fastapi.get("/state")
    async def get_state() -> StateResponse:
        return StateResponse(
            text=scheduler.render_state(),
            claims=[ClaimRecord.from_claim(c, None) for c in scheduler.list_claims()],
        )


def add_respawn_endpoints(router: APIRouter, scheduler: Scheduler):

    @router.post("/{code}/claim")
    async def claim(code: str, request: DurationRequest) -> ClaimRecord:
        claim = await scheduler.claim(
            request.holder_id, request.holder_name, code, request.duration
        )
        return ClaimRecord.from_claim(claim, None)

    @router.post("/{code}/release")
    async def release(code: str, request: HolderRequest) -> ClaimRecord:
        claim = await scheduler.release(request.holder_id, code)
        return ClaimRecord.from_claim(claim, None)

    @router.post("/{code}/queue")
    async def enqueue(code: str, request: DurationRequest) -> EnqueueResponse:
        entry = await scheduler.enqueue(
            request.holder_id, request.holder_name, code, request.duration
        )
        return EnqueueResponse(
            queue_entry=QueueEntryRecord.from_entry(entry),
            position=scheduler.queue_position(entry.holder_id, entry.resource_code),
        )

    @router.post("/{code}/dequeue")
    async def dequeue(code: str, request: HolderRequest) -> DequeueResponse:
        removed = await scheduler.dequeue(request.holder_id, code)
        if isinstance(removed, Offer):
            return DequeueResponse(withdrawn_offer=OfferRecord.from_offer(removed))
        return DequeueResponse(queue_entry=QueueEntryRecord.from_entry(removed))

    @router.get("/{code}/queue")
    async def get_queue(code: str) -> QueueResponse:
        queue_status = scheduler.queue_status(code)
        respawn = queue_status.respawn
        return QueueResponse(
            resource_code=respawn.code,
            resource_name=respawn.name,
            tier=respawn.tier,
            claim=(
                ClaimRecord.from_claim(queue_status.claim, None)
                if queue_status.claim
                else None
            ),
            queue_entries=[
                QueueEntryRecord.from_entry(e) for e in queue_status.entries
            ],
            offer=(
                OfferRecord.from_offer(queue_status.offer) if queue_status.offer else None
            ),
            text=scheduler.queue_status_text(code),
        )
