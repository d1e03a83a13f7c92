"""
Ledger Event Endpoint.

POST /api/v1/events/report-updated

The host relays every ReportUpdated log here. The response is the
terminal status string of the invocation; decode and generation failures
are reported in that string, not as HTTP errors.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from stableguard.api.deps import get_context
from stableguard.workflows.context import InvocationContext
from stableguard.workflows.report_event import handle_report_event

router = APIRouter(prefix="/api/v1/events", tags=["events"])


class ReportUpdatedLog(BaseModel):
    topics: list[str] = Field(..., description="[event selector, indexed timestamp]")
    data: str = Field(..., description="ABI-encoded report tuple (hex)")
    tx_hash: str = Field(..., alias="txHash")
    block_number: Optional[int] = Field(default=None, alias="blockNumber")


class EventStatus(BaseModel):
    status: str


@router.post("/report-updated", response_model=EventStatus)
async def report_updated(
    log: ReportUpdatedLog,
    ctx: InvocationContext = Depends(get_context),
):
    status = await handle_report_event(
        ctx, log.topics, log.data, log.tx_hash, block_number=log.block_number
    )
    return EventStatus(status=status)
