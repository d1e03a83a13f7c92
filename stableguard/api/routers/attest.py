"""
Ad hoc Text Endpoint.

POST /api/v1/attest/text   body: {"text": "..."}

The raw body is validated by the handler itself so that empty and invalid
bodies produce the documented plain-text error strings.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from stableguard.api.deps import get_context
from stableguard.workflows.adhoc import handle_text_request
from stableguard.workflows.context import InvocationContext

router = APIRouter(prefix="/api/v1/attest", tags=["attestation"])


@router.post("/text", response_class=PlainTextResponse)
async def attest_text(request: Request, ctx: InvocationContext = Depends(get_context)):
    body = await request.body()
    return PlainTextResponse(await handle_text_request(ctx, body))
