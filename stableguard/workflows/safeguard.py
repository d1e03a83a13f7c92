"""
Safeguard Trigger — scheduled call to the safeguard controller.

Invokes evaluateAndAct() on the controller through the ledger client, then
posts an INFO notice. Both steps are best effort: failures are logged and
the invocation still completes.
"""

from datetime import datetime, timezone

import structlog

from stableguard.errors import DeliveryFailed
from stableguard.workflows.context import InvocationContext

logger = structlog.get_logger(__name__)

# evaluateAndAct()
EVALUATE_AND_ACT_SELECTOR = bytes.fromhex("63bc1659")
SAFEGUARD_COMPLETE = "safeguard_evaluation_complete"


async def run_safeguard(ctx: InvocationContext) -> str:
    controller = ctx.settings.safeguard_controller_address
    try:
        await ctx.ledger.call_contract(controller, EVALUATE_AND_ACT_SELECTOR)
        logger.info("safeguard_evaluate_and_act_invoked", controller=controller)
    except Exception as e:
        logger.warning("safeguard_call_failed", controller=controller, error=str(e))

    payload = {
        "level": "INFO",
        "message": "Safeguard evaluation completed",
        "timestamp": datetime.fromtimestamp(ctx.clock(), tz=timezone.utc).isoformat(),
        "source": ctx.settings.alert_source,
    }
    try:
        result = await ctx.webhook.send(payload)
    except Exception as e:
        result = {"success": False, "detail": str(e)}
    if not result.get("success"):
        err = DeliveryFailed("safeguard notice not delivered", detail=result.get("detail", ""))
        logger.warning("safeguard_notice_delivery_failed", **err.to_dict())

    return SAFEGUARD_COMPLETE
