"""Payment processor webhook — confirms bookings once payment is captured."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_db, verify_payment_webhook
from staybook.auth.identity import CallerIdentity
from staybook.errors import InvalidTransitionError
from staybook.schemas.booking import PaymentWebhookEvent
from staybook.services import lifecycle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/webhooks", tags=["webhooks"])


@router.post("/payments")
async def payment_webhook(
    event: PaymentWebhookEvent,
    db: AsyncSession = Depends(get_db),
    system: CallerIdentity = Depends(verify_payment_webhook),
) -> dict[str, str]:
    """Receive a payment capture result.

    ``succeeded`` runs mark-paid as the system actor. ``failed`` leaves the
    booking untouched so its hold can lapse. Redelivered events for a booking
    that has already moved on are acknowledged and ignored.
    """
    logger.info(
        "Processing payment event for booking %s (ref=%s, status=%s)",
        event.booking_id,
        event.payment_reference,
        event.status,
    )

    if event.status == "failed":
        logger.warning("Payment failed for booking %s", event.booking_id)
        return {"status": "ignored"}

    try:
        await lifecycle.mark_paid(db, system, event.booking_id, event.payment_reference)
    except InvalidTransitionError as e:
        logger.info("Payment event for booking %s ignored: status is %s", event.booking_id, e.current_status)
        return {"status": "ignored"}

    return {"status": "processed"}
