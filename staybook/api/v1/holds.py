"""Hold sweep endpoint, called by an external scheduler."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from staybook.api.deps import get_db, verify_cron_secret
from staybook.schemas.booking import HoldSweepResponse
from staybook.services.expiry import expire_stale_holds

router = APIRouter(prefix="/api/v1/holds", tags=["holds"])


@router.post(
    "/expire",
    response_model=HoldSweepResponse,
    summary="Expire lapsed payment holds",
    dependencies=[Depends(verify_cron_secret)],
)
async def expire_holds(db: AsyncSession = Depends(get_db)) -> HoldSweepResponse:
    """Expire every unpaid booking whose hold has lapsed and release its dates."""
    expired = await expire_stale_holds(db)
    return HoldSweepResponse(expired_count=len(expired), booking_ids=expired)
