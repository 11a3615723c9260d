import os

from fastapi import APIRouter, Depends, HTTPException, Request

from controllers.notification import notify_users
from core.auth import jwt_bearer, require_admin
from core.errors import InternalError
from core.sms import get_sms_sender
from database.database import get_db
from schema.alert import NotifyUsersRequest
from utils.state import State

router = APIRouter()


async def alert_access(request: Request) -> None:
    """Public unless ``ALERTS_REQUIRE_ADMIN`` is switched on."""
    if os.getenv("ALERTS_REQUIRE_ADMIN", "0").lower() in ("1", "true", "yes"):
        require_admin(await jwt_bearer(request))


@router.post("/notify-users", dependencies=[Depends(alert_access)])
async def notify_users_by_location(
    req: NotifyUsersRequest,
    db=Depends(get_db),
    sms_sender=Depends(get_sms_sender),
):
    try:
        result = await notify_users(
            location=req.location,
            percentage=req.percentage,
            date=req.date,
            db=db,
            sms_sender=sms_sender,
        )
        return {
            "message": "SMS alerts sent successfully",
            "usersNotified": result.matched,
        }
    except HTTPException:
        raise
    except Exception as e:
        State.logger.error(f"Notify Error: {str(e)}")
        raise InternalError("Internal server error")
