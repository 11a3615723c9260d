from fastapi import APIRouter, Depends, HTTPException

from controllers.reports import list_reports
from controllers.users import list_users
from core.auth import require_admin
from core.errors import InternalError
from database.database import get_db
from schema.report import serialize_report
from schema.user import serialize_user
from utils.state import State

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/reports")
async def get_all_reports(db=Depends(get_db)):
    try:
        return [serialize_report(report) for report in list_reports(db)]
    except HTTPException:
        raise
    except Exception as e:
        State.logger.error(f"Fetch Reports Error: {str(e)}")
        raise InternalError("Failed to fetch reports")


@router.get("/users")
async def get_all_users(db=Depends(get_db)):
    try:
        return [serialize_user(user) for user in list_users(db)]
    except HTTPException:
        raise
    except Exception as e:
        State.logger.error(f"Fetch Users Error: {str(e)}")
        raise InternalError("Failed to fetch users")
