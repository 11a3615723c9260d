from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from controllers.reports import create_report
from core.auth import jwt_bearer
from core.errors import InternalError, ValidationError
from core.media import MediaUploadError, get_media_store, store_upload
from database.database import get_db
from schema.report import serialize_report
from utils.state import State

router = APIRouter()


@router.post("", status_code=201)
async def submit_report(
    disaster_type: str | None = Form(None),
    title: str | None = Form(None),
    description: str | None = Form(None),
    location: str | None = Form(None),
    contact_info: str | None = Form(None),
    image: UploadFile | None = File(None),
    claims: dict = Depends(jwt_bearer),
    db=Depends(get_db),
    media_store=Depends(get_media_store),
):
    if not disaster_type or not title or not description or not location:
        raise ValidationError("Missing required fields")
    try:
        image_url = await store_upload(media_store, image)
        report = create_report(
            user_id=claims["id"],
            disaster_type=disaster_type,
            title=title,
            description=description,
            location=location,
            contact_info=contact_info or None,
            image_url=image_url,
            db=db,
        )
        return {"message": "Report submitted successfully", "report": serialize_report(report)}
    except HTTPException:
        raise
    except MediaUploadError as e:
        State.logger.error(f"Report image upload failed: {str(e)}")
        raise InternalError("Failed to submit report")
    except Exception as e:
        State.logger.error(f"Submit Report Error: {str(e)}")
        raise InternalError("Failed to submit report")
