from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    disaster_type: str
    title: str
    description: str
    location: str
    contact_info: str | None = None
    image_url: str | None = None
    created_at: datetime


def serialize_report(report) -> dict:
    return ReportResponse.model_validate(report).model_dump(mode="json")
