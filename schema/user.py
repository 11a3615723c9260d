from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserResponse(BaseModel):
    """Public view of a user row; the password hash is never exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    profile_image_url: str | None = None
    phone_number: str | None = None
    role: str
    location: str
    created_at: datetime


def serialize_user(user) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")
