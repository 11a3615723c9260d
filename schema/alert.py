from pydantic import BaseModel, Field


class NotifyUsersRequest(BaseModel):
    location: str | None = None
    percentage: float | None = Field(None, allow_inf_nan=False)
    date: str | None = None
