import datetime
import uuid

from sqlalchemy import Column, DateTime, String, Text

from database.database import Base


class Report(Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    # Reference only: reports are kept as submitted even if the user changes.
    user_id = Column(String, nullable=False, index=True)
    disaster_type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(String, nullable=False)
    contact_info = Column(String, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.datetime.now(datetime.UTC),
    )
