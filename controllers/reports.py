from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import DatabaseError
from models.report import Report
from utils.state import State


def create_report(
    user_id: str,
    disaster_type: str,
    title: str,
    description: str,
    location: str,
    db: Session,
    contact_info: str = None,
    image_url: str = None,
) -> Report:
    """
    Persist a disaster report submitted by ``user_id``.

    Returns:
        Report: the stored row, with id and creation time filled in.
    """
    report = Report(
        user_id=user_id,
        disaster_type=disaster_type,
        title=title,
        description=description,
        location=location,
        contact_info=contact_info,
        image_url=image_url,
    )
    try:
        db.add(report)
        db.commit()
        db.refresh(report)
        State.logger.info(f"Stored report {report.id} from user {user_id}")
        return report
    except SQLAlchemyError as e:
        db.rollback()
        State.logger.error(f"Submit Report Error: {str(e)}")
        raise DatabaseError("Failed to submit report") from e


def list_reports(db: Session) -> List[Report]:
    """
    All reports, newest first.
    """
    try:
        return db.query(Report).order_by(Report.created_at.desc()).all()
    except SQLAlchemyError as e:
        db.rollback()
        State.logger.error(f"Fetch Reports Error: {str(e)}")
        raise DatabaseError("Failed to fetch reports") from e
