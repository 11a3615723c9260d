from typing import List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import DatabaseError, ValidationError
from models.user import User
from utils.state import State


def _handle_db_error(db: Session, action: str, e: Exception):
    db.rollback()
    State.logger.error(f"An error occured while {action}: {str(e)}")
    raise DatabaseError(f"An error occured while {action}") from e


def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def get_user_by_email(email: str, db: Session) -> Optional[User]:
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        _handle_db_error(db, "looking up user by email", e)


def get_user_by_id(user_id: str, db: Session) -> Optional[User]:
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        _handle_db_error(db, "looking up user by id", e)


def create_user(
    email: str,
    hashed_password: str,
    name: str,
    location: str,
    db: Session,
    phone_number: str = None,
    role: str = "customer",
    profile_image_url: str = None,
) -> User:
    """
    Insert a new user row.

    The email pre-check done by registration can race with a concurrent
    registration; the unique constraint on ``users.email`` settles it, and a
    violation is reported as the same duplicate-email error.
    """
    user = User(
        email=email,
        password=hashed_password,
        name=name,
        location=location,
        phone_number=phone_number,
        role=role,
        profile_image_url=profile_image_url,
    )
    try:
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        State.logger.error(f"Duplicate registration for {email}: {str(e)}")
        raise ValidationError("Email already registered") from e
    except SQLAlchemyError as e:
        _handle_db_error(db, "creating user", e)


def update_user(user: User, updates: dict, db: Session) -> User:
    try:
        for field, value in updates.items():
            setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        raise ValidationError("Email already in use") from e
    except SQLAlchemyError as e:
        _handle_db_error(db, "updating user", e)


def update_password(user_id: str, hashed_password: str, db: Session) -> bool:
    """Store a new password hash. Returns ``False`` if the user does not exist."""
    try:
        updated = (
            db.query(User)
            .filter(User.id == user_id)
            .update({User.password: hashed_password}, synchronize_session=False)
        )
        db.commit()
        return updated > 0
    except SQLAlchemyError as e:
        _handle_db_error(db, "updating password", e)


def find_users_by_location(location: str, db: Session) -> List[User]:
    """Users whose stored location contains ``location``, ignoring case."""
    pattern = f"%{escape_like(location)}%"
    try:
        return (
            db.query(User)
            .filter(User.location.ilike(pattern, escape="\\"))
            .all()
        )
    except SQLAlchemyError as e:
        _handle_db_error(db, "looking up users by location", e)


def list_users(db: Session) -> List[User]:
    try:
        return db.query(User).order_by(User.created_at.desc()).all()
    except SQLAlchemyError as e:
        _handle_db_error(db, "fetching users", e)


def delete_user(user: User, db: Session) -> None:
    try:
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        _handle_db_error(db, "deleting user", e)
