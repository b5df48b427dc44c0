import logging
from typing import Optional

from pydantic import validate_email
from pydantic_core import PydanticCustomError
from sqlalchemy.orm import Session

from meetsync.models.user import User
from meetsync.services.errors import ValidationError
from meetsync.services.gateway import gateway

logger = logging.getLogger(__name__)


def normalize_email(field: str, value: Optional[str]) -> str:
    """
    Validate email syntax and return it lower-cased.
    Raises ValidationError(field) when missing or malformed.
    """
    if not value or not value.strip():
        raise ValidationError(field, f"{field} is required")
    try:
        _, email = validate_email(value.strip())
    except PydanticCustomError as e:
        raise ValidationError(field, f"{field} is not a valid email address") from e
    return email.lower()


def create_user(
    db: Session,
    *,
    email: str,
    full_name: Optional[str] = None,
    auth_subject: Optional[str] = None,
) -> User:
    email = normalize_email("email", email)

    with gateway(db, "create user"):
        if db.query(User).filter_by(email=email).first() is not None:
            raise ValidationError("email", "email is already registered")

        user = User(email=email, full_name=full_name, auth_subject=auth_subject)
        db.add(user)
        db.commit()
        db.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


def resolve_identity(
    db: Session,
    *,
    subject: str,
    email: str,
    full_name: Optional[str] = None,
) -> User:
    """
    Map verified identity-provider claims onto a local user.

    Looks the user up by provider subject first, then by email (linking the
    subject on first sight), and creates the user when neither matches.
    """
    email = normalize_email("email", email)

    with gateway(db, "resolve identity"):
        user = db.query(User).filter_by(auth_subject=subject).first()
        if user is None:
            user = db.query(User).filter_by(email=email).first()
            if user is not None and user.auth_subject not in (None, subject):
                logger.warning("Email %s already linked to another identity", email)
                raise ValidationError("email", "email is linked to another account")

        if user is None:
            user = User(email=email, full_name=full_name, auth_subject=subject)
            db.add(user)
            db.commit()
            db.refresh(user)
            logger.info("Registered user %s from identity provider", user.id)
        elif user.auth_subject is None:
            user.auth_subject = subject
            db.commit()
            db.refresh(user)
            logger.info("Linked user %s to identity provider", user.id)

    return user


def update_profile(
    db: Session,
    user: User,
    *,
    full_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
    time_zone: Optional[str] = None,
) -> User:
    """Apply the given (non-None) profile fields."""
    if full_name is not None:
        user.full_name = full_name
    if avatar_url is not None:
        user.avatar_url = avatar_url
    if time_zone is not None:
        user.time_zone = time_zone

    with gateway(db, "update profile"):
        db.commit()
        db.refresh(user)
    return user
