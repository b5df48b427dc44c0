from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime

from meetsync.models.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    # "sub" claim from the identity provider; None for users created locally
    auth_subject = Column(String(255), nullable=True, unique=True, index=True)
    full_name = Column(String(255), nullable=True)
    avatar_url = Column(String(1024), nullable=True)
    time_zone = Column(String(64), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
