"""User model definitions."""

from sqlalchemy import Column, Integer, String

from backend.database import Base


class User(Base):
    """Front-desk or clinician login."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
