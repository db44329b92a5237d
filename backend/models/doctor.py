"""Doctor model definitions."""

from sqlalchemy import Column, Integer, String

from backend.database import Base


class Doctor(Base):
    """A provider with a column on the day schedule."""
    __tablename__ = "doctors"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(150), unique=True, nullable=False)
