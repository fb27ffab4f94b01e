"""Administrators who approve or reject registrations."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from voter_onboarding.database import Base


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
