# app/models/user_model.py

from sqlalchemy import Column, DateTime, String

from app.base.database import Base


class UserProfileModel(Base):
    """Public profile mirrored from the identity service."""

    __tablename__ = "user_profiles"

    user_id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(String, nullable=False, index=True)  # trainee, interviewer, admin
    status = Column(String, nullable=False, default="approved")  # pending, approved, rejected
    updated_at = Column(DateTime, nullable=False)
