# app/services/user_directory_service.py

import logging
from datetime import datetime
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from app.base.errors import ValidationError
from app.base.models import InterviewerIdentity, ProfileStatus, UserProfileUpsert, UserRole
from app.models.user_model import UserProfileModel

logger = logging.getLogger("interview_scheduler.user_directory")


class UserDirectory:
    """Public profiles mirrored from the identity service."""

    def upsert(self, db: Session, user_id: str, req: UserProfileUpsert, at: datetime) -> UserProfileModel:
        profile = db.get(UserProfileModel, user_id)
        if profile is None:
            profile = UserProfileModel(user_id=user_id)
            db.add(profile)

        profile.name = req.name
        profile.email = req.email
        profile.role = req.role.value
        profile.status = req.status.value
        profile.updated_at = at
        db.flush()

        logger.info(f"[Upsert] Profile {user_id} ({profile.role}, {profile.status})")
        return profile

    def get(self, db: Session, user_id: str) -> Optional[UserProfileModel]:
        return db.get(UserProfileModel, user_id)

    def require_bookable_interviewer(self, db: Session, interviewer_id: str) -> UserProfileModel:
        profile = self.get(db, interviewer_id)
        if (
            not profile
            or profile.role != UserRole.INTERVIEWER.value
            or profile.status != ProfileStatus.APPROVED.value
        ):
            raise ValidationError("Invalid or unapproved interviewer", {"interviewer_id": interviewer_id})
        return profile

    def bookable_interviewers(self, db: Session, interviewer_ids: Iterable[str]) -> Dict[str, InterviewerIdentity]:
        ids = set(interviewer_ids)
        if not ids:
            return {}

        profiles = db.query(UserProfileModel).filter(
            UserProfileModel.user_id.in_(ids),
            UserProfileModel.role == UserRole.INTERVIEWER.value,
            UserProfileModel.status == ProfileStatus.APPROVED.value,
        ).all()
        return {
            p.user_id: InterviewerIdentity(id=p.user_id, name=p.name, email=p.email)
            for p in profiles
        }
