import uuid
from sqlalchemy import Column, Integer, DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime


class UserProgress(Base):
    __tablename__ = "user_progress"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    overall_score = Column(Integer, nullable=False, default=0)
    speaking_score = Column(Integer, nullable=False, default=0)
    writing_score = Column(Integer, nullable=False, default=0)
    reading_score = Column(Integer, nullable=False, default=0)
    listening_score = Column(Integer, nullable=False, default=0)
    tests_completed = Column(Integer, nullable=False, default=0)
    questions_answered = Column(Integer, nullable=False, default=0)
    study_streak = Column(Integer, nullable=False, default=0)
    total_study_time = Column(Integer, nullable=False, default=0)  # minutes
    last_active_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    updated_at = Column(DateTime(timezone=True), onupdate=get_current_utc_datetime)

    user = relationship("User", back_populates="progress")
