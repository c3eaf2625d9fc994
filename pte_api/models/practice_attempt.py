import uuid
from sqlalchemy import Column, String, Integer, Text, DateTime, JSON, Enum, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import PracticeStage, Section


class PracticeAttempt(Base):
    __tablename__ = "practice_attempts"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("pte_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_type = Column(String, nullable=False)
    section = Column(Enum(Section), nullable=False)
    user_answer = Column(JSON, nullable=True)
    transcript = Column(Text, nullable=True)
    audio_key = Column(Text, nullable=True)
    duration_ms = Column(Integer, nullable=True)
    stage = Column(Enum(PracticeStage), nullable=False, default=PracticeStage.processing)
    score = Column(Integer, nullable=True)  # 0-90
    subscores = Column(JSON, nullable=True)
    feedback = Column(JSON, nullable=True)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)

    user = relationship("User", back_populates="practice_attempts")
    question = relationship("PteQuestion", back_populates="practice_attempts")
