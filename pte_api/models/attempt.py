import uuid
from sqlalchemy import (
    Column, Integer, Boolean, Text, DateTime, JSON, Enum, ForeignKey, UniqueConstraint, func
)
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import AttemptStatus


class Attempt(Base):
    __tablename__ = "test_attempts"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    test_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("pte_tests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status = Column(Enum(AttemptStatus), nullable=False, default=AttemptStatus.in_progress)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    total_score = Column(Integer, nullable=True)
    speaking_score = Column(Integer, nullable=True)
    writing_score = Column(Integer, nullable=True)
    reading_score = Column(Integer, nullable=True)
    listening_score = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    updated_at = Column(DateTime(timezone=True), onupdate=get_current_utc_datetime)

    user = relationship("User", back_populates="attempts")
    test = relationship("PteTest", back_populates="attempts")
    answers = relationship("AttemptAnswer", back_populates="attempt", cascade="all, delete-orphan")


class AttemptAnswer(Base):
    __tablename__ = "test_answers"
    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_test_answers_attempt_question"),
    )

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    attempt_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("test_attempts.id", ondelete="CASCADE"), nullable=False
    )
    question_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("pte_questions.id", ondelete="CASCADE"), nullable=False
    )
    user_answer = Column(JSON, nullable=True)
    transcript = Column(Text, nullable=True)
    audio_key = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=True)
    points_earned = Column(Integer, nullable=False, default=0)
    points_possible = Column(Integer, nullable=False, default=0)
    score = Column(Integer, nullable=True)  # 0-90
    ai_feedback = Column(JSON, nullable=True)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)

    attempt = relationship("Attempt", back_populates="answers")
    question = relationship("PteQuestion", back_populates="answers")
