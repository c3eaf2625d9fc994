import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, JSON, Enum, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import Difficulty, Section


class PteQuestion(Base):
    __tablename__ = "pte_questions"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    test_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("pte_tests.id", ondelete="CASCADE"), nullable=True, index=True
    )
    question = Column(Text, nullable=False)
    question_type = Column(String, nullable=False, index=True)
    section = Column(Enum(Section), nullable=False, index=True)
    # Options, prompt text, audio/image URLs, word limits...
    question_data = Column(JSON, nullable=True)
    # Shape depends on question_type: str, list[str] or dict
    correct_answer = Column(JSON, nullable=True)
    points = Column(Integer, nullable=False, default=1)
    order_index = Column(Integer, nullable=False, default=0)
    difficulty = Column(Enum(Difficulty), nullable=True)
    tags = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    updated_at = Column(DateTime(timezone=True), onupdate=get_current_utc_datetime)

    test = relationship("PteTest", back_populates="questions")
    answers = relationship("AttemptAnswer", back_populates="question", cascade="all, delete-orphan")
    practice_attempts = relationship("PracticeAttempt", back_populates="question", cascade="all, delete-orphan")
