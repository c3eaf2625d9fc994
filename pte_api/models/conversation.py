import uuid
from sqlalchemy import Column, String, Integer, Float, Text, DateTime, JSON, Enum, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import ConversationStatus, TurnRole


class ConversationSession(Base):
    __tablename__ = "conversation_sessions"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    session_type = Column(String, nullable=False, default="customer_support")
    status = Column(Enum(ConversationStatus), nullable=False, default=ConversationStatus.active)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    ai_provider = Column(String, nullable=True)
    model_used = Column(String, nullable=True)
    total_turns = Column(Integer, nullable=False, default=0)
    total_duration_ms = Column(Integer, nullable=False, default=0)
    token_usage = Column(JSON, nullable=True)
    # "metadata" is reserved on declarative classes
    session_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)

    user = relationship("User", back_populates="conversation_sessions")
    turns = relationship(
        "ConversationTurn",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ConversationTurn.turn_index",
    )


class ConversationTurn(Base):
    __tablename__ = "conversation_turns"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("conversation_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    turn_index = Column(Integer, nullable=False)
    role = Column(Enum(TurnRole), nullable=False)
    audio_url = Column(Text, nullable=True)
    transcript = Column(Text, nullable=False)
    scores = Column(JSON, nullable=True)
    duration_ms = Column(Integer, nullable=True)
    words_per_minute = Column(Float, nullable=True)
    pause_count = Column(Integer, nullable=True)
    filler_word_count = Column(Integer, nullable=True)
    turn_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)

    session = relationship("ConversationSession", back_populates="turns")
