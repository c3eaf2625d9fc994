import uuid
from sqlalchemy import Column, String, Integer, Float, DateTime, JSON, Enum, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import UsageType


class AIUsageLog(Base):
    __tablename__ = "ai_usage_logs"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        PG_UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    usage_type = Column(Enum(UsageType), nullable=False)
    provider = Column(String, nullable=True)
    session_id = Column(PG_UUID(as_uuid=True), nullable=True)
    credits = Column(Integer, nullable=False, default=0)
    audio_seconds = Column(Float, nullable=False, default=0.0)
    input_tokens = Column(Integer, nullable=False, default=0)
    output_tokens = Column(Integer, nullable=False, default=0)
    usage_metadata = Column("metadata", JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)

    user = relationship("User", back_populates="usage_logs")
