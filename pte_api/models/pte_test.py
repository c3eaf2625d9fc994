import uuid
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, Enum, func
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import PteTestType, Section


class PteTest(Base):
    __tablename__ = "pte_tests"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    test_type = Column(Enum(PteTestType), nullable=False)
    section = Column(Enum(Section), nullable=True)  # NULL for full mock tests
    is_premium = Column(Boolean, nullable=False, default=False)
    duration = Column(Integer, nullable=True)  # minutes
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    updated_at = Column(DateTime(timezone=True), onupdate=get_current_utc_datetime)

    questions = relationship(
        "PteQuestion",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by="PteQuestion.order_index",
    )
    attempts = relationship("Attempt", back_populates="test", cascade="all, delete-orphan")
