import uuid
from sqlalchemy import Column, DateTime, Enum, ForeignKey, String, Boolean, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from pte_api.db.deps import Base
from pte_api.utils.datetime_utils import get_current_utc_datetime
from pte_api.utils.enums import SubscriptionStatus, PlanType


class Subscription(Base):
    __tablename__ = "user_subscriptions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_type = Column(Enum(PlanType), nullable=False, default=PlanType.free)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)  # NULL = open-ended

    auto_renew = Column(Boolean, nullable=False, default=True)
    payment_method = Column(String, nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)

    status = Column(
        Enum(SubscriptionStatus),
        nullable=False,
        default=SubscriptionStatus.active
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=get_current_utc_datetime)
    updated_at = Column(DateTime(timezone=True), onupdate=get_current_utc_datetime)

    user = relationship("User", back_populates="subscriptions")
