from sqlalchemy import Column, String, DateTime, Boolean
from goalsync.core.database import Base, new_id, utcnow


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=new_id)
    user_id = Column(String, index=True, nullable=False)
    team_id = Column(String, index=True, nullable=True)
    # "stats_approved", "stats_rejected", "stats_released", "stats_needed", "approval_needed"
    type = Column(String, nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    related_id = Column(String, index=True, nullable=True)  # match id or stats id
    read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow, index=True)
