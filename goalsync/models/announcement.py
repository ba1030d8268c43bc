from sqlalchemy import Column, String, DateTime, Text, JSON
from goalsync.core.database import Base, new_id, utcnow


class Announcement(Base):
    __tablename__ = "announcements"

    id = Column(String, primary_key=True, default=new_id)
    team_id = Column(String, index=True, nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(String, default="normal")  # "normal", "high"
    created_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
    read_by = Column(JSON, default=list)
